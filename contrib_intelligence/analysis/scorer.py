#!/usr/bin/env python3
"""
Contribution Scorer
Weighted, log-scaled contribution score with diminishing returns
"""

import math
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from ..collectors.types import ContributorActivity

# Relative effort per activity type
CONTRIBUTION_WEIGHTS: Dict[str, float] = {
    'commits': 1.0,
    'prs_authored': 3.0,
    'prs_reviewed': 2.0,
    'issues_authored': 1.0,
    'issues_commented': 0.5,
}


@dataclass
class ContributionBreakdown:
    """Raw activity counts behind a score"""
    commits: int = 0
    prs_authored: int = 0
    prs_reviewed: int = 0
    issues_authored: int = 0
    issues_commented: int = 0

    def add(self, other: 'ContributionBreakdown') -> None:
        self.commits += other.commits
        self.prs_authored += other.prs_authored
        self.prs_reviewed += other.prs_reviewed
        self.issues_authored += other.issues_authored
        self.issues_commented += other.issues_commented

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ContributorScore:
    username: str
    score: float
    breakdown: ContributionBreakdown
    organization: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'username': self.username,
            'score': round(self.score, 4),
            'organization': self.organization,
            'breakdown': self.breakdown.to_dict(),
        }


def raw_score(activity: ContributorActivity) -> float:
    return sum(getattr(activity, field) * weight for field, weight in CONTRIBUTION_WEIGHTS.items())


def calculate_score(activity: ContributorActivity) -> float:
    """ln(weighted sum + 1); zero for an empty record"""
    return math.log(raw_score(activity) + 1)


def score_contributor(activity: ContributorActivity) -> ContributorScore:
    return ContributorScore(
        username=activity.username,
        score=calculate_score(activity),
        breakdown=ContributionBreakdown(
            commits=activity.commits,
            prs_authored=activity.prs_authored,
            prs_reviewed=activity.prs_reviewed,
            issues_authored=activity.issues_authored,
            issues_commented=activity.issues_commented,
        ),
        organization=activity.primary_org,
    )
