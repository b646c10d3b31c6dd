#!/usr/bin/env python3
"""
Organization Aggregator
Groups scored contributors by primary organization and merges results across targets
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Tuple

from ..collectors.types import ActivityMap, ContributorActivity, merge_contributors
from .scorer import ContributionBreakdown, ContributorScore, score_contributor

logger = logging.getLogger(__name__)

TOP_CONTRIBUTORS = 3


@dataclass
class OrganizationReport:
    name: str
    score: float
    contributor_count: int
    breakdown: ContributionBreakdown
    top_contributors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'score': round(self.score, 4),
            'contributor_count': self.contributor_count,
            'breakdown': self.breakdown.to_dict(),
            'top_contributors': list(self.top_contributors),
        }


@dataclass
class AggregationResult:
    organizations: List[OrganizationReport]
    unknown: List[ContributorScore]


@dataclass
class MultiRepoResult:
    contributors: ActivityMap
    repos: List[str]


def _by_score(score: ContributorScore):
    return -score.score, score.username


def aggregate_by_organization(contributors: Mapping[str, ContributorActivity]) -> AggregationResult:
    """Sum member scores per primary organization; contributors without one are 'unknown'"""
    members: Dict[str, List[ContributorScore]] = {}
    unknown: List[ContributorScore] = []

    for activity in contributors.values():
        scored = score_contributor(activity)
        if activity.primary_org is None:
            unknown.append(scored)
        else:
            members.setdefault(activity.primary_org, []).append(scored)

    organizations = []
    for name, scores in members.items():
        breakdown = ContributionBreakdown()
        for s in scores:
            breakdown.add(s.breakdown)
        ranked = sorted(scores, key=_by_score)
        organizations.append(OrganizationReport(
            name=name,
            score=sum(s.score for s in scores),
            contributor_count=len(scores),
            breakdown=breakdown,
            top_contributors=[s.username for s in ranked[:TOP_CONTRIBUTORS]],
        ))

    organizations.sort(key=lambda o: (-o.score, o.name))
    unknown.sort(key=_by_score)

    logger.debug(f"Aggregated {len(contributors)} contributors into {len(organizations)} organizations "
                 f"({len(unknown)} unknown)")
    return AggregationResult(organizations=organizations, unknown=unknown)


def aggregate_multi_repo(results: Iterable[Tuple[str, Mapping[str, ContributorActivity]]]) -> MultiRepoResult:
    """Merge (repo, contributors) pairs; input records are copied, never aliased"""
    merged: ActivityMap = {}
    repos: List[str] = []

    for repo, contributors in results:
        repos.append(repo)
        merge_contributors(merged, contributors)

    return MultiRepoResult(contributors=merged, repos=repos)
