#!/usr/bin/env python3
"""
Collector Types
Per-contributor activity records and page-level collection results
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set

from ..core.timezone_utils import EPOCH, utc_now
from ..organization.types import OrganizationAffiliation

ActivityMap = Dict[str, 'ContributorActivity']


@dataclass
class ContributorActivity:
    """Activity counts for one contributor within a run"""
    username: str
    commits: int = 0
    prs_authored: int = 0
    prs_reviewed: int = 0
    issues_authored: int = 0
    issues_commented: int = 0
    emails: Set[str] = field(default_factory=set)
    last_activity_date: datetime = EPOCH
    profile_fetched: bool = False
    affiliations: List[OrganizationAffiliation] = field(default_factory=list)
    primary_org: Optional[str] = None

    def touch(self, date: Optional[datetime]) -> None:
        """Advance last_activity_date if date is later"""
        if date is not None and date > self.last_activity_date:
            self.last_activity_date = date

    def absorb(self, other: 'ContributorActivity') -> None:
        """Merge another record for the same username into this one"""
        self.commits += other.commits
        self.prs_authored += other.prs_authored
        self.prs_reviewed += other.prs_reviewed
        self.issues_authored += other.issues_authored
        self.issues_commented += other.issues_commented
        self.emails |= other.emails
        self.touch(other.last_activity_date)
        self.profile_fetched = self.profile_fetched or other.profile_fetched

        # Longer affiliation list wins; primary org follows the winning list
        if len(other.affiliations) > len(self.affiliations):
            self.affiliations = list(other.affiliations)
            self.primary_org = other.primary_org

    def copy(self) -> 'ContributorActivity':
        return ContributorActivity(
            username=self.username,
            commits=self.commits,
            prs_authored=self.prs_authored,
            prs_reviewed=self.prs_reviewed,
            issues_authored=self.issues_authored,
            issues_commented=self.issues_commented,
            emails=set(self.emails),
            last_activity_date=self.last_activity_date,
            profile_fetched=self.profile_fetched,
            affiliations=list(self.affiliations),
            primary_org=self.primary_org,
        )

    def to_dict(self) -> dict:
        return {
            'username': self.username,
            'commits': self.commits,
            'prs_authored': self.prs_authored,
            'prs_reviewed': self.prs_reviewed,
            'issues_authored': self.issues_authored,
            'issues_commented': self.issues_commented,
            'emails': sorted(self.emails),
            'last_activity_date': self.last_activity_date.isoformat(),
            'profile_fetched': self.profile_fetched,
            'affiliations': [a.to_dict() for a in self.affiliations],
            'primary_org': self.primary_org,
        }


def create_empty_activity(username: str) -> ContributorActivity:
    return ContributorActivity(username=username)


@dataclass
class CollectorResult:
    """One page worth of collected activity

    items_processed counts every parsed item, including ones later dropped as bots.
    """
    contributors: ActivityMap = field(default_factory=dict)
    next_page: Optional[str] = None
    items_processed: int = 0
    hit_cutoff: bool = False

    def activity_for(self, username: str) -> ContributorActivity:
        """Get or create the record for username"""
        activity = self.contributors.get(username)
        if activity is None:
            activity = create_empty_activity(username)
            self.contributors[username] = activity
        return activity


@dataclass
class UserProfile:
    """Public profile fields used for organization detection"""
    username: str
    company: Optional[str] = None
    bio: Optional[str] = None
    orgs: List[str] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=utc_now)


def merge_contributors(existing: ActivityMap, incoming: ActivityMap) -> ActivityMap:
    """Merge incoming records into existing (in place) and return it

    Records inserted for new usernames are copies, so later merges never
    mutate the incoming map.
    """
    for username, activity in incoming.items():
        current = existing.get(username)
        if current is None:
            existing[username] = activity.copy()
        else:
            current.absorb(activity)
    return existing
