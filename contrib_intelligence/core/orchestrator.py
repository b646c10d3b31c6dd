#!/usr/bin/env python3
"""
Collection Orchestrator
Runs the collectors in a fixed stage order, merges their pages and enriches contributors with organizations
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, Optional

from ..collectors.commits import CommitCollector
from ..collectors.issues import IssueCollector
from ..collectors.pr_commenters import collect_pr_commenters
from ..collectors.pr_commits import collect_pr_commits
from ..collectors.profiles import ProfileFetcher
from ..collectors.pull_requests import PullRequestCollector
from ..collectors.types import ActivityMap, CollectorResult, UserProfile, merge_contributors
from ..organization.detector import OrganizationDetector
from .beautiful_logger import BeautifulLogger
from .config import CollectionOptions
from .errors import FetchError
from .fetch_client import FetchClient

logger = logging.getLogger(__name__)


@dataclass
class CollectionStats:
    """Totals across the run; commits counts every processed commit row"""
    commits: int = 0
    prs_authored: int = 0
    prs_reviewed: int = 0
    issues_authored: int = 0
    issues_commented: int = 0
    unique_contributors: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class OrgStats:
    with_affiliation: int = 0
    unknown: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CollectionResult:
    """Everything collected for one target

    org_stats is None when the run stopped before organization detection.
    """
    contributors: ActivityMap = field(default_factory=dict)
    stats: CollectionStats = field(default_factory=CollectionStats)
    org_stats: Optional[OrgStats] = None
    aborted: bool = False


class CollectionOrchestrator:
    """Drives one collection run against a repository or a single pull request"""

    def __init__(self, client: FetchClient, options: Optional[CollectionOptions] = None):
        self.client = client
        self.options = options or CollectionOptions()
        self.contributors: ActivityMap = {}
        self.stats = CollectionStats()
        self.aborted = False
        self.blog = BeautifulLogger(__name__)

    # -- shared plumbing -------------------------------------------------

    def _check_cancelled(self) -> bool:
        if self.options.cancellation.cancelled:
            if not self.aborted:
                logger.info("Cancellation requested, returning partial results")
            self.aborted = True
        return self.aborted

    def _progress(self, stage: str, current: int, total: Optional[int]) -> None:
        if self.options.on_progress:
            self.options.on_progress(stage, current, total)

    def _merge(self, incoming: ActivityMap) -> None:
        merge_contributors(self.contributors, incoming)

    def _result(self, org_stats: Optional[OrgStats] = None) -> CollectionResult:
        self.stats.unique_contributors = len(self.contributors)
        return CollectionResult(
            contributors=self.contributors,
            stats=self.stats,
            org_stats=org_stats,
            aborted=self.aborted,
        )

    def _run_stage(self, stage: str, collect_page: Callable[[str], CollectorResult],
                   start_url: str, on_page: Callable[[CollectorResult], int],
                   required: bool = False) -> None:
        """Page through one listing until there is no next page or the run is cancelled

        A failing page ends the stage with what it has, unless the stage is
        required and nothing has been fetched yet.
        """
        url: Optional[str] = start_url
        pages = 0

        while url and not self._check_cancelled():
            try:
                result = collect_page(url)
            except FetchError as e:
                if required and pages == 0:
                    raise
                logger.warning(f"[{stage}] page {pages + 1} failed, keeping {pages} page(s): {e}")
                break

            self._merge(result.contributors)
            pages += 1
            self._progress(stage, on_page(result), None)
            logger.debug(f"[{stage}] page {pages}: {result.items_processed} items processed")
            url = result.next_page

        self.blog.phase_end(stage, {'pages': pages, 'contributors': len(self.contributors)})

    def _count_prs(self, result: CollectorResult) -> int:
        for activity in result.contributors.values():
            self.stats.prs_authored += activity.prs_authored
            self.stats.prs_reviewed += activity.prs_reviewed
        return self.stats.prs_authored + self.stats.prs_reviewed

    def _count_issues(self, result: CollectorResult) -> int:
        for activity in result.contributors.values():
            self.stats.issues_authored += activity.issues_authored
            self.stats.issues_commented += activity.issues_commented
        return self.stats.issues_authored + self.stats.issues_commented

    def _count_commits(self, result: CollectorResult) -> int:
        self.stats.commits += result.items_processed
        return self.stats.commits

    # -- runs ------------------------------------------------------------

    def run_repository(self, owner: str, repo: str) -> CollectionResult:
        """Commits, merged PRs, open PRs, issues, then profiles and organizations"""
        since = self.options.since
        cancellation = self.options.cancellation
        verbose = self.options.verbose
        self.blog.phase_start("Collection", f"{owner}/{repo}")

        commits = CommitCollector(self.client, cancellation, verbose)
        prs = PullRequestCollector(self.client, cancellation, verbose)
        issues = IssueCollector(self.client, cancellation, verbose)

        stages = [
            ('commits', lambda url: commits.collect_page(url, since),
             commits.get_start_url(owner, repo, since), self._count_commits, True),
            ('prs-merged', lambda url: prs.collect_page(url, since),
             prs.get_start_url(owner, repo, since), self._count_prs, False),
            ('prs-open', lambda url: prs.collect_page(url, since),
             prs.get_open_prs_url(owner, repo, since), self._count_prs, False),
            ('issues', lambda url: issues.collect_page(url, since),
             issues.get_start_url(owner, repo, since), self._count_issues, False),
        ]

        for stage, collect_page, start_url, on_page, required in stages:
            if self._check_cancelled():
                return self._result()
            self._run_stage(stage, collect_page, start_url, on_page, required)

        if self._check_cancelled():
            return self._result()
        return self._enrich()

    def run_pull_request(self, owner: str, repo: str, pr_number: int) -> CollectionResult:
        """PR page (required), commits tab and conversation (best effort), then enrichment"""
        self.blog.phase_start("Collection", f"{owner}/{repo}#{pr_number}")
        if self._check_cancelled():
            return self._result()

        collector = PullRequestCollector(self.client, self.options.cancellation, self.options.verbose)
        single = collector.collect_single_pr(owner, repo, pr_number)
        self._merge(single.contributors)
        self.stats.prs_authored += sum(a.prs_authored for a in single.contributors.values())
        self.stats.prs_reviewed += sum(a.prs_reviewed for a in single.contributors.values())
        self._progress('pr', 1, 1)

        sub_views = [
            ('pr-commits', collect_pr_commits, 'commits'),
            ('pr-commenters', collect_pr_commenters, 'issues_commented'),
        ]
        for stage, collect, counter in sub_views:
            if self._check_cancelled():
                return self._result()
            try:
                found = collect(self.client, owner, repo, pr_number)
            except FetchError as e:
                logger.warning(f"[{stage}] failed for {owner}/{repo}#{pr_number}: {e}")
                continue
            self._merge(found)
            total = getattr(self.stats, counter) + sum(getattr(a, counter) for a in found.values())
            setattr(self.stats, counter, total)
            self._progress(stage, len(found), None)

        if self._check_cancelled():
            return self._result()
        return self._enrich()

    def _enrich(self) -> CollectionResult:
        """Fetch profiles, then detect organizations for contributors that have one"""
        self.blog.phase_start("Profiles", f"{len(self.contributors)} contributors")
        fetcher = ProfileFetcher(self.client, self.options.cancellation, self.options.verbose)
        profiles: Dict[str, UserProfile] = fetcher.fetch_profiles(
            list(self.contributors),
            on_progress=lambda done, total: self._progress('profiles', done, total),
        )

        for username in profiles:
            self.contributors[username].profile_fetched = True

        if self._check_cancelled():
            return self._result()

        detector = OrganizationDetector(self.options.verbose)
        org_stats = OrgStats()
        total = len(self.contributors)
        detected = 0

        for username, activity in self.contributors.items():
            profile = profiles.get(username)
            if profile is None:
                activity.affiliations = []
                activity.primary_org = None
                org_stats.unknown += 1
                continue

            detection = detector.detect_for_contributor(profile, activity.emails)
            activity.affiliations = detection.affiliations
            activity.primary_org = detection.primary_org
            if detection.affiliations:
                org_stats.with_affiliation += 1
            else:
                org_stats.unknown += 1

            detected += 1
            self._progress('organizations', detected, total)

        self.blog.phase_end("Organizations", org_stats.to_dict())
        return self._result(org_stats)


def collect_contributors(client: FetchClient, owner: str, repo: str,
                         options: Optional[CollectionOptions] = None) -> CollectionResult:
    """Collect and enrich all contributors to a repository"""
    return CollectionOrchestrator(client, options).run_repository(owner, repo)


def collect_pr_contributors(client: FetchClient, owner: str, repo: str, pr_number: int,
                            options: Optional[CollectionOptions] = None) -> CollectionResult:
    """Collect and enrich the contributors to one pull request; the PR page itself must load"""
    return CollectionOrchestrator(client, options).run_pull_request(owner, repo, pr_number)
