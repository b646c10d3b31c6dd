#!/usr/bin/env python3
"""
Pull Request Collector
PR authors from search listings, plus reviewers from each PR's detail page
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

from ..core.errors import FetchError
from ..core.timezone_utils import format_query_date, is_within_window, utc_now
from .base import BaseCollector
from .document import closest, find_datetime, text_of, user_from_href
from .filters import is_bot
from .listing import USER_LINK, add_unique, find_listing_rows, parse_listing_row, search_url, users_in
from .pagination import extract_next_page
from .types import ActivityMap, CollectorResult


def _sidebar_reviewers(doc: BeautifulSoup) -> List[str]:
    return users_in(doc, f'[data-testid="sidebar-reviewers"] {USER_LINK}')


def _review_comment_authors(doc: BeautifulSoup) -> List[str]:
    users = []
    for el in doc.select('.review-comment, .timeline-comment-wrapper'):
        link = el.select_one(USER_LINK)
        username = user_from_href(link.get('href')) if link else None
        if username:
            users.append(username)
    return users


def _participant_avatars(doc: BeautifulSoup) -> List[str]:
    return users_in(doc, f'.participant-avatar {USER_LINK}')


def _review_decisions(doc: BeautifulSoup) -> List[str]:
    return users_in(doc, f'[data-testid="review-decision"] {USER_LINK}')


def _review_thread_users(doc: BeautifulSoup) -> List[str]:
    users = []
    for link in doc.select(f'.js-comment-container {USER_LINK}'):
        if closest(link, '.review-comment, .review-thread') is None:
            continue
        username = user_from_href(link.get('href'))
        if username:
            users.append(username)
    return users


# Unlike row parsing every source contributes; results are unioned in order
REVIEWER_SOURCES: List[Callable[[BeautifulSoup], List[str]]] = [
    _sidebar_reviewers,
    _review_comment_authors,
    _participant_avatars,
    _review_decisions,
    _review_thread_users,
]


def extract_reviewers(doc: BeautifulSoup) -> List[str]:
    reviewers: List[str] = []
    seen = set()
    for source in REVIEWER_SOURCES:
        add_unique(reviewers, seen, source(doc))
    return reviewers


def extract_pr_author(doc: BeautifulSoup) -> Optional[str]:
    """Author login from a PR detail page header"""
    author = text_of(doc.select_one(f'{USER_LINK}.author'))
    if author:
        return author
    link = doc.select_one(f'.gh-header-meta {USER_LINK}')
    return user_from_href(link.get('href')) if link else None


@dataclass
class SinglePullRequest:
    """Contributors to one PR and who opened it"""
    contributors: ActivityMap = field(default_factory=dict)
    author: Optional[str] = None
    reviewers: List[str] = field(default_factory=list)


class PullRequestCollector(BaseCollector):
    """Collects PR authors page by page and reviewers from each PR's page"""

    def get_start_url(self, owner: str, repo: str, since: Optional[datetime] = None) -> str:
        """Merged PRs, server-side filtered by merge date"""
        query = 'is:pr is:merged'
        if since is not None:
            query += f' merged:>{format_query_date(since)}'
        return search_url(owner, repo, 'pulls', query)

    def get_open_prs_url(self, owner: str, repo: str, since: Optional[datetime] = None) -> str:
        query = 'is:pr is:open'
        if since is not None:
            query += f' updated:>{format_query_date(since)}'
        return search_url(owner, repo, 'pulls', query)

    def get_closed_unmerged_url(self, owner: str, repo: str, since: Optional[datetime] = None) -> str:
        query = 'is:pr is:closed is:unmerged'
        if since is not None:
            query += f' closed:>{format_query_date(since)}'
        return search_url(owner, repo, 'pulls', query)

    def collect_page(self, url: str, since: Optional[datetime] = None) -> CollectorResult:
        result = CollectorResult()
        doc = self.fetch_document(url)

        rows = find_listing_rows(doc, 'pull_request', '/pull/')
        self.trace(f"Found {len(rows)} PR rows on page")

        detail_pages = []
        for row in rows:
            item = parse_listing_row(row, '/pull/')
            if item is None:
                self.trace("Could not extract username from PR row")
                continue

            result.items_processed += 1

            if since is not None and item.date is not None and not is_within_window(item.date, since):
                self.trace(f"Skipping old PR from {item.date.isoformat()}")
                continue

            if is_bot(item.username):
                self.trace(f"Skipping bot: {item.username}")
                continue

            if item.url:
                detail_pages.append((item.url, item.username))

            activity = result.activity_for(item.username)
            activity.prs_authored += 1
            activity.touch(item.date)

        for pr_url, author in detail_pages:
            if self.cancelled():
                self.trace("Cancelled, skipping remaining PR detail pages")
                break
            self._collect_reviewers(pr_url, author, result)

        result.next_page = extract_next_page(doc, 'prs')
        self.trace(f"Page complete: {result.items_processed} PRs, "
                   f"{len(result.contributors)} unique contributors")
        return result

    def _collect_reviewers(self, pr_url: str, author: str, result: CollectorResult) -> None:
        """Count reviewers on one PR page; failures cost only this PR's reviewers"""
        try:
            doc = self.fetch_document(pr_url)
        except FetchError as e:
            self.logger.warning(f"Failed to fetch PR detail page {pr_url}: {e}")
            return

        for reviewer in extract_reviewers(doc):
            if reviewer == author:
                continue
            if is_bot(reviewer):
                self.trace(f"Skipping bot reviewer: {reviewer}")
                continue
            result.activity_for(reviewer).prs_reviewed += 1

    def collect_single_pr(self, owner: str, repo: str, pr_number: int) -> SinglePullRequest:
        """Author and reviewers of one PR; fetch errors propagate to the caller"""
        pr_url = f"https://github.com/{owner}/{repo}/pull/{pr_number}"
        doc = self.fetch_document(pr_url)
        single = SinglePullRequest()
        result = CollectorResult(contributors=single.contributors)

        author = extract_pr_author(doc)
        single.author = author
        if author and not is_bot(author):
            activity = result.activity_for(author)
            activity.prs_authored = 1
            header = doc.select_one('.gh-header-meta')
            opened = find_datetime(header) if header is not None else None
            activity.touch(opened or utc_now())

        for reviewer in extract_reviewers(doc):
            if reviewer == author or is_bot(reviewer):
                continue
            single.reviewers.append(reviewer)
            result.activity_for(reviewer).prs_reviewed += 1

        self.trace(f"Single PR: author={author}, {len(single.reviewers)} reviewers")
        return single
