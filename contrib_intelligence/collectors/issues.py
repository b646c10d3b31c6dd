#!/usr/bin/env python3
"""
Issue Collector
Issue authors from search listings, plus commenters from each issue's detail page
"""

from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from ..core.errors import FetchError
from ..core.timezone_utils import format_query_date, is_within_window
from .base import BaseCollector
from .document import closest, find_datetime, user_from_href
from .filters import is_bot
from .listing import USER_LINK, add_unique, find_listing_rows, parse_listing_row, search_url, users_in
from .pagination import extract_next_page
from .types import CollectorResult

AUTHOR_LINK = 'a.author, a[data-hovercard-type="user"]'

# A comment without its own timestamp takes the enclosing item's
DATED_CONTAINERS = '.timeline-comment, .js-comment-container, .timeline-comment-group, .js-timeline-item'


def _first_user(el, selector: str = AUTHOR_LINK) -> Optional[str]:
    link = el.select_one(selector)
    return user_from_href(link.get('href')) if link is not None else None


def comment_date(el: Tag) -> Optional[datetime]:
    """Timestamp of the nearest enclosing comment or timeline item that has one"""
    node = el
    while node is not None:
        container = closest(node, DATED_CONTAINERS)
        if container is None:
            return None
        date = find_datetime(container)
        if date is not None:
            return date
        node = container.parent
    return None


def _in_window(el: Tag, since: Optional[datetime]) -> bool:
    """Undated comments are kept"""
    if since is None:
        return True
    date = comment_date(el)
    return date is None or is_within_window(date, since)


def _timeline_authors(doc: BeautifulSoup, since: Optional[datetime]) -> List[str]:
    users = []
    for el in doc.select('.timeline-comment-group, .js-timeline-item'):
        if not _in_window(el, since):
            continue
        username = _first_user(el)
        if username:
            users.append(username)
    return users


def _comment_body_authors(doc: BeautifulSoup, since: Optional[datetime]) -> List[str]:
    users = []
    for body in doc.select('.comment-body, .js-comment-body'):
        container = closest(body, '.timeline-comment')
        if container is None or not _in_window(body, since):
            continue
        username = _first_user(container)
        if username:
            users.append(username)
    return users


def _comment_container_authors(doc: BeautifulSoup, since: Optional[datetime]) -> List[str]:
    users = []
    for el in doc.select('.js-comment-container'):
        if not _in_window(el, since):
            continue
        username = _first_user(el, USER_LINK)
        if username:
            users.append(username)
    return users


def _sidebar_participants(doc: BeautifulSoup) -> List[str]:
    return users_in(doc, f'[data-testid="sidebar-participants"] {USER_LINK}')


# Every source here checks each comment's date against the window
COMMENTER_SOURCES = [
    _timeline_authors,
    _comment_body_authors,
    _comment_container_authors,
]


def extract_commenters(doc: BeautifulSoup, since: Optional[datetime] = None) -> List[str]:
    """Unique commenters inside the window

    The sidebar participant list carries no dates, so it is only read when no
    comment could be found at all.
    """
    commenters: List[str] = []
    seen = set()
    for source in COMMENTER_SOURCES:
        add_unique(commenters, seen, source(doc, since))
    if not commenters and not doc.select_one(DATED_CONTAINERS):
        add_unique(commenters, seen, _sidebar_participants(doc))
    return commenters


class IssueCollector(BaseCollector):
    """Collects issue authors page by page and commenters from each issue's page"""

    def get_start_url(self, owner: str, repo: str, since: Optional[datetime] = None) -> str:
        """Issues created inside the window"""
        query = 'is:issue'
        if since is not None:
            query += f' created:>{format_query_date(since)}'
        return search_url(owner, repo, 'issues', query)

    def get_active_issues_url(self, owner: str, repo: str, since: Optional[datetime] = None) -> str:
        """Issues with any update inside the window, including older ones"""
        query = 'is:issue'
        if since is not None:
            query += f' updated:>{format_query_date(since)}'
        return search_url(owner, repo, 'issues', query)

    def collect_page(self, url: str, since: Optional[datetime] = None) -> CollectorResult:
        result = CollectorResult()
        doc = self.fetch_document(url)

        rows = find_listing_rows(doc, 'issue', '/issues/', exclude_fragment='/pull/')
        self.trace(f"Found {len(rows)} issue rows on page")

        detail_pages = []
        for row in rows:
            item = parse_listing_row(row, '/issues/')
            if item is None:
                self.trace("Could not extract username from issue row")
                continue

            result.items_processed += 1

            if since is not None and item.date is not None and not is_within_window(item.date, since):
                self.trace(f"Skipping old issue from {item.date.isoformat()}")
                continue

            if is_bot(item.username):
                self.trace(f"Skipping bot: {item.username}")
                continue

            if item.url:
                detail_pages.append(item.url)

            activity = result.activity_for(item.username)
            activity.issues_authored += 1
            activity.touch(item.date)

        for issue_url in detail_pages:
            if self.cancelled():
                self.trace("Cancelled, skipping remaining issue detail pages")
                break
            self._collect_commenters(issue_url, result, since)

        result.next_page = extract_next_page(doc, 'issues')
        self.trace(f"Page complete: {result.items_processed} issues, "
                   f"{len(result.contributors)} unique contributors")
        return result

    def _collect_commenters(self, issue_url: str, result: CollectorResult,
                            since: Optional[datetime]) -> None:
        try:
            doc = self.fetch_document(issue_url)
        except FetchError as e:
            self.logger.warning(f"Failed to fetch issue detail page {issue_url}: {e}")
            return

        for commenter in extract_commenters(doc, since):
            if is_bot(commenter):
                self.trace(f"Skipping bot commenter: {commenter}")
                continue
            result.activity_for(commenter).issues_commented += 1

        # Collapsed comments load over XHR and are not followed
        if doc.select_one('.ajax-pagination-btn, .js-ajax-pagination'):
            self.logger.debug(f"Issue has hidden comments: {issue_url}")
