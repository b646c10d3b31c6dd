#!/usr/bin/env python3
"""
Commit Collector
Commit authors from a repository's commit list, paged by the 'Older' cursor
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bs4 import Tag

from ..core.timezone_utils import is_within_window
from .base import BaseCollector
from .document import (
    find_datetime,
    first_match,
    first_nonempty_selection,
    text_of,
    user_from_href,
)
from .filters import is_bot, is_generic_email
from .pagination import extract_next_page
from .types import CollectorResult

# Row selectors, newest page layout first
COMMIT_ROW_SELECTORS = [
    '[data-testid="commit-row-item"]',
    'li:has(a[aria-label^="commits by "])',
    '[data-testid="commit-row"]',
    '.TimelineItem',
    '[data-commits-list-item]',
    'div.commit',
    'li:has(a[data-hovercard-type="user"])',
    'div:has(relative-time):has(a[href^="/"]:not([href*="commit"]))',
]

COMMITS_BY_LABEL = re.compile(r'^commits by (.+)$')


def _from_avatar_link(el: Tag) -> Optional[str]:
    link = el.select_one('[data-testid="avatar-icon-link"]')
    return user_from_href(link.get('href')) if link else None


def _from_user_hovercard(el: Tag) -> Optional[str]:
    link = el.select_one('a[data-hovercard-type="user"]')
    return user_from_href(link.get('href')) if link else None


def _from_author_text(el: Tag) -> Optional[str]:
    return text_of(el.select_one('.commit-author, .author')) or None


def _from_aria_label(el: Tag) -> Optional[str]:
    link = el.select_one('a[aria-label^="commits by "]')
    if link is None:
        return None
    match = COMMITS_BY_LABEL.match(link.get('aria-label', ''))
    return match.group(1) if match else None


def _from_any_profile_link(el: Tag) -> Optional[str]:
    for link in el.select('a[href]'):
        username = user_from_href(link['href'], strict=True)
        if username:
            return username
    return None


USERNAME_STRATEGIES = [
    _from_avatar_link,
    _from_user_hovercard,
    _from_author_text,
    _from_aria_label,
    _from_any_profile_link,
]


@dataclass
class CommitItem:
    username: str
    date: Optional[datetime]
    email: Optional[str]


def parse_commit_row(el: Tag) -> Optional[CommitItem]:
    """Author, date and (rarely shown) email for one commit row"""
    username = first_match(USERNAME_STRATEGIES, el)
    if not username:
        return None

    email = None
    mailto = el.select_one('a[href^="mailto:"]')
    if mailto is not None:
        email = mailto['href'][len('mailto:'):].strip() or None

    return CommitItem(username=username, date=find_datetime(el), email=email)


class CommitCollector(BaseCollector):
    """Collects commit authors; stops paging at the first commit outside the window"""

    def get_start_url(self, owner: str, repo: str, since: Optional[datetime] = None) -> str:
        # The commit list has no date filter; the window is applied client-side
        return f"https://github.com/{owner}/{repo}/commits"

    def collect_page(self, url: str, since: Optional[datetime] = None) -> CollectorResult:
        """Collect one page of commits

        Rows are assumed newest first. The first row dated at or before since
        ends the page and suppresses the next-page link, even when later rows
        would be inside the window.
        """
        result = CollectorResult()
        doc = self.fetch_document(url)

        rows = first_nonempty_selection(doc, COMMIT_ROW_SELECTORS)
        if not rows:
            self.logger.warning(f"No commit rows recognised on {url}")

        for row in rows:
            item = parse_commit_row(row)
            if item is None:
                self.trace("Could not extract username from commit row")
                continue

            result.items_processed += 1

            if since is not None and item.date is not None and not is_within_window(item.date, since):
                result.hit_cutoff = True
                self.trace(f"Hit time cutoff at {item.date.isoformat()}")
                break

            if is_bot(item.username):
                self.trace(f"Skipping bot: {item.username}")
                continue

            activity = result.activity_for(item.username)
            activity.commits += 1
            if item.email and not is_generic_email(item.email):
                activity.emails.add(item.email.lower())
            activity.touch(item.date)

        if not result.hit_cutoff:
            result.next_page = extract_next_page(doc, 'commits')

        self.trace(f"Page complete: {result.items_processed} commits, "
                   f"{len(result.contributors)} unique contributors")
        return result
