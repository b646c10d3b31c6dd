#!/usr/bin/env python3
"""
PR Commits Collector
Commit authors from a single pull request's commits tab
"""

import logging
from typing import Optional

from bs4 import Tag

from ..core.fetch_client import FetchClient
from .document import first_match, first_nonempty_selection, parse_document, text_of, user_from_href
from .filters import is_bot
from .listing import USER_LINK
from .types import ActivityMap, CollectorResult

logger = logging.getLogger(__name__)

PR_COMMIT_ROW_SELECTORS = [
    '[data-url*="/commit/"]',
    '.commit, .TimelineItem--condensed',
    '.Box-row:has(a[href*="/commit/"])',
    'li:has(a[href*="/commit/"])',
]


def _from_user_link(el: Tag) -> Optional[str]:
    link = el.select_one(USER_LINK)
    if link is None:
        return None
    username = user_from_href(link.get('href'))
    if username:
        return username
    text = text_of(link)
    if text and ' ' not in text and '/' not in text:
        return text
    return None


def _from_author_text(el: Tag) -> Optional[str]:
    return text_of(el.select_one('.commit-author, .user-mention')) or None


def _from_profile_link(el: Tag) -> Optional[str]:
    for link in el.select('a[href^="/"]'):
        username = user_from_href(link['href'], strict=True)
        if username:
            return username
    return None


COMMIT_AUTHOR_STRATEGIES = [
    _from_user_link,
    _from_author_text,
    _from_profile_link,
]


def collect_pr_commits(client: FetchClient, owner: str, repo: str, pr_number: int) -> ActivityMap:
    """Count commits per author on a PR; fetch errors propagate"""
    url = f"https://github.com/{owner}/{repo}/pull/{pr_number}/commits"
    logger.debug(f"Fetching PR commits: {url}")
    doc = parse_document(client.fetch(url).content)

    result = CollectorResult()
    rows = first_nonempty_selection(doc, PR_COMMIT_ROW_SELECTORS)
    logger.debug(f"Found {len(rows)} commit rows")

    for row in rows:
        username = first_match(COMMIT_AUTHOR_STRATEGIES, row)
        if not username:
            continue
        if is_bot(username):
            logger.debug(f"Skipping bot: {username}")
            continue
        result.activity_for(username).commits += 1

    logger.debug(f"Extracted {len(result.contributors)} unique commit authors")
    return result.contributors
