#!/usr/bin/env python3
"""
PR Commenters Collector
Everyone who commented on a single pull request's conversation
"""

import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from ..core.fetch_client import FetchClient
from .document import closest, parse_document, text_of, user_from_href
from .filters import is_bot
from .listing import USER_LINK, add_unique
from .types import ActivityMap, CollectorResult

logger = logging.getLogger(__name__)


def comment_author(el: Tag) -> Optional[str]:
    """Author of a comment block: hovercard href, else a one-word link text, else .author"""
    link = el.select_one(USER_LINK)
    if link is not None:
        username = user_from_href(link.get('href'))
        if username:
            return username
        text = text_of(link)
        if text and ' ' not in text:
            return text
    return text_of(el.select_one('.author, .user-mention')) or None


def _comment_blocks(doc: BeautifulSoup) -> List[str]:
    return [u for u in map(comment_author, doc.select('.timeline-comment, .review-comment, .js-comment-container')) if u]


def _comment_bodies(doc: BeautifulSoup) -> List[str]:
    users = []
    for body in doc.select('.comment-body'):
        container = closest(body, '.js-comment-container, .timeline-comment')
        link = container.select_one(USER_LINK) if container is not None else None
        username = user_from_href(link.get('href')) if link is not None else None
        if username:
            users.append(username)
    return users


def _thread_replies(doc: BeautifulSoup) -> List[str]:
    return [u for u in map(comment_author, doc.select('.review-thread-reply, .inline-comment-form-container')) if u]


def _timeline_items(doc: BeautifulSoup) -> List[str]:
    users = []
    for item in doc.select('.TimelineItem'):
        link = item.select_one(USER_LINK)
        if link is None or item.select_one('.comment-body, .markdown-body') is None:
            continue
        username = user_from_href(link.get('href'))
        if username:
            users.append(username)
    return users


COMMENTER_SOURCES = [
    _comment_blocks,
    _comment_bodies,
    _thread_replies,
    _timeline_items,
]


def extract_pr_commenters(doc: BeautifulSoup) -> List[str]:
    commenters: List[str] = []
    seen = set()
    for source in COMMENTER_SOURCES:
        add_unique(commenters, seen, source(doc))
    return commenters


def collect_pr_commenters(client: FetchClient, owner: str, repo: str, pr_number: int) -> ActivityMap:
    """One comment credit per unique commenter; fetch errors propagate"""
    url = f"https://github.com/{owner}/{repo}/pull/{pr_number}"
    logger.debug(f"Fetching PR conversation: {url}")
    doc = parse_document(client.fetch(url).content)

    result = CollectorResult()
    commenters = extract_pr_commenters(doc)
    logger.debug(f"Found {len(commenters)} unique commenters")

    for username in commenters:
        if is_bot(username):
            logger.debug(f"Skipping bot: {username}")
            continue
        result.activity_for(username).issues_commented += 1

    return result.contributors
