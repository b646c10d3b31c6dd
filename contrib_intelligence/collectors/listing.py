#!/usr/bin/env python3
"""
Search Listing Parsing
Row discovery and author extraction shared by the pull request and issue listings
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Set
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag

from .document import find_datetime, first_match, text_of, user_from_href
from .pagination import absolute_url

OPENED_BY_TEXT = re.compile(r'opened\s+(?:by\s+)?([a-zA-Z0-9][-a-zA-Z0-9]*)', re.IGNORECASE)
USER_LINK = 'a[data-hovercard-type="user"]'


@dataclass
class ListingItem:
    """One row of a pull request or issue listing"""
    username: str
    date: Optional[datetime]
    url: Optional[str]


def search_url(owner: str, repo: str, tab: str, query: str) -> str:
    """Listing URL with an encoded search query, e.g. tab='pulls'"""
    return f"https://github.com/{owner}/{repo}/{tab}?q={quote(query, safe='')}"


def _from_opened_by(el: Tag) -> Optional[str]:
    return text_of(el.select_one('.opened-by a')) or None


def _from_user_hovercard(el: Tag) -> Optional[str]:
    link = el.select_one(USER_LINK)
    return user_from_href(link.get('href')) if link else None


def _from_opened_text(el: Tag) -> Optional[str]:
    match = OPENED_BY_TEXT.search(text_of(el))
    return match.group(1) if match else None


LISTING_USERNAME_STRATEGIES = [
    _from_opened_by,
    _from_user_hovercard,
    _from_opened_text,
]


def find_listing_rows(doc: BeautifulSoup, hovercard_type: str, link_fragment: str,
                      exclude_fragment: Optional[str] = None) -> List[Tag]:
    """Listing rows, trying each known page layout in turn"""
    rows = [
        el for el in doc.select('[data-id]')
        if el.select_one(f'a[data-hovercard-type="{hovercard_type}"]') or el.select_one('.opened-by')
    ]
    if rows:
        return rows

    rows = doc.select('.Box-row')
    if rows:
        return rows

    rows = doc.select('.issue-row, .js-issue-row')
    if rows:
        return rows

    rows = []
    for el in doc.select(f'div:has(a[href*="{link_fragment}"])'):
        if not el.select_one('.opened-by, .text-small, relative-time'):
            continue
        if exclude_fragment and el.select_one(f'a[href*="{exclude_fragment}"]'):
            continue
        rows.append(el)
    return rows


def parse_listing_row(el: Tag, link_fragment: str) -> Optional[ListingItem]:
    username = first_match(LISTING_USERNAME_STRATEGIES, el)
    if not username:
        return None

    link = el.select_one(f'a[href*="{link_fragment}"]')
    url = absolute_url(link['href']) if link is not None and link.get('href') else None

    return ListingItem(username=username, date=find_datetime(el), url=url)


def users_in(doc: Tag, selector: str) -> List[str]:
    """Logins from every profile link matching selector, in document order"""
    users = []
    for link in doc.select(selector):
        username = user_from_href(link.get('href'))
        if username:
            users.append(username)
    return users


def add_unique(target: List[str], seen: Set[str], usernames: Iterable[str]) -> None:
    for username in usernames:
        if username not in seen:
            seen.add(username)
            target.append(username)
