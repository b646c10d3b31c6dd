#!/usr/bin/env python3
"""
Document Helpers
HTML parsing and the small query primitives shared by every extraction strategy
"""

import re
from datetime import datetime
from typing import Callable, Iterable, Optional, TypeVar

from bs4 import BeautifulSoup, Tag

from ..core.timezone_utils import parse_github_date

T = TypeVar('T')

# A single path segment that can be a GitHub login
PROFILE_HREF = re.compile(r'^/([a-zA-Z0-9][-a-zA-Z0-9]*)/?$')
SINGLE_SEGMENT_HREF = re.compile(r'^/([^/?#]+)/?$')
ABSOLUTE_PREFIX = 'https://github.com'


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def text_of(el: Optional[Tag]) -> str:
    """Element text with whitespace collapsed"""
    if el is None:
        return ''
    return ' '.join(el.get_text(' ').split())


def closest(el: Tag, selector: str) -> Optional[Tag]:
    """Nearest ancestor (or the element itself) matching selector"""
    return el.css.closest(selector)


def user_from_href(href: Optional[str], strict: bool = False) -> Optional[str]:
    """Login from a profile link such as /alice or https://github.com/alice

    strict restricts to characters valid in a login.
    """
    if not href:
        return None
    if href.startswith(ABSOLUTE_PREFIX):
        href = href[len(ABSOLUTE_PREFIX):]
    pattern = PROFILE_HREF if strict else SINGLE_SEGMENT_HREF
    match = pattern.match(href)
    return match.group(1) if match else None


def first_match(strategies: Iterable[Callable[..., Optional[T]]], *args) -> Optional[T]:
    """Run strategies in order; the first non-None result wins"""
    for strategy in strategies:
        result = strategy(*args)
        if result is not None:
            return result
    return None


def first_nonempty_selection(doc: Tag, selectors: Iterable[str]) -> list:
    """Elements for the first selector that matches anything"""
    for selector in selectors:
        found = doc.select(selector)
        if found:
            return found
    return []


def find_datetime(el: Tag) -> Optional[datetime]:
    """Timestamp from the first relative-time (or time) element with a datetime attribute"""
    time_el = el.select_one('relative-time[datetime]') or el.select_one('time[datetime]')
    if time_el is None:
        return None
    return parse_github_date(time_el.get('datetime'))
