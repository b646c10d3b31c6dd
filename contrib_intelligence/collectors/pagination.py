#!/usr/bin/env python3
"""
Pagination
Next-page discovery for cursor-paged commit lists and page-numbered search results
"""

from typing import Optional

from bs4 import BeautifulSoup

from .document import text_of

GITHUB_BASE = 'https://github.com'


def absolute_url(href: str) -> str:
    return href if href.startswith('http') else f"{GITHUB_BASE}{href}"


def extract_cursor_pagination(doc: BeautifulSoup) -> Optional[str]:
    """Find the 'Older' link on a commit list"""
    for link in doc.select('a[rel="nofollow"][href]'):
        if 'older' in text_of(link).lower():
            return absolute_url(link['href'])

    for link in doc.select('a[href]'):
        text = text_of(link).lower()
        if text == 'older' or 'older commits' in text:
            return absolute_url(link['href'])

    return None


def extract_page_pagination(doc: BeautifulSoup) -> Optional[str]:
    """Find the 'Next' link on a page-numbered listing"""
    link = doc.select_one('a.next_page[href]') or doc.select_one('a[rel="next"][href]')

    if link is None:
        for candidate in doc.select('.pagination a[href]'):
            if 'next' in text_of(candidate).lower():
                link = candidate
                break

    if link is None:
        return None
    return absolute_url(link['href'])


def extract_next_page(doc: BeautifulSoup, kind: str) -> Optional[str]:
    """Dispatch on listing kind: 'commits' uses the cursor, everything else page numbers"""
    if kind == 'commits':
        return extract_cursor_pagination(doc)
    return extract_page_pagination(doc)
