#!/usr/bin/env python3
"""
Profile Fetcher
Company, bio and organization memberships from public user profiles
"""

import re
from typing import Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

from ..core.errors import FetchError
from .base import BaseCollector
from .document import parse_document, text_of, user_from_href
from .types import UserProfile

LEADING_AT = re.compile(r'^@')


def _works_for_span(doc: BeautifulSoup) -> Optional[str]:
    return text_of(doc.select_one('[itemprop="worksFor"] span')) or None


def _org_list_link(doc: BeautifulSoup) -> Optional[str]:
    return text_of(doc.select_one('li a[data-hovercard-type="organization"]')) or None


def _works_for_text(doc: BeautifulSoup) -> Optional[str]:
    text = text_of(doc.select_one('[itemprop="worksFor"]'))
    return LEADING_AT.sub('', text).strip() or None


def _vcard_organization(doc: BeautifulSoup) -> Optional[str]:
    for li in doc.select('ul.vcard-details li'):
        if li.select_one('svg.octicon-organization') is not None:
            text = text_of(li)
            if text:
                return text
    return None


COMPANY_STRATEGIES = [
    _works_for_span,
    _org_list_link,
    _works_for_text,
    _vcard_organization,
]

BIO_SELECTORS = ['[data-bio-text]', '.p-note', '[class*="user-profile-bio"]']


def extract_company(doc: BeautifulSoup) -> Optional[str]:
    for strategy in COMPANY_STRATEGIES:
        company = strategy(doc)
        if company:
            return company
    return None


def extract_bio(doc: BeautifulSoup) -> Optional[str]:
    for selector in BIO_SELECTORS:
        bio = text_of(doc.select_one(selector))
        if bio:
            return bio
    return None


def extract_orgs(doc: BeautifulSoup) -> List[str]:
    """Organization logins, first-seen order, no duplicates"""
    orgs: Dict[str, None] = {}

    for link in doc.select('a[data-hovercard-type="organization"]'):
        org = user_from_href(link.get('href'))
        if org:
            orgs[org] = None

    for el in doc.select('[itemprop="follows"]'):
        name = text_of(el)
        if name:
            orgs[name] = None

    for link in doc.select('.avatar-group-item a[href^="/"]'):
        org = user_from_href(link.get('href'))
        if org:
            orgs[org] = None

    return list(orgs)


class ProfileFetcher(BaseCollector):
    """Fetches user profiles; a failed fetch yields an empty profile"""

    def fetch_profile(self, username: str) -> UserProfile:
        url = f"https://github.com/{username}"
        try:
            result = self.client.fetch(url, cache_key=f"profile:{username}")
        except FetchError as e:
            self.logger.warning(f"Failed to fetch profile for {username}: {e}")
            return UserProfile(username=username)

        self.trace(f"{'Cache hit' if result.from_cache else 'Fetched'}: {username}")
        doc = parse_document(result.content)

        return UserProfile(
            username=username,
            company=extract_company(doc),
            bio=extract_bio(doc),
            orgs=extract_orgs(doc),
        )

    def fetch_profiles(self, usernames: Iterable[str],
                       on_progress: Optional[Callable[[int, int], None]] = None) -> Dict[str, UserProfile]:
        """Fetch profiles in order, stopping early if cancelled"""
        usernames = list(usernames)
        total = len(usernames)
        profiles: Dict[str, UserProfile] = {}

        for i, username in enumerate(usernames, 1):
            if self.cancelled():
                self.logger.info(f"Profile fetching cancelled after {i - 1}/{total}")
                break
            profiles[username] = self.fetch_profile(username)
            if on_progress:
                on_progress(i, total)

        return profiles
