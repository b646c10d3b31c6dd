#!/usr/bin/env python3
"""
Email Domain Parsing
Organization token from the registrable domain of an email address
"""

from typing import Optional

import tldextract

# Providers whose domain says nothing about an employer
BLOCKED_DOMAINS = frozenset({
    'gmail.com', 'googlemail.com',
    'yahoo.com', 'yahoo.co.uk', 'ymail.com',
    'hotmail.com', 'hotmail.co.uk', 'outlook.com', 'live.com', 'msn.com',
    'aol.com', 'icloud.com', 'me.com', 'mac.com',
    'protonmail.com', 'proton.me', 'pm.me', 'tutanota.com', 'tutamail.com',
    'mail.com', 'email.com', 'zoho.com', 'gmx.com', 'gmx.net',
    'yandex.com', 'yandex.ru', 'mail.ru',
    'fastmail.com', 'fastmail.fm',
    'users.noreply.github.com',
})

# Bundled public suffix snapshot only; never fetches the list over the network
_extract = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


def is_blocked_domain(domain: str) -> bool:
    return domain.lower() in BLOCKED_DOMAINS


def extract_org_from_email(email: Optional[str]) -> Optional[str]:
    """'dev@eng.example.co.uk' -> 'Example'; None for blocked or unparseable addresses"""
    if not email or '@' not in email:
        return None

    domain = email.rsplit('@', 1)[1].strip().lower()
    if not domain or is_blocked_domain(domain):
        return None

    label = _extract(domain).domain
    if not label:
        return None

    return label[:1].upper() + label[1:]
