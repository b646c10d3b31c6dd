#!/usr/bin/env python3
"""
Contributor Filters
Automation-account detection and generic email domain screening
"""

import re
from typing import Optional

BOT_PATTERNS = [
    re.compile(r'\[bot\]$', re.IGNORECASE),
    re.compile(
        r'^(dependabot|renovate|renovate-bot|greenkeeper|snyk-bot|semantic-release-bot|'
        r'github-actions|mergify|codecov|allcontributors|imgbot|stale|netlify|vercel|'
        r'depfu|whitesource-bolt|mend-bolt-for-github)$',
        re.IGNORECASE,
    ),
    re.compile(r'-bot$', re.IGNORECASE),
]

# Free-mail and noreply providers; an address here says nothing about an employer
GENERIC_EMAIL_DOMAINS = frozenset({
    'gmail.com', 'googlemail.com',
    'yahoo.com', 'yahoo.co.uk', 'ymail.com',
    'hotmail.com', 'hotmail.co.uk', 'outlook.com', 'live.com', 'msn.com',
    'aol.com', 'icloud.com', 'me.com', 'mac.com',
    'protonmail.com', 'proton.me', 'tutanota.com', 'tutamail.com',
    'mail.com', 'email.com', 'zoho.com',
    'yandex.com', 'yandex.ru', 'mail.ru',
    'fastmail.com', 'fastmail.fm',
    'users.noreply.github.com',
})


def is_bot(username: Optional[str]) -> bool:
    """Check if a username belongs to an automation account"""
    if not username:
        return False
    return any(pattern.search(username) for pattern in BOT_PATTERNS)


def is_generic_email(email: Optional[str]) -> bool:
    """True for empty, malformed or free-mail/noreply addresses"""
    if not email or '@' not in email:
        return True
    domain = email.rsplit('@', 1)[1].lower()
    return domain in GENERIC_EMAIL_DOMAINS
