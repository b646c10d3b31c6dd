#!/usr/bin/env python3
"""
Organization Name Normalization
Company-field cleanup and alias resolution to a parent organization
"""

import re

WHITESPACE = re.compile(r'\s+')

# Product or subsidiary names that should be credited to the parent
COMPANY_ALIASES = {
    'facebook': 'Meta',
    'fb': 'Meta',
    'instagram': 'Meta',
    'whatsapp': 'Meta',
    'oculus': 'Meta',
    'meta': 'Meta',

    'google': 'Alphabet',
    'googl': 'Alphabet',
    'youtube': 'Alphabet',
    'deepmind': 'Alphabet',
    'waymo': 'Alphabet',
    'verily': 'Alphabet',
    'alphabet': 'Alphabet',

    'twitter': 'X',
    'x': 'X',

    'square': 'Block',
    'block': 'Block',
    'cashapp': 'Block',
    'cash app': 'Block',
}


def normalize_company_field(company: str) -> str:
    """Trim, drop one leading '@', collapse whitespace

    Legal suffixes (Inc., LLC, GmbH) are kept as written.
    """
    if not company:
        return ''
    normalized = company.strip()
    if normalized.startswith('@'):
        normalized = normalized[1:]
    return WHITESPACE.sub(' ', normalized).strip()


def resolve_alias(org_name: str) -> str:
    """Parent organization for a known alias, otherwise the name unchanged"""
    return COMPANY_ALIASES.get(org_name.lower(), org_name)
