#!/usr/bin/env python3
"""
Timezone Utilities
All activity dates are timezone-aware UTC so window comparisons never mix naive and aware values
"""

from datetime import datetime, timezone
from typing import Optional

import dateutil.parser
from dateutil.relativedelta import relativedelta


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Get current UTC datetime (timezone-aware)"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_github_date(dt_str: Optional[str]) -> datetime:
    """Parse a GitHub timestamp (ISO-8601, e.g. 2024-01-15T10:30:00Z)

    Returns the epoch for empty or unparseable input so callers can still compare it.
    """
    if not dt_str:
        return EPOCH

    try:
        return ensure_utc(dateutil.parser.isoparse(dt_str))
    except (ValueError, OverflowError):
        pass

    try:
        return ensure_utc(dateutil.parser.parse(dt_str))
    except (ValueError, OverflowError):
        return EPOCH


def is_within_window(date: datetime, since: datetime) -> bool:
    """True when date is strictly after since"""
    return ensure_utc(date) > ensure_utc(since)


def default_since(months: int = 12) -> datetime:
    """Start of the default activity window"""
    return utc_now() - relativedelta(months=months)


def format_query_date(date: datetime) -> str:
    """Format a date for GitHub search qualifiers (YYYY-MM-DD)"""
    return ensure_utc(date).strftime('%Y-%m-%d')
