#!/usr/bin/env python3
"""
Error Types
Exception hierarchy shared by the fetch layer, collectors and CLI
"""

from typing import Optional


class ContribIntelError(Exception):
    """Base class for all contributor intelligence errors"""


class FetchError(ContribIntelError):
    """A page could not be retrieved"""

    def __init__(self, message: str, url: str, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class RetriableFetchError(FetchError):
    """Rate limited, server busy, or transport failure - worth retrying"""


class TerminalFetchError(FetchError):
    """Not found, forbidden or any other non-2xx response - never retried"""


class InvalidTargetError(ContribIntelError):
    """A repository or pull request URL could not be parsed"""


def classify_status(status: int, url: str) -> Optional[FetchError]:
    """Map an HTTP status code to the error it represents, or None on success"""
    if 200 <= status < 300:
        return None
    if status in (429, 503):
        return RetriableFetchError(f"Rate limited ({status}): {url}", url, status)
    if status == 404:
        return TerminalFetchError(f"Not found (404): {url}", url, status)
    if status == 403:
        return TerminalFetchError(f"Forbidden (403): {url} - may be blocked or private", url, status)
    return TerminalFetchError(f"HTTP {status}: {url}", url, status)
