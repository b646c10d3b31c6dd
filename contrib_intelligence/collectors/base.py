#!/usr/bin/env python3
"""
Collector Base
Shared fetch, parse and bookkeeping helpers for page collectors
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from ..core.cancellation import CancellationToken
from ..core.fetch_client import FetchClient
from .document import parse_document


class BaseCollector:
    """Common plumbing for collectors

    The cancellation token only gates optional detail-page fetches inside a
    page; the orchestrator checks it before each listing page.
    """

    def __init__(self, client: FetchClient, cancellation: Optional[CancellationToken] = None,
                 verbose: bool = False):
        self.client = client
        self.cancellation = cancellation
        self.verbose = verbose
        self.logger = logging.getLogger(f"{__package__}.{self.__class__.__name__}")

    def trace(self, message: str) -> None:
        """Per-item detail: INFO when verbose, DEBUG otherwise"""
        self.logger.log(logging.INFO if self.verbose else logging.DEBUG, message)

    def cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.cancelled

    def fetch_document(self, url: str) -> BeautifulSoup:
        result = self.client.fetch(url)
        self.trace(f"{'Cache hit' if result.from_cache else 'Fetched'}: {url} ({len(result.content)} bytes)")
        return parse_document(result.content)
