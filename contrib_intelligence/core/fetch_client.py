#!/usr/bin/env python3
"""
Fetch Client
Cache lookup, rate limiting, retry/backoff and cache write-back around one page request
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .cache_store import CacheStore
from .config import FetchConfig, RetryCallback
from .errors import FetchError, RetriableFetchError, TerminalFetchError, classify_status
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# The site degrades or blocks requests that do not look like a browser
DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
}


@dataclass
class FetchResult:
    """Page body plus whether it came from the cache"""
    content: str
    from_cache: bool


class FetchClient:
    """HTML page client with caching, rate limiting and retries"""

    def __init__(self, config: Optional[FetchConfig] = None,
                 cache: Optional[CacheStore] = None,
                 rate_limiter: Optional[RateLimiter] = None,
                 session: Optional[requests.Session] = None,
                 on_retry: Optional[RetryCallback] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 rng: Optional[random.Random] = None):
        self.config = config or FetchConfig()
        self.cache = cache if self.config.cache_enabled else None
        self.rate_limiter = rate_limiter or RateLimiter(self.config.delay_ms, self.config.jitter_ms)
        self.on_retry = on_retry
        self._sleep = sleep
        self._rng = rng or random.Random()

        if session is None:
            session = requests.Session()
            session.headers.update(DEFAULT_HEADERS)
        self.session = session

        self.requests_made = 0

    def fetch(self, url: str, cache_key: Optional[str] = None) -> FetchResult:
        """Fetch a URL, serving from cache when a live entry exists"""
        key = cache_key or f"url:{url}"

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit: {key}")
                return FetchResult(content=cached, from_cache=True)

        self.rate_limiter.wait_for_next()
        content = self._fetch_with_retry(url)

        if self.cache is not None:
            self.cache.set(key, content, self.config.cache_ttl_secs)

        return FetchResult(content=content, from_cache=False)

    def _fetch_with_retry(self, url: str) -> str:
        """Make a request with exponential backoff on retriable failures"""
        max_attempts = self.config.max_attempts
        last_error: Optional[FetchError] = None

        for attempt in range(1, max_attempts + 1):
            try:
                return self._request_once(url)
            except RetriableFetchError as e:
                last_error = e
                logger.debug(f"Attempt {attempt}/{max_attempts} failed for {url}: {e}")
                if self.on_retry:
                    self.on_retry(attempt, e)
                if attempt < max_attempts:
                    self._sleep(self.backoff_delay(attempt))

        raise last_error

    def _request_once(self, url: str) -> str:
        self.requests_made += 1
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.config.timeout_secs)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise RetriableFetchError(f"Transport error: {url}: {e}", url) from e
        except requests.RequestException as e:
            raise TerminalFetchError(f"Request failed: {url}: {e}", url) from e

        error = classify_status(response.status_code, url)
        if error is not None:
            raise error

        return response.text

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given failed attempt: doubling from the base, jittered, capped"""
        base = self.config.backoff_base_secs * (2 ** (attempt - 1))
        jittered = base + self._rng.uniform(0, 1.0)
        return min(jittered, self.config.backoff_max_secs)
