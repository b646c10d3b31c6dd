"""
Shared fixtures: a scripted HTTP session and a fetch client that never sleeps or touches the network.
"""
import pytest

from contrib_intelligence.core.cache_store import MemoryCacheStore
from contrib_intelligence.core.config import FetchConfig
from contrib_intelligence.core.fetch_client import FetchClient
from contrib_intelligence.core.rate_limiter import RateLimiter


class StubResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


class StubSession:
    """Serves canned pages by URL; unknown URLs are 404

    A page value may be a string (200), a (status, text) tuple, an exception
    instance to raise, or a list of those served in order.
    """

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []
        self.headers = {}

    def get(self, url, timeout=None):
        self.calls.append(url)
        entry = self.pages.get(url)
        if isinstance(entry, list):
            entry = entry.pop(0) if len(entry) > 1 else entry[0]
        if entry is None:
            return StubResponse(404, "")
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, tuple):
            return StubResponse(*entry)
        return StubResponse(200, entry)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_client(sleeps):
    def factory(pages=None, cache=None, on_retry=None, **config_overrides):
        settings = dict(delay_ms=0, jitter_ms=0, cache_path=":memory:")
        settings.update(config_overrides)
        config = FetchConfig(**settings)
        session = StubSession(pages)
        client = FetchClient(
            config=config,
            cache=cache if cache is not None else MemoryCacheStore(),
            rate_limiter=RateLimiter(0, 0, sleep=sleeps.append),
            session=session,
            on_retry=on_retry,
            sleep=sleeps.append,
        )
        return client, session
    return factory
