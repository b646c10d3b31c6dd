"""
Fetch client: caching, retry classification and backoff.
"""
import pytest
import requests

from contrib_intelligence.core.cache_store import MemoryCacheStore
from contrib_intelligence.core.errors import RetriableFetchError, TerminalFetchError, classify_status

URL = "https://github.com/o/r/commits"


def test_classify_status():
    assert classify_status(200, URL) is None
    assert isinstance(classify_status(429, URL), RetriableFetchError)
    assert isinstance(classify_status(503, URL), RetriableFetchError)
    for status in (403, 404, 500, 502):
        error = classify_status(status, URL)
        assert isinstance(error, TerminalFetchError)
        assert error.status == status
        assert error.url == URL


def test_success_is_cached_and_served_without_network(make_client):
    cache = MemoryCacheStore()
    client, session = make_client({URL: "<html>ok</html>"}, cache=cache)

    first = client.fetch(URL)
    second = client.fetch(URL)

    assert first.content == "<html>ok</html>"
    assert first.from_cache is False
    assert second.from_cache is True
    assert session.calls == [URL]
    assert cache.get(f"url:{URL}") == "<html>ok</html>"


def test_custom_cache_key(make_client):
    cache = MemoryCacheStore()
    client, _ = make_client({"https://github.com/alice": "profile"}, cache=cache)
    client.fetch("https://github.com/alice", cache_key="profile:alice")
    assert cache.get("profile:alice") == "profile"


def test_cache_disabled_always_fetches(make_client):
    client, session = make_client({URL: "body"}, cache_enabled=False)
    client.fetch(URL)
    result = client.fetch(URL)
    assert result.from_cache is False
    assert len(session.calls) == 2


def test_retriable_then_success(make_client, sleeps):
    attempts = []
    client, session = make_client(
        {URL: [(503, ""), (429, ""), (200, "finally")]},
        on_retry=lambda attempt, err: attempts.append((attempt, type(err))),
    )

    result = client.fetch(URL)

    assert result.content == "finally"
    assert attempts == [(1, RetriableFetchError), (2, RetriableFetchError)]
    assert len(session.calls) == 3
    assert 2.0 <= sleeps[0] < 3.0
    assert 4.0 <= sleeps[1] < 5.0


def test_gives_up_after_five_attempts(make_client, sleeps):
    attempts = []
    client, session = make_client({URL: (429, "")}, on_retry=lambda a, e: attempts.append(a))

    with pytest.raises(RetriableFetchError) as exc_info:
        client.fetch(URL)

    assert exc_info.value.status == 429
    assert len(session.calls) == 5
    assert attempts == [1, 2, 3, 4, 5]
    assert len(sleeps) == 4


def test_terminal_error_is_not_retried(make_client, sleeps):
    attempts = []
    client, session = make_client({}, on_retry=lambda a, e: attempts.append(a))

    with pytest.raises(TerminalFetchError) as exc_info:
        client.fetch(URL)

    assert exc_info.value.status == 404
    assert session.calls == [URL]
    assert attempts == []
    assert sleeps == []


def test_transport_errors_are_retried(make_client):
    client, session = make_client({URL: [requests.ConnectionError("reset"), requests.Timeout("slow"), "ok"]})
    assert client.fetch(URL).content == "ok"
    assert len(session.calls) == 3


def test_failed_fetch_is_not_cached(make_client):
    cache = MemoryCacheStore()
    client, _ = make_client({URL: (500, "oops")}, cache=cache)
    with pytest.raises(TerminalFetchError):
        client.fetch(URL)
    assert cache.get(f"url:{URL}") is None


def test_backoff_doubles_and_caps(make_client):
    client, _ = make_client()
    assert 2.0 <= client.backoff_delay(1) < 3.0
    assert 8.0 <= client.backoff_delay(3) < 9.0
    assert client.backoff_delay(10) == 60.0
