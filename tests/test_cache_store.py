"""
Cache stores: expiry, replacement and persistence.
"""
from contrib_intelligence.core.cache_store import MemoryCacheStore, SqliteCacheStore


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_memory_store_expires_entries():
    clock = FakeClock()
    cache = MemoryCacheStore(default_ttl_secs=60, clock=clock)
    cache.set("k", "v")
    assert cache.get("k") == "v"
    clock.now += 61
    assert cache.get("k") is None
    assert cache.stats() == {'hits': 1, 'misses': 1}


def test_set_replaces_existing_value():
    cache = MemoryCacheStore()
    cache.set("k", "old")
    cache.set("k", "new")
    assert cache.get("k") == "new"


def test_sqlite_store_persists_between_connections(tmp_path):
    db_path = str(tmp_path / "nested" / "cache.db")
    cache = SqliteCacheStore(db_path)
    cache.set("url:https://github.com/o/r", "<html/>")
    cache.close()

    reopened = SqliteCacheStore(db_path)
    assert reopened.get("url:https://github.com/o/r") == "<html/>"
    assert reopened.get("missing") is None
    assert reopened.stats() == {'hits': 1, 'misses': 1}
    reopened.reset_stats()
    assert reopened.stats() == {'hits': 0, 'misses': 0}
    reopened.close()


def test_sqlite_store_purges_expired_rows_on_open(tmp_path):
    db_path = str(tmp_path / "cache.db")
    clock = FakeClock()
    cache = SqliteCacheStore(db_path, clock=clock)
    cache.set("short", "a", ttl_secs=10)
    cache.set("long", "b", ttl_secs=1000)
    cache.close()

    clock.now += 100
    reopened = SqliteCacheStore(db_path, clock=clock)
    assert reopened.get("short") is None
    assert reopened.get("long") == "b"
    assert reopened.clean_expired() == 0
    reopened.close()
