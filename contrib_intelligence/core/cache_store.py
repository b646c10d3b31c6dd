#!/usr/bin/env python3
"""
Response Cache
Key/value page cache with per-entry expiry (SQLite on disk, dict in memory)
"""

import logging
import pathlib
import sqlite3
import time
from typing import Callable, Dict, Optional, Tuple

from .config import SEVEN_DAYS_SECS

logger = logging.getLogger(__name__)


class CacheStore:
    """Cache contract used by the fetch client

    get returns None for missing or expired keys; set always replaces.
    """

    def __init__(self, default_ttl_secs: int = SEVEN_DAYS_SECS,
                 clock: Callable[[], float] = time.time):
        self.default_ttl_secs = default_ttl_secs
        self._clock = clock
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[str]:
        value = self._get(key, self._clock())
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def set(self, key: str, value: str, ttl_secs: Optional[int] = None) -> None:
        ttl = self.default_ttl_secs if ttl_secs is None else ttl_secs
        self._set(key, value, self._clock() + ttl)

    def stats(self) -> Dict[str, int]:
        return {'hits': self.hits, 'misses': self.misses}

    def reset_stats(self) -> None:
        self.hits = 0
        self.misses = 0

    def close(self) -> None:
        pass

    def _get(self, key: str, now: float) -> Optional[str]:
        raise NotImplementedError

    def _set(self, key: str, value: str, expires_at: float) -> None:
        raise NotImplementedError


class MemoryCacheStore(CacheStore):
    """In-process cache, mainly for tests and --no-persist runs"""

    def __init__(self, default_ttl_secs: int = SEVEN_DAYS_SECS,
                 clock: Callable[[], float] = time.time):
        super().__init__(default_ttl_secs, clock)
        self._entries: Dict[str, Tuple[str, float]] = {}

    def _get(self, key: str, now: float) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if now >= expires_at:
            del self._entries[key]
            return None
        return value

    def _set(self, key: str, value: str, expires_at: float) -> None:
        self._entries[key] = (value, expires_at)

    def __len__(self) -> int:
        return len(self._entries)


class SqliteCacheStore(CacheStore):
    """SQLite-backed cache; expired rows are purged on open"""

    def __init__(self, db_path: str, default_ttl_secs: int = SEVEN_DAYS_SECS,
                 clock: Callable[[], float] = time.time):
        super().__init__(default_ttl_secs, clock)
        self.db_path = db_path
        self._conn = self._init_db()
        removed = self.clean_expired()
        if removed:
            logger.debug(f"Purged {removed} expired cache entries from {db_path}")

    def _init_db(self) -> sqlite3.Connection:
        """Initialize SQLite database"""
        if self.db_path != ':memory:':
            pathlib.Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        with conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS cache (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
            ''')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_cache_expires ON cache(expires_at)')
        return conn

    def _get(self, key: str, now: float) -> Optional[str]:
        cursor = self._conn.execute(
            'SELECT value FROM cache WHERE key = ? AND expires_at > ?',
            (key, now)
        )
        row = cursor.fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str, expires_at: float) -> None:
        with self._conn:
            self._conn.execute(
                'INSERT OR REPLACE INTO cache (key, value, expires_at) VALUES (?, ?, ?)',
                (key, value, expires_at)
            )

    def clean_expired(self) -> int:
        """Delete expired rows, returning how many were removed"""
        with self._conn:
            cursor = self._conn.execute('DELETE FROM cache WHERE expires_at <= ?', (self._clock(),))
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()
