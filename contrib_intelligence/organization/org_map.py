#!/usr/bin/env python3
"""
Case-Insensitive Organization Map
Mapping keyed by organization name, ignoring case and surrounding whitespace
"""

from typing import Dict, Generic, Iterator, Optional, Tuple, TypeVar

V = TypeVar('V')


class CaseInsensitiveOrgMap(Generic[V]):
    """Dict wrapper: values under normalized keys, plus the last-set casing of each key"""

    def __init__(self):
        self._values: Dict[str, V] = {}
        self._canonical: Dict[str, str] = {}

    @staticmethod
    def _normalize(key: str) -> str:
        return key.strip().lower()

    def set(self, key: str, value: V) -> None:
        normalized = self._normalize(key)
        self._canonical[normalized] = key
        self._values[normalized] = value

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        return self._values.get(self._normalize(key), default)

    def has(self, key: str) -> bool:
        return self._normalize(key) in self._values

    def delete(self, key: str) -> bool:
        normalized = self._normalize(key)
        if normalized not in self._values:
            return False
        del self._values[normalized]
        self._canonical.pop(normalized, None)
        return True

    def canonical_key(self, key: str) -> Optional[str]:
        return self._canonical.get(self._normalize(key))

    def items(self) -> Iterator[Tuple[str, V]]:
        """(canonical key, value) pairs in insertion order"""
        for normalized, value in self._values.items():
            yield self._canonical.get(normalized, normalized), value

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self._values)
