"""
Cache store contract and the in-process implementation.
"""
from typing import Dict, Optional, Protocol

from ..models.schema import CacheEntry


class CacheStore(Protocol):
    """
    Keyed entry store written only by the governor.

    ``get``/``put`` may be plain or async methods.
    """
    def get(self, key: str) -> Optional[CacheEntry]:
        ...

    def put(self, key: str, entry: CacheEntry) -> None:
        ...


class MemoryCacheStore:
    """Dict-backed store. Reads and writes complete without suspending."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    async def put(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
