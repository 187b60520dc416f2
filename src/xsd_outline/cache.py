"""Modification-time cache for parsed schema documents.

Imported schemas are usually shared by many root documents and rarely change
while an outline is being browsed, so the document store keeps their parse
keyed by location.

Design goals:
    1. Predictable invalidation: an entry is valid only while the source's
       modification time equals the recorded one.
    2. Atomic replacement: an entry is swapped as a whole under a lock, so a
       concurrent reader sees either the old or the new parse, never a mix.
    3. No eviction policy: the cache is owned by a :class:`DocumentStore`
       and dies with it.

Example::

    from xsd_outline.cache import DocumentCache

    cache = DocumentCache()
    cache.set("/schemas/common.xsd", document, mtime=1700000000.0)
    cached = cache.get("/schemas/common.xsd", mtime=1700000000.0)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .models import SchemaDocument


@dataclass(frozen=True)
class CacheEntry:
    """One cached parse together with the mtime it was read at."""

    document: SchemaDocument
    file_mtime: float

    def is_stale(self, current_mtime: float) -> bool:
        return current_mtime != self.file_mtime


class DocumentCache:
    """Thread-safe ``location -> CacheEntry`` mapping with hit/miss counters."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, location: str, mtime: float) -> Optional[SchemaDocument]:
        """Return the cached document when its mtime still matches."""
        with self._lock:
            entry = self._entries.get(location)
            if entry is None or entry.is_stale(mtime):
                self.misses += 1
                return None
            self.hits += 1
            return entry.document

    def set(self, location: str, document: SchemaDocument, mtime: float) -> None:
        """Insert or wholesale replace the entry for ``location``."""
        entry = CacheEntry(document=document, file_mtime=mtime)
        with self._lock:
            self._entries[location] = entry

    def invalidate(self, location: str) -> None:
        with self._lock:
            self._entries.pop(location, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_cache_stats(self) -> Dict[str, Any]:
        """Current size and hit/miss counters."""
        with self._lock:
            return {
                "cache_size": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "locations": sorted(self._entries),
            }
