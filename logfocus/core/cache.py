"""Per-filter match cache.

Each filter owns one MatchCache. The cache maps a document id to the result
of scanning that document with the filter's pattern, together with the
fingerprint (version, byte size, content hash, capture time) needed to decide
whether the result can be reused.

An entry is reused only when all of these hold:
- version, size and content hash equal the snapshot's current values
- the entry was computed under the current pattern version
- the entry is not older than the TTL (half the TTL for large documents)

Expired entries are swept at the start of every lookup, and once the cache
holds more than ``max_entries`` documents the least recently computed ones
are dropped.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from itertools import count
from typing import Callable, Iterator, Optional

from logfocus.core.config import Config
from logfocus.core.matcher import line_matches
from logfocus.models.document import DocumentSnapshot

log = logging.getLogger("logfocus.cache")


@dataclass(frozen=True)
class LineRange:
    """A whole-line range for decoration (both ends inclusive)."""

    start_line: int
    end_line: int


@dataclass
class MatchCacheEntry:
    """Result of scanning one document with one pattern.

    Attributes:
        document_id: Document the entry belongs to.
        version: Document version at capture time.
        size: Document byte size at capture time.
        content_hash: Document content hash at capture time.
        captured_at: Clock value when the scan finished.
        matched_lines: Every matching line number, ascending. Never truncated.
        matched_ranges: Decoration ranges. Capped for large documents.
        count: Number of matching lines.
        degraded: True if the document was large when scanned.
        pattern_version: Pattern version the scan ran under.
        sequence: Monotonic scan number, breaks ties between equal timestamps.
    """

    document_id: str
    version: int
    size: int
    content_hash: str
    captured_at: float
    matched_lines: list[int]
    matched_ranges: list[LineRange]
    count: int
    degraded: bool = False
    pattern_version: int = 0
    sequence: int = 0


@dataclass
class CacheStats:
    """Cache counters. ``scans`` counts full document scans."""

    hits: int = 0
    misses: int = 0
    scans: int = 0
    evictions: int = 0
    expirations: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class MatchCache:
    """Bounded, TTL-limited cache of match results keyed by document id.

    Args:
        config: Limits to apply. Defaults to ``Config()``.
        clock: Callable returning the current time in seconds.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._config = config or Config()
        self._clock = clock
        self._entries: dict[str, MatchCacheEntry] = {}
        self._sequence = count(1)
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._entries

    def __iter__(self) -> Iterator[MatchCacheEntry]:
        return iter(list(self._entries.values()))

    def document_ids(self) -> list[str]:
        return list(self._entries)

    def peek(self, document_id: str) -> Optional[MatchCacheEntry]:
        """Return the stored entry for a document without validating it."""
        return self._entries.get(document_id)

    def get_or_compute(
        self,
        snapshot: DocumentSnapshot,
        pattern: re.Pattern[str],
        pattern_version: int = 0,
    ) -> MatchCacheEntry:
        """Return a valid entry for the snapshot, scanning only if needed.

        Args:
            snapshot: Current state of the document.
            pattern: Compiled filter pattern.
            pattern_version: Version of ``pattern``; entries from other
                versions are never reused.

        Returns:
            The cached entry on a hit, otherwise a freshly computed one.
        """
        self.sweep_expired()

        entry = self._entries.get(snapshot.document_id)
        if entry is not None and self.is_valid(entry, snapshot, pattern_version):
            self.stats.hits += 1
            log.debug("cache hit for %s", snapshot.document_id)
            return entry

        self.stats.misses += 1
        log.debug(
            "cache %s for %s",
            "miss" if entry is None else "stale entry",
            snapshot.document_id,
        )
        entry = self._compute(snapshot, pattern, pattern_version)
        self._entries[snapshot.document_id] = entry
        self._enforce_max_entries()
        return entry

    def is_valid(
        self,
        entry: MatchCacheEntry,
        snapshot: DocumentSnapshot,
        pattern_version: int = 0,
    ) -> bool:
        """Check an entry's fingerprint and age against a snapshot."""
        if entry.pattern_version != pattern_version:
            return False
        if entry.version != snapshot.version:
            return False
        if entry.size != snapshot.size:
            return False
        if entry.content_hash != snapshot.content_hash:
            return False

        large = snapshot.is_large(self._config.large_file.size_threshold)
        return self._clock() - entry.captured_at <= self._ttl(large)

    def invalidate(self, document_id: Optional[str] = None) -> None:
        """Drop the entry for one document, or every entry if none is given."""
        if document_id is None:
            self.stats.invalidations += len(self._entries)
            self._entries.clear()
        elif self._entries.pop(document_id, None) is not None:
            self.stats.invalidations += 1

    def sweep_expired(self) -> int:
        """Remove entries older than their TTL. Returns how many were removed."""
        now = self._clock()
        expired = [
            doc_id for doc_id, entry in self._entries.items()
            if now - entry.captured_at > self._ttl(entry.degraded)
        ]
        for doc_id in expired:
            del self._entries[doc_id]
            log.debug("expired cache entry for %s", doc_id)
        self.stats.expirations += len(expired)
        return len(expired)

    def _ttl(self, large: bool) -> float:
        ttl = self._config.cache.ttl_seconds
        return ttl / 2 if large else ttl

    def _compute(
        self,
        snapshot: DocumentSnapshot,
        pattern: re.Pattern[str],
        pattern_version: int,
    ) -> MatchCacheEntry:
        degraded = snapshot.is_large(self._config.large_file.size_threshold)
        max_ranges = self._config.large_file.max_decoration_ranges if degraded else None

        matched_lines: list[int] = []
        matched_ranges: list[LineRange] = []
        for index, line in enumerate(snapshot.lines):
            if not line_matches(line, pattern):
                continue
            matched_lines.append(index)
            if max_ranges is None or len(matched_ranges) < max_ranges:
                matched_ranges.append(LineRange(index, index))

        self.stats.scans += 1
        return MatchCacheEntry(
            document_id=snapshot.document_id,
            version=snapshot.version,
            size=snapshot.size,
            content_hash=snapshot.content_hash,
            captured_at=self._clock(),
            matched_lines=matched_lines,
            matched_ranges=matched_ranges,
            count=len(matched_lines),
            degraded=degraded,
            pattern_version=pattern_version,
            sequence=next(self._sequence),
        )

    def _enforce_max_entries(self) -> None:
        excess = len(self._entries) - self._config.cache.max_entries
        if excess <= 0:
            return

        oldest = sorted(self._entries.values(), key=lambda e: (e.captured_at, e.sequence))
        for entry in oldest[:excess]:
            del self._entries[entry.document_id]
            log.debug("evicted cache entry for %s", entry.document_id)
        self.stats.evictions += excess
