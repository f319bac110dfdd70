"""Per-filter match engine.

A FilterEngine owns one pattern, its display state (colors and the
highlighted/shown/exclude flags) and a MatchCache. It answers "which lines
of document X match" and pushes decoration ranges to a rendering sink.

State changes go through explicit methods, each touching only what it
affects:

- ``set_pattern``: bumps the pattern version, drops every cache entry and
  re-evaluates the associated documents.
- ``set_color``, ``set_highlighted``, ``set_shown``, ``set_exclude``:
  re-render decorations. The cache is left alone.
- ``dispose``: clears decorations, associations and the cache.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from logfocus.core.cache import LineRange, MatchCache
from logfocus.core.color import ColorAllocator, ColorPair
from logfocus.core.config import Config
from logfocus.core.matcher import compile_pattern, line_matches
from logfocus.models.document import DocumentSnapshot
from logfocus.models.filter_def import FilterDefinition
from logfocus.utils.ids import generate_id

log = logging.getLogger("logfocus.filter")


class DecorationSink(Protocol):
    """Rendering collaborator that draws line decorations.

    An empty ``ranges`` list clears the filter's decorations on that document.
    """

    def set_decorations(
        self,
        document_id: str,
        filter_id: str,
        color: str,
        ranges: list[LineRange],
    ) -> None: ...


@dataclass(frozen=True)
class EvaluationResult:
    """Matches of one filter in one document."""

    matched_lines: list[int]
    matched_ranges: list[LineRange]
    count: int


class FilterEngine:
    """A regex filter with its own match cache and decorations.

    Args:
        pattern: Regular expression tested against each line.
        color: Seed color. If omitted a hue is drawn from ``allocator``.
        allocator: Color allocator used when no color is given.
        highlighted: Decorate matching lines.
        shown: Take part in the focus view.
        exclude: Drop matching lines from the focus view instead of keeping them.
        ignore_case: Match case-insensitively.
        config: Cache and large-file limits.
        sink: Rendering collaborator that receives decorations.
        filter_id: Explicit id; generated when omitted.
        clock: Time source for the cache.

    Raises:
        InvalidPatternError: If ``pattern`` does not compile.
    """

    def __init__(
        self,
        pattern: str,
        color: Optional[str] = None,
        *,
        allocator: Optional[ColorAllocator] = None,
        highlighted: bool = True,
        shown: bool = True,
        exclude: bool = False,
        ignore_case: bool = False,
        config: Optional[Config] = None,
        sink: Optional[DecorationSink] = None,
        filter_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._regex = compile_pattern(pattern, ignore_case)
        self.id = filter_id or generate_id("filter")
        if color:
            self._colors = ColorPair.from_color(color)
        else:
            self._colors = (allocator or ColorAllocator()).next_pair()

        self._highlighted = highlighted
        self._shown = shown
        self._exclude = exclude
        self._config = config or Config()
        self.sink = sink

        self.cache = MatchCache(self._config, clock)
        self.pattern_version = 0
        self.count = 0
        self.disposed = False

        # document id -> latest snapshot, in the order documents were first seen
        self._documents: dict[str, DocumentSnapshot] = {}
        self._decorations: dict[str, list[LineRange]] = {}
        self._active_document_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"FilterEngine(id={self.id!r}, pattern={self.pattern!r})"

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    @property
    def regex(self) -> re.Pattern[str]:
        return self._regex

    @property
    def ignore_case(self) -> bool:
        return bool(self._regex.flags & re.IGNORECASE)

    @property
    def colors(self) -> ColorPair:
        return self._colors

    @property
    def color(self) -> str:
        """Display color: the inverted color while excluding, else the normal one."""
        return self._colors.inverted if self._exclude else self._colors.normal

    @property
    def highlighted(self) -> bool:
        return self._highlighted

    @property
    def shown(self) -> bool:
        return self._shown

    @property
    def exclude(self) -> bool:
        return self._exclude

    @property
    def document_ids(self) -> list[str]:
        return list(self._documents)

    def test(self, line: str) -> bool:
        """Check a single line against the pattern."""
        return line_matches(line, self._regex)

    def set_pattern(self, pattern: str, ignore_case: Optional[bool] = None) -> bool:
        """Replace the pattern.

        The new pattern is compiled before anything changes, so an invalid
        pattern leaves the filter exactly as it was.

        Returns:
            False if the pattern and flags are unchanged, True otherwise.

        Raises:
            InvalidPatternError: If the new pattern does not compile.
        """
        if ignore_case is None:
            ignore_case = self.ignore_case
        if pattern == self.pattern and ignore_case == self.ignore_case:
            return False

        regex = compile_pattern(pattern, ignore_case)
        self._regex = regex
        self.pattern_version += 1
        self.cache.invalidate()
        log.debug("filter %s pattern changed to %r (version %d)", self.id, pattern, self.pattern_version)

        for document_id, snapshot in list(self._documents.items()):
            self.evaluate(snapshot, selected=document_id == self._active_document_id)
        return True

    def set_color(self, color: str) -> None:
        self._colors = ColorPair.from_color(color)
        self._render_all()

    def set_highlighted(self, value: bool) -> None:
        self._highlighted = value
        self._render_all()

    def set_shown(self, value: bool) -> None:
        self._shown = value
        self._render_all()

    def set_exclude(self, value: bool) -> None:
        self._exclude = value
        self._render_all()

    def evaluate(self, snapshot: DocumentSnapshot, *, selected: bool = True) -> EvaluationResult:
        """Match a document, reusing the cached result when it is still valid.

        Args:
            snapshot: Current state of the document.
            selected: True if this is the active document; its match count
                becomes the filter's live ``count``.

        Raises:
            RuntimeError: If the filter has been disposed.
        """
        if self.disposed:
            raise RuntimeError(f"Filter {self.id} has been disposed")

        document_id = snapshot.document_id
        self._documents[document_id] = snapshot
        entry = self.cache.get_or_compute(snapshot, self._regex, self.pattern_version)
        self._decorations[document_id] = entry.matched_ranges
        if selected:
            self._active_document_id = document_id
            self.count = entry.count

        self._render(document_id)
        return EvaluationResult(
            matched_lines=list(entry.matched_lines),
            matched_ranges=list(entry.matched_ranges),
            count=entry.count,
        )

    def matched_line_numbers(self, document_id: Optional[str] = None) -> list[int]:
        """Matching line numbers for one document, or for all of them.

        With no document id the per-document lists are concatenated in the
        order documents were first evaluated. Line numbers are not
        deduplicated across documents. Unknown documents yield an empty list.
        """
        if document_id is None:
            result: list[int] = []
            for doc_id in self._documents:
                result.extend(self.matched_line_numbers(doc_id))
            return result

        snapshot = self._documents.get(document_id)
        if snapshot is None:
            return []
        entry = self.cache.get_or_compute(snapshot, self._regex, self.pattern_version)
        return list(entry.matched_lines)

    def matched_ranges(self, document_id: str) -> list[LineRange]:
        """Decoration ranges computed for a document (capped for large ones)."""
        snapshot = self._documents.get(document_id)
        if snapshot is None:
            return []
        entry = self.cache.get_or_compute(snapshot, self._regex, self.pattern_version)
        return list(entry.matched_ranges)

    def should_decorate(self, snapshot: DocumentSnapshot) -> bool:
        """Whether matching lines of this document are drawn.

        Focus documents need the filter to be shown. Large documents need it
        to be shown and to have fewer matches than the decoration ceiling.
        Excluding filters never decorate.
        """
        large_file = self._config.large_file
        is_large = snapshot.is_large(large_file.size_threshold)
        return (
            self._highlighted
            and (not snapshot.is_focus or self._shown)
            and not self._exclude
            and (not is_large or (self._shown and self.count < large_file.decoration_match_ceiling))
        )

    def clear_processing(self, document_id: Optional[str] = None) -> None:
        """Clear decorations and forget documents, keeping the cache."""
        doc_ids = list(self._documents) if document_id is None else [document_id]
        for doc_id in doc_ids:
            if doc_id in self._documents and self.sink is not None:
                self.sink.set_decorations(doc_id, self.id, self.color, [])
            self._documents.pop(doc_id, None)
            self._decorations.pop(doc_id, None)
            if doc_id == self._active_document_id:
                self._active_document_id = None
        self.count = 0

    def remove_document(self, document_id: str) -> None:
        """Forget a closed document and drop its cache entry."""
        self.clear_processing(document_id)
        self.cache.invalidate(document_id)

    def dispose(self) -> None:
        """Release decorations, document associations and cache entries."""
        if self.disposed:
            return
        self.clear_processing()
        self.cache.invalidate()
        self.disposed = True
        log.debug("disposed filter %s", self.id)

    def to_definition(self) -> FilterDefinition:
        return FilterDefinition(
            pattern=self.pattern,
            color=self._colors.normal,
            highlighted=self._highlighted,
            shown=self._shown,
            exclude=self._exclude,
            ignore_case=self.ignore_case,
        )

    @classmethod
    def from_definition(cls, definition: FilterDefinition, **kwargs) -> "FilterEngine":
        """Rebuild a filter from its persisted shape.

        Extra keyword arguments (``allocator``, ``config``, ``sink`` ...) are
        passed to the constructor.
        """
        return cls(
            definition.pattern,
            definition.color,
            highlighted=definition.highlighted,
            shown=definition.shown,
            exclude=definition.exclude,
            ignore_case=definition.ignore_case,
            **kwargs,
        )

    def _render(self, document_id: str) -> None:
        if self.sink is None:
            return
        snapshot = self._documents[document_id]
        ranges = self._decorations.get(document_id, []) if self.should_decorate(snapshot) else []
        self.sink.set_decorations(document_id, self.id, self.color, ranges)

    def _render_all(self) -> None:
        for document_id in self._documents:
            self._render(document_id)
