"""Line number mapping between a document and its focus view.

The focus view starts with one header line, so visible line ``V[i]`` of the
original document is shown on focus line ``i + 1``.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable, Optional, Sequence

from logfocus.core.cache import LineRange

HEADER_LINES = 1


class LineIndexMapper:
    """Bidirectional mapping built from a sorted visible-line sequence."""

    def __init__(self, visible_lines: Sequence[int]):
        self._visible = list(visible_lines)

    def __len__(self) -> int:
        return len(self._visible)

    @property
    def visible_lines(self) -> list[int]:
        return list(self._visible)

    def to_focus(self, original_line: int) -> Optional[int]:
        """Focus line showing ``original_line``, or None if it is not visible."""
        index = bisect_left(self._visible, original_line)
        if index < len(self._visible) and self._visible[index] == original_line:
            return index + HEADER_LINES
        return None

    def to_original(self, focus_line: int) -> Optional[int]:
        """Original line shown on ``focus_line``, or None for the header or past the end."""
        index = focus_line - HEADER_LINES
        if 0 <= index < len(self._visible):
            return self._visible[index]
        return None

    def project_lines(self, original_lines: Iterable[int]) -> list[int]:
        """Focus lines for the visible members of ``original_lines``."""
        projected = (self.to_focus(line) for line in original_lines)
        return [line for line in projected if line is not None]

    def project_ranges(self, ranges: Iterable[LineRange]) -> list[LineRange]:
        """Re-project whole-line decoration ranges onto the focus view.

        A range that spans hidden lines is split into one range per visible line.
        """
        result: list[LineRange] = []
        for line_range in ranges:
            start = bisect_left(self._visible, line_range.start_line)
            for index in range(start, len(self._visible)):
                if self._visible[index] > line_range.end_line:
                    break
                focus_line = index + HEADER_LINES
                result.append(LineRange(focus_line, focus_line))
        return result
