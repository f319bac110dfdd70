"""Line matching for logfocus filters.

Matching is plain per-line regular expression search: a line matches when
the pattern is found anywhere in it.
"""

from __future__ import annotations

import re


class InvalidPatternError(ValueError):
    """Raised when a filter pattern does not compile.

    Attributes:
        pattern: The rejected pattern text.
        reason: The message from the regex compiler.
    """

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex pattern {pattern!r}: {reason}")


def compile_pattern(pattern: str, ignore_case: bool = False) -> re.Pattern[str]:
    """Compile a filter pattern.

    Args:
        pattern: Regular expression source.
        ignore_case: Compile with re.IGNORECASE.

    Returns:
        The compiled pattern.

    Raises:
        InvalidPatternError: If the pattern is empty or not a valid regex.
    """
    if not pattern:
        raise InvalidPatternError(pattern, "empty pattern")
    try:
        return re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


def line_matches(line: str, pattern: re.Pattern[str]) -> bool:
    """Return True if ``pattern`` is found anywhere in ``line``."""
    return pattern.search(line) is not None
