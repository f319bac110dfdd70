"""Document snapshot model.

A snapshot is what the host editor hands to the core: an identity, a version
counter and the full text. Everything else (lines, byte size, content hash)
is derived from the text once and then reused.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Optional

FOCUS_PREFIX = "focus:"


def content_hash(text: str) -> str:
    """Return the hex MD5 digest of ``text`` encoded as UTF-8."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class DocumentSnapshot:
    """Immutable view of a document at one version.

    Attributes:
        document_id: Stable identity of the document (a URI or path string).
        text: Full document text.
        version: Host version counter at snapshot time.
        is_focus: True when this is a synthesized focus-view document.
    """

    document_id: str
    text: str
    version: int = 0
    is_focus: bool = field(default=False)

    def __post_init__(self) -> None:
        if not self.is_focus and self.document_id.startswith(FOCUS_PREFIX):
            object.__setattr__(self, "is_focus", True)

    @cached_property
    def lines(self) -> list[str]:
        """Lines of the document without their line terminators."""
        return [line[:-1] if line.endswith("\r") else line for line in self.text.split("\n")]

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @cached_property
    def size(self) -> int:
        """Size of the document in UTF-8 bytes."""
        return len(self.text.encode("utf-8"))

    @cached_property
    def content_hash(self) -> str:
        return content_hash(self.text)

    def is_large(self, threshold: int) -> bool:
        """Check whether the document exceeds the large-file threshold."""
        return self.size > threshold

    @classmethod
    def from_path(cls, path: Path, version: Optional[int] = None) -> "DocumentSnapshot":
        """Snapshot a file on disk.

        Args:
            path: File to read (decoded as UTF-8, undecodable bytes replaced).
            version: Version counter to record. Defaults to the file's
                modification time in nanoseconds.

        Returns:
            A snapshot whose document id is the resolved path.
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8", errors="replace")
        if version is None:
            version = path.stat().st_mtime_ns
        return cls(document_id=str(path.resolve()), text=text, version=version)
