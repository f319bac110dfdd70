"""Combine filter results into focus views.

Visible lines of a document are decided by the project's shown filters:

1. Shown filters are split into positive (keep matches) and exclude
   (drop matches). Filters that are not shown are ignored.
2. With at least one positive filter, the visible lines are the union of
   the positive filters' matches. Exclude filters do not subtract anything
   in this case.
3. With no positive filter, every line is visible except those matched by
   an exclude filter.
4. The result is sorted ascending.

Decorations do not go through this: each filter decorates its own matches.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from logfocus.core.cache import LineRange
from logfocus.core.index_map import LineIndexMapper
from logfocus.models.document import FOCUS_PREFIX, DocumentSnapshot

if TYPE_CHECKING:
    from logfocus.core.filter import FilterEngine
    from logfocus.core.project import Project

log = logging.getLogger("logfocus.compositor")

FOCUS_SCHEME = FOCUS_PREFIX.rstrip(":")


def focus_document_id(document_id: str) -> str:
    """Id of the focus view synthesized from ``document_id``."""
    return f"{FOCUS_PREFIX}{document_id}"


def original_document_id(focus_id: str) -> Optional[str]:
    """Id of the document a focus view was built from, or None if not a focus id."""
    if focus_id.startswith(FOCUS_PREFIX):
        return focus_id[len(FOCUS_PREFIX):]
    return None


class ViewCompositor:
    """Builds visible-line sets, focus text and focus decorations for a project."""

    def partition(
        self, project: Optional["Project"]
    ) -> tuple[list["FilterEngine"], list["FilterEngine"]]:
        """Split shown filters into (positive, exclude) lists."""
        positive: list[FilterEngine] = []
        negative: list[FilterEngine] = []
        if project is None:
            return positive, negative

        for filt in project.filters.values():
            if not filt.shown:
                continue
            if filt.exclude:
                negative.append(filt)
            else:
                positive.append(filt)
        return positive, negative

    def visible_lines(
        self,
        project: Optional["Project"],
        document_id: str,
        total_line_count: int,
    ) -> list[int]:
        """Sorted line numbers of ``document_id`` that the focus view keeps.

        Filters answer from their cache, so they must already have
        evaluated the document.
        """
        positive, negative = self.partition(project)

        if positive:
            visible: set[int] = set()
            for filt in positive:
                visible.update(filt.matched_line_numbers(document_id))
        else:
            visible = set(range(total_line_count))
            for filt in negative:
                visible.difference_update(filt.matched_line_numbers(document_id))

        return sorted(visible)

    def highlight_set(
        self, project: Optional["Project"], document_id: str
    ) -> dict[str, list[LineRange]]:
        """Each filter's own decoration ranges for a document."""
        if project is None:
            return {}
        return {
            filt.id: filt.matched_ranges(document_id)
            for filt in project.filters.values()
        }

    def mapper(self, project: Optional["Project"], snapshot: DocumentSnapshot) -> LineIndexMapper:
        """Fresh line mapping for the current visible lines of a document."""
        self._ensure_evaluated(project, snapshot)
        return LineIndexMapper(self.visible_lines(project, snapshot.document_id, snapshot.line_count))

    def focus_text(self, project: Optional["Project"], snapshot: DocumentSnapshot) -> str:
        """Text of the focus view: an empty header line, then the visible lines."""
        visible = self.mapper(project, snapshot).visible_lines
        lines = snapshot.lines
        result = [""]
        result.extend(lines[i] for i in visible if i < len(lines))
        log.debug("focus view of %s keeps %d of %d lines", snapshot.document_id, len(result) - 1, len(lines))
        return "\n".join(result)

    def focus_snapshot(self, project: Optional["Project"], snapshot: DocumentSnapshot) -> DocumentSnapshot:
        """Synthesize the focus-view document for ``snapshot``."""
        return DocumentSnapshot(
            document_id=focus_document_id(snapshot.document_id),
            text=self.focus_text(project, snapshot),
            version=snapshot.version,
            is_focus=True,
        )

    def focus_decorations(
        self,
        project: Optional["Project"],
        snapshot: DocumentSnapshot,
        focus: Optional[DocumentSnapshot] = None,
    ) -> dict[str, list[LineRange]]:
        """Per-filter decorations re-projected onto the focus view.

        Only filters whose highlight rule allows decorating the focus view
        get ranges; the others map to an empty list.
        """
        if project is None:
            return {}
        mapper = self.mapper(project, snapshot)
        if focus is None:
            focus = self.focus_snapshot(project, snapshot)

        result: dict[str, list[LineRange]] = {}
        for filt in project.filters.values():
            if filt.should_decorate(focus):
                result[filt.id] = mapper.project_ranges(filt.matched_ranges(snapshot.document_id))
            else:
                result[filt.id] = []
        return result

    def _ensure_evaluated(self, project: Optional["Project"], snapshot: DocumentSnapshot) -> None:
        if project is None:
            return
        filters: Iterable[FilterEngine] = project.filters.values()
        for filt in filters:
            filt.evaluate(snapshot, selected=False)
