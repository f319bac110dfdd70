"""Projects and groups of filters.

A Project holds every filter in a flat map for lookup, plus the ordered
groups those filters belong to. Each filter is in exactly one group.

Group flags are a broadcast: setting ``shown`` or ``highlighted`` on a group
copies the value onto every member filter once. The group flag is not
consulted afterwards.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from logfocus.core.color import ColorAllocator
from logfocus.core.config import Config
from logfocus.core.filter import DecorationSink, FilterEngine
from logfocus.models.filter_def import GroupDefinition, ProjectDefinition
from logfocus.utils.ids import generate_id

log = logging.getLogger("logfocus.project")

_INVALID_NAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


class ProjectError(Exception):
    """Raised for unknown ids and invalid project or group operations."""


def valid_project_name(name: str) -> bool:
    """Project names double as file names, so path and control characters are refused."""
    return bool(name) and not _INVALID_NAME_RE.search(name)


class TargetKind(str, Enum):
    """What a tree item refers to."""

    GROUP = "group"
    FILTER = "filter"


@dataclass(frozen=True)
class Target:
    """A resolved reference to a group or a filter."""

    kind: TargetKind
    id: str

    @classmethod
    def group(cls, group_id: str) -> "Target":
        return cls(TargetKind.GROUP, group_id)

    @classmethod
    def filter(cls, filter_id: str) -> "Target":
        return cls(TargetKind.FILTER, filter_id)

    @classmethod
    def parse(cls, item_id: str) -> "Target":
        """Resolve a generated id by its ``group-`` / ``filter-`` prefix.

        Raises:
            ProjectError: If the id has neither prefix.
        """
        for kind in TargetKind:
            if item_id.startswith(f"{kind.value}-"):
                return cls(kind, item_id)
        raise ProjectError(f"Cannot tell whether {item_id!r} is a group or a filter")


@dataclass
class Group:
    """A named, ordered set of filter ids."""

    name: str
    id: str = field(default_factory=lambda: generate_id("group"))
    filter_ids: list[str] = field(default_factory=list)
    highlighted: bool = True
    shown: bool = True


class Project:
    """Named container for groups and their filters.

    Args:
        name: Project name, also used as its file name.
        config: Limits handed to every filter created in this project.
        allocator: Color allocator for new filters.
        sink: Rendering collaborator handed to every filter.
    """

    def __init__(
        self,
        name: str,
        *,
        config: Optional[Config] = None,
        allocator: Optional[ColorAllocator] = None,
        sink: Optional[DecorationSink] = None,
    ):
        self.name = name
        self.id = name
        self.selected = False
        self.filters: dict[str, FilterEngine] = {}
        self.groups: dict[str, Group] = {}
        self.config = config or Config()
        self.allocator = allocator or ColorAllocator()
        self.sink = sink

    def __repr__(self) -> str:
        return f"Project(name={self.name!r}, groups={len(self.groups)}, filters={len(self.filters)})"

    def get_group(self, group_id: str) -> Group:
        try:
            return self.groups[group_id]
        except KeyError:
            raise ProjectError(f"Group {group_id!r} not found in project {self.name!r}") from None

    def get_filter(self, filter_id: str) -> FilterEngine:
        try:
            return self.filters[filter_id]
        except KeyError:
            raise ProjectError(f"Filter {filter_id!r} not found in project {self.name!r}") from None

    def group_of(self, filter_id: str) -> Optional[Group]:
        for group in self.groups.values():
            if filter_id in group.filter_ids:
                return group
        return None

    def add_group(self, name: str) -> Group:
        group = Group(name=name)
        self.groups[group.id] = group
        return group

    def rename_group(self, group_id: str, name: str) -> None:
        self.get_group(group_id).name = name

    def delete_group(self, group_id: str) -> None:
        """Remove a group and dispose every filter in it."""
        group = self.get_group(group_id)
        for filter_id in group.filter_ids:
            filt = self.filters.pop(filter_id, None)
            if filt is not None:
                filt.dispose()
        del self.groups[group_id]

    def add_filter(self, group_id: str, pattern: str, color: Optional[str] = None, **kwargs) -> FilterEngine:
        """Create a filter in a group.

        Raises:
            ProjectError: If the group does not exist.
            InvalidPatternError: If the pattern does not compile.
        """
        group = self.get_group(group_id)
        filt = FilterEngine(
            pattern,
            color,
            allocator=self.allocator,
            config=self.config,
            sink=self.sink,
            **kwargs,
        )
        self._attach(group, filt)
        return filt

    def edit_filter(self, filter_id: str, pattern: str) -> bool:
        """Replace a filter's pattern. See :meth:`FilterEngine.set_pattern`."""
        return self.get_filter(filter_id).set_pattern(pattern)

    def delete_filter(self, filter_id: str) -> None:
        filt = self.get_filter(filter_id)
        del self.filters[filter_id]
        for group in self.groups.values():
            if filter_id in group.filter_ids:
                group.filter_ids.remove(filter_id)
        filt.dispose()

    def set_shown(self, target: Target, value: bool) -> None:
        if target.kind is TargetKind.GROUP:
            group = self.get_group(target.id)
            group.shown = value
            for filt in self._members(group):
                filt.set_shown(value)
        else:
            self.get_filter(target.id).set_shown(value)

    def set_highlighted(self, target: Target, value: bool) -> None:
        if target.kind is TargetKind.GROUP:
            group = self.get_group(target.id)
            group.highlighted = value
            for filt in self._members(group):
                filt.set_highlighted(value)
        else:
            self.get_filter(target.id).set_highlighted(value)

    def set_exclude(self, filter_id: str, value: bool) -> None:
        self.get_filter(filter_id).set_exclude(value)

    def deactivate(self) -> None:
        """Clear every filter's decorations and document associations."""
        for filt in self.filters.values():
            filt.clear_processing()

    def dispose(self) -> None:
        """Release every filter's cache and decorations."""
        for filt in self.filters.values():
            filt.dispose()

    def to_definition(self) -> ProjectDefinition:
        return ProjectDefinition(
            name=self.name,
            groups=[
                GroupDefinition(
                    name=group.name,
                    highlighted=group.highlighted,
                    shown=group.shown,
                    filters=[self.filters[fid].to_definition() for fid in group.filter_ids],
                )
                for group in self.groups.values()
            ],
        )

    @classmethod
    def from_definition(
        cls,
        definition: ProjectDefinition,
        *,
        config: Optional[Config] = None,
        allocator: Optional[ColorAllocator] = None,
        sink: Optional[DecorationSink] = None,
    ) -> "Project":
        """Rebuild a project and its live filters from the persisted shape."""
        project = cls(definition.name, config=config, allocator=allocator, sink=sink)
        for group_def in definition.groups:
            group = project.add_group(group_def.name)
            group.highlighted = group_def.highlighted
            group.shown = group_def.shown
            for filter_def in group_def.filters:
                filt = FilterEngine.from_definition(
                    filter_def,
                    allocator=project.allocator,
                    config=project.config,
                    sink=project.sink,
                )
                project._attach(group, filt)
        return project

    def _attach(self, group: Group, filt: FilterEngine) -> None:
        group.filter_ids.append(filt.id)
        self.filters[filt.id] = filt

    def _members(self, group: Group) -> list[FilterEngine]:
        return [self.filters[fid] for fid in group.filter_ids if fid in self.filters]
