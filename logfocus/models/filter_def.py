"""Serializable shapes for filters, groups and projects.

These models are the persisted form of a project. Live objects
(:class:`~logfocus.core.filter.FilterEngine`, :class:`~logfocus.core.project.Project`)
are rebuilt from them and can always be turned back into them.

Field names are snake_case in Python and camelCase on disk.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FilterDefinition(BaseModel):
    """A persisted filter.

    Attributes:
        pattern: Regular expression tested against each line (stored as ``regex``).
        color: Seed color, normally ``hsl(H, S%, L%)``. None picks a new hue on load.
        highlighted: Whether matching lines are decorated.
        shown: Whether the filter takes part in the focus view.
        exclude: Whether matching lines are dropped instead of kept.
        ignore_case: Whether the pattern is compiled case-insensitively.
    """

    model_config = ConfigDict(populate_by_name=True)

    pattern: str = Field(alias="regex")
    color: Optional[str] = None
    highlighted: bool = Field(default=True, alias="isHighlighted")
    shown: bool = Field(default=True, alias="isShown")
    exclude: bool = Field(default=False, alias="isExclude")
    ignore_case: bool = Field(default=False, alias="ignoreCase")

    @field_validator("pattern")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Validate that the pattern is a non-empty regular expression."""
        if not v:
            raise ValueError("Invalid regex pattern: empty pattern")
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern: {e}") from e
        return v


class GroupDefinition(BaseModel):
    """A persisted group: a name plus its member filters in order."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    highlighted: bool = Field(default=True, alias="isHighlighted")
    shown: bool = Field(default=True, alias="isShown")
    filters: list[FilterDefinition] = []


class ProjectDefinition(BaseModel):
    """A persisted project: a name plus its groups in order."""

    name: str
    groups: list[GroupDefinition] = []
