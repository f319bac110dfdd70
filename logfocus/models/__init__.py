"""Data models for logfocus."""

from logfocus.models.document import DocumentSnapshot, content_hash
from logfocus.models.filter_def import FilterDefinition, GroupDefinition, ProjectDefinition

__all__ = [
    "DocumentSnapshot",
    "FilterDefinition",
    "GroupDefinition",
    "ProjectDefinition",
    "content_hash",
]
