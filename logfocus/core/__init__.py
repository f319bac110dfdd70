"""Core logic for logfocus.

This module provides the core functionality:
- MatchCache: Per-filter, per-document cache of matching lines
- FilterEngine: One regex filter with its flags, colors and cache
- ViewCompositor: Combines filters into focus views
- LineIndexMapper: Maps original line numbers to focus-view line numbers
- Project / Workspace: Filter containers and the selected project
- ConfigLoader: Configuration file loading
- ProjectStore: Project persistence
"""

from logfocus.core.cache import CacheStats, LineRange, MatchCache, MatchCacheEntry
from logfocus.core.color import ColorAllocator, ColorPair
from logfocus.core.compositor import ViewCompositor, focus_document_id, original_document_id
from logfocus.core.config import (
    CacheConfig,
    Config,
    ConfigError,
    ConfigLoader,
    LargeFileConfig,
    StorageConfig,
)
from logfocus.core.filter import DecorationSink, EvaluationResult, FilterEngine
from logfocus.core.index_map import LineIndexMapper
from logfocus.core.matcher import InvalidPatternError, compile_pattern, line_matches
from logfocus.core.project import Group, Project, ProjectError, Target, TargetKind
from logfocus.core.storage import ProjectStore, StorageError
from logfocus.core.workspace import Workspace

__all__ = [
    "CacheConfig",
    "CacheStats",
    "ColorAllocator",
    "ColorPair",
    "Config",
    "ConfigError",
    "ConfigLoader",
    "DecorationSink",
    "EvaluationResult",
    "FilterEngine",
    "Group",
    "InvalidPatternError",
    "LargeFileConfig",
    "LineIndexMapper",
    "LineRange",
    "MatchCache",
    "MatchCacheEntry",
    "Project",
    "ProjectError",
    "ProjectStore",
    "StorageConfig",
    "StorageError",
    "Target",
    "TargetKind",
    "ViewCompositor",
    "Workspace",
    "compile_pattern",
    "focus_document_id",
    "line_matches",
    "original_document_id",
]
