"""Configuration loading and parsing for logfocus.

This module provides the ConfigLoader class for reading TOML configuration files
and the Config dataclass holding the cache and large-file limits.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import tomli

from logfocus.utils.git import find_git_root


class ConfigError(Exception):
    """Exception raised for configuration parsing errors.

    Attributes:
        message: Error description
        line: Line number where error occurred (if available)
        path: Path to the config file (if available)
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        path: Optional[Path] = None
    ):
        self.line = line
        self.path = path

        parts = []
        if path:
            parts.append(f"Error in {path}")
        if line is not None:
            parts.append(f"at line {line}")
        if parts:
            full_message = f"{' '.join(parts)}: {message}"
        else:
            full_message = message

        super().__init__(full_message)


def _positive(section: str, key: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"[{section}] {key} must be a positive number, got {value!r}")
    return value


@dataclass
class CacheConfig:
    """Per-filter match cache limits.

    Attributes:
        max_entries: Maximum number of documents cached per filter.
        ttl_seconds: Age after which an entry is recomputed. Halved for
            entries captured from large documents.
    """

    max_entries: int = 10
    ttl_seconds: float = 300.0

    @classmethod
    def from_dict(cls, data: dict) -> "CacheConfig":
        """Create CacheConfig from a dictionary."""
        return cls(
            max_entries=_positive("cache", "max_entries", data.get("max_entries", 10)),
            ttl_seconds=_positive("cache", "ttl_seconds", data.get("ttl_seconds", 300.0)),
        )


@dataclass
class LargeFileConfig:
    """Degraded-mode settings for large documents.

    Attributes:
        size_threshold: Byte size above which a document is large.
        max_decoration_ranges: Cap on stored decoration ranges for large documents.
        decoration_match_ceiling: Match count at or above which a filter stops
            decorating a large document.
    """

    size_threshold: int = 10 * 1024 * 1024
    max_decoration_ranges: int = 500
    decoration_match_ceiling: int = 1000

    @classmethod
    def from_dict(cls, data: dict) -> "LargeFileConfig":
        """Create LargeFileConfig from a dictionary."""
        defaults = cls()
        return cls(
            size_threshold=_positive(
                "large_file", "size_threshold",
                data.get("size_threshold", defaults.size_threshold),
            ),
            max_decoration_ranges=_positive(
                "large_file", "max_decoration_ranges",
                data.get("max_decoration_ranges", defaults.max_decoration_ranges),
            ),
            decoration_match_ceiling=_positive(
                "large_file", "decoration_match_ceiling",
                data.get("decoration_match_ceiling", defaults.decoration_match_ceiling),
            ),
        )


@dataclass
class StorageConfig:
    """Where projects are persisted."""

    directory: Path = field(default_factory=lambda: Path("~/.config/logfocus").expanduser())

    @classmethod
    def from_dict(cls, data: dict) -> "StorageConfig":
        """Create StorageConfig from a dictionary."""
        if "directory" in data:
            return cls(directory=Path(data["directory"]).expanduser())
        return cls()


@dataclass
class Config:
    """Complete logfocus configuration.

    Attributes:
        cache: Match cache limits
        large_file: Degraded-mode thresholds
        storage: Project storage location
    """

    cache: CacheConfig = field(default_factory=CacheConfig)
    large_file: LargeFileConfig = field(default_factory=LargeFileConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config from a dictionary.

        Args:
            data: Dictionary parsed from TOML file

        Returns:
            Config instance with values from dictionary

        Raises:
            ConfigError: If a limit is not a positive number.
        """
        return cls(
            cache=CacheConfig.from_dict(data.get("cache", {})),
            large_file=LargeFileConfig.from_dict(data.get("large_file", {})),
            storage=StorageConfig.from_dict(data.get("storage", {})),
        )


class ConfigLoader:
    """Loader for logfocus TOML configuration files.

    Example usage:
        loader = ConfigLoader()
        config = loader.load(Path("logfocus.toml"))

        # Or load defaults when no file exists
        config = loader.load(None)
    """

    def load(self, path: Optional[Path]) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to the TOML configuration file, or None to use defaults

        Returns:
            Config instance with values from file or defaults

        Raises:
            ConfigError: If the file contains invalid TOML or invalid values
            FileNotFoundError: If the path is specified but file doesn't exist
        """
        if path is None:
            return Config()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = self._read(path)
        try:
            return Config.from_dict(data)
        except ConfigError as e:
            raise ConfigError(str(e), path=path) from e

    def _read(self, path: Path) -> dict:
        try:
            return tomli.loads(path.read_text(encoding="utf-8"))
        except tomli.TOMLDecodeError as e:
            line = self._extract_line_number(str(e))
            raise ConfigError(str(e), line=line, path=path) from e

    def _extract_line_number(self, error_message: str) -> Optional[int]:
        """Extract line number from tomli error message."""
        match = re.search(r"(?:at )?line (\d+)", error_message, re.IGNORECASE)
        if match:
            return int(match.group(1))
        return None

    def discover_configs(self, start_path: Optional[Path] = None) -> list[Path]:
        """Discover configuration files in order of precedence.

        Precedence order (lowest to highest):
        1. User config: ~/.config/logfocus/config.toml
        2. Git root: <git_root>/logfocus.toml
        3. Local (start_path): <start_path>/logfocus.toml

        Args:
            start_path: Starting directory for local config search. If None,
                uses current working directory.

        Returns:
            List of existing config file paths in precedence order (lowest first).
        """
        if start_path is None:
            start_path = Path.cwd()
        else:
            start_path = Path(start_path).resolve()

        candidates = [Path(os.path.expanduser("~")) / ".config" / "logfocus" / "config.toml"]

        git_root = find_git_root(start_path)
        if git_root:
            candidates.append(git_root / "logfocus.toml")

        candidates.append(start_path / "logfocus.toml")

        configs: list[Path] = []
        for candidate in candidates:
            if candidate.exists() and candidate.resolve() not in [c.resolve() for c in configs]:
                configs.append(candidate)

        return configs

    def load_merged(self, start_path: Optional[Path] = None) -> Config:
        """Load and merge configuration from all discovered config files.

        Later (higher precedence) files override values from earlier files.
        Unspecified values fall through to lower precedence configs or defaults.

        Raises:
            ConfigError: If any config file contains invalid TOML or values.
        """
        merged_data: dict = {}
        for config_path in self.discover_configs(start_path):
            merged_data = self._deep_merge(merged_data, self._read(config_path))

        return Config.from_dict(merged_data)

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries; values from override win."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
