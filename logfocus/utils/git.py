"""Git repository utilities for logfocus.

Used by configuration discovery to find a project-level ``logfocus.toml``.
"""

import os
from pathlib import Path
from typing import Optional


def find_git_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the root directory of a git repository.

    Walks up from the start path (or current working directory) looking for
    a .git entry. The LOGFOCUS_GIT_ROOT environment variable overrides
    detection; its value is returned even if the path does not exist.

    Args:
        start_path: Directory to start searching from. If None, uses the
            current working directory.

    Returns:
        Path to the git root directory, or None if not in a git repository.
    """
    env_override = os.environ.get("LOGFOCUS_GIT_ROOT")
    if env_override:
        return Path(env_override)

    current = Path.cwd() if start_path is None else Path(start_path).resolve()

    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate

    return None
