"""Path policy helpers shared by the detector, the sandbox and settings.

This module centralizes the user-path conventions. Libraries receive
expanded paths; nothing here touches the filesystem beyond reading the
home directory.
"""

import os
from pathlib import Path

APP_DIR_NAME = ".native-audio"


def expand_user_path(path: str) -> str:
    """Expand a leading ``~`` and return an absolute, normalized path.

    Normalization is lexical: ``.`` and ``..`` segments are collapsed but
    symlinks are not followed. Canonicalization for security decisions is
    the sandbox's job.

    Args:
        path: User-supplied path, possibly starting with ``~``

    Returns:
        Absolute path string, or the trimmed input when it is blank

    Examples:
        >>> expand_user_path("~/Music/song.mp3")  # doctest: +SKIP
        '/home/alice/Music/song.mp3'
    """
    trimmed = path.strip()
    if not trimmed:
        return trimmed
    if trimmed.startswith("~"):
        trimmed = os.path.expanduser(trimmed)
    return os.path.abspath(trimmed)


def get_app_home() -> Path:
    """Get the per-user application directory (~/.native-audio)."""
    return Path.home() / APP_DIR_NAME


def get_project_dir() -> Path:
    """Get the project-level application directory (./.native-audio)."""
    return Path.cwd() / APP_DIR_NAME
