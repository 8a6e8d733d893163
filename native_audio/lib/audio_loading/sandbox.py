"""Sandbox containment checks for user-referenced files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ...paths import expand_user_path


class SandboxViolationError(ValueError):
    """Raised when a path resolves outside the sandbox root."""

    def __init__(self, message: str, path: str | Path, root: str | Path):
        super().__init__(message)
        self.path = str(path)
        self.root = str(root)


@dataclass(frozen=True)
class SandboxPath:
    """A path that passed containment.

    Attributes:
        resolved: Canonical absolute path (symlinks followed)
        relative: Path relative to the canonical sandbox root
    """

    resolved: Path
    relative: Path


class SandboxAsserter(Protocol):
    """Protocol for sandbox containment primitives."""

    def __call__(self, file_path: str | Path, cwd: str | Path, root: str | Path) -> SandboxPath:
        """Canonicalize file_path and verify it stays inside root."""
        ...


def _is_within(path: Path, root: Path) -> bool:
    return path == root or path.is_relative_to(root)


def assert_sandbox_path(file_path: str | Path, cwd: str | Path, root: str | Path) -> SandboxPath:
    """Resolve file_path against cwd and verify it stays inside root.

    Containment is checked twice: lexically (catches ../ traversal before
    touching the filesystem) and after canonicalization (catches symlinks
    pointing out of the root).

    Args:
        file_path: Path to validate, absolute or relative to cwd
        cwd: Base directory for relative paths
        root: Sandbox boundary

    Returns:
        SandboxPath with the canonical path to use for all further I/O

    Raises:
        SandboxViolationError: If the path escapes root or cannot be canonicalized
    """
    raw = str(file_path).strip()
    if not raw:
        raise SandboxViolationError("Empty path", file_path, root)

    base = Path(expand_user_path(str(cwd)))
    lexical_root = Path(expand_user_path(str(root)))
    expanded = expand_user_path(raw) if raw.startswith("~") else raw
    lexical_path = Path(os.path.normpath(base / expanded))

    if not _is_within(lexical_path, lexical_root):
        raise SandboxViolationError(f"Path escapes sandbox root ({lexical_root}): {raw}", raw, lexical_root)

    try:
        canonical_root = lexical_root.resolve(strict=False)
        canonical_path = lexical_path.resolve(strict=False)
    except (OSError, RuntimeError) as e:
        raise SandboxViolationError(f"Cannot canonicalize {raw}: {e}", raw, lexical_root) from e

    if not _is_within(canonical_path, canonical_root):
        raise SandboxViolationError(
            f"Path resolves outside sandbox root ({canonical_root}): {raw} -> {canonical_path}",
            raw,
            canonical_root,
        )

    return SandboxPath(resolved=canonical_path, relative=canonical_path.relative_to(canonical_root))
