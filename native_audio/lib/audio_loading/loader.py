"""Load a detected audio reference into a content block.

Validation always precedes I/O, and once the sandbox has canonicalized a
path only that canonical path is stat'ed and read.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
from pathlib import Path

from ...paths import expand_user_path
from ...utils.error_format import format_error_message
from .media import LoadedMedia
from .media import MediaKind
from .media import MediaLoader
from .media import MediaLoadError
from .media import load_local_media
from .models import DetectedReference
from .models import LoadedContent
from .models import LoadOutcome
from .models import ReferenceKind
from .models import SkipReason
from .sandbox import SandboxAsserter
from .sandbox import SandboxViolationError
from .sandbox import assert_sandbox_path

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME_TYPE = "audio/mpeg"

ACCEPTED_KINDS = frozenset({MediaKind.AUDIO, MediaKind.VIDEO})


class AudioLoader:
    """Loads audio references from the local filesystem.

    Features:
    - Local-only policy (URL references are always skipped)
    - Optional sandbox containment with canonical-path I/O
    - Audio and video containers accepted, everything else skipped
    - Expected failures become skip outcomes, never exceptions
    """

    def __init__(
        self,
        media_loader: MediaLoader = load_local_media,
        sandbox: SandboxAsserter = assert_sandbox_path,
    ):
        """Initialize loader.

        Args:
            media_loader: Reads a file and classifies it
            sandbox: Canonicalizes a path and checks containment
        """
        self.media_loader = media_loader
        self.sandbox = sandbox

    async def try_load(
        self,
        ref: DetectedReference,
        workspace_dir: str | Path,
        *,
        max_bytes: int | None = None,
        sandbox_root: str | Path | None = None,
    ) -> LoadOutcome:
        """Load one reference.

        Args:
            ref: Reference produced by the detector
            workspace_dir: Base directory for relative paths without a sandbox
            max_bytes: Optional per-file byte cap
            sandbox_root: Optional containment boundary (also the base for relative paths)

        Returns:
            LoadOutcome carrying either content or a skip reason
        """
        if ref.kind == ReferenceKind.URL:
            return self._skip(ref, SkipReason.REMOTE_URL, f"rejecting remote URL (local-only): {ref.resolved}")

        workspace_dir = expand_user_path(str(workspace_dir))
        if sandbox_root is not None:
            sandbox_root = expand_user_path(str(sandbox_root))

        target = ref.resolved
        if not os.path.isabs(target):
            base = sandbox_root if sandbox_root is not None else workspace_dir
            target = os.path.abspath(os.path.join(str(base), target))

        if sandbox_root is not None:
            try:
                validated = await asyncio.to_thread(self.sandbox, target, sandbox_root, sandbox_root)
            except (SandboxViolationError, OSError, ValueError) as e:
                return self._skip(
                    ref,
                    SkipReason.SANDBOX_VIOLATION,
                    f"sandbox validation failed for {ref.resolved}: {format_error_message(e)}",
                )
            target = str(validated.resolved)

        try:
            await asyncio.to_thread(os.stat, target)
        # NUL bytes in a path raise ValueError rather than OSError
        except (OSError, ValueError):
            return self._skip(ref, SkipReason.NOT_FOUND, f"file not found: {target}")

        try:
            media: LoadedMedia = await asyncio.to_thread(self.media_loader, target, max_bytes)
        except (MediaLoadError, OSError, ValueError) as e:
            return self._skip(
                ref,
                SkipReason.LOAD_FAILED,
                f"failed to load {ref.resolved}: {format_error_message(e)}",
            )

        if media.kind not in ACCEPTED_KINDS:
            return self._skip(ref, SkipReason.NOT_AUDIO, f"not an audio file: {target} (got {media.kind.value})")

        content = LoadedContent(
            data=base64.b64encode(media.buffer).decode("ascii"),
            mime_type=media.content_type or DEFAULT_AUDIO_MIME_TYPE,
        )
        return LoadOutcome.success(ref, content)

    async def load(
        self,
        ref: DetectedReference,
        workspace_dir: str | Path,
        *,
        max_bytes: int | None = None,
        sandbox_root: str | Path | None = None,
    ) -> LoadedContent | None:
        """Load one reference, returning None when it is skipped."""
        outcome = await self.try_load(ref, workspace_dir, max_bytes=max_bytes, sandbox_root=sandbox_root)
        return outcome.content

    @staticmethod
    def _skip(ref: DetectedReference, reason: SkipReason, detail: str) -> LoadOutcome:
        outcome = LoadOutcome.skipped(ref, reason, detail)
        logger.debug(f"Native audio: {detail}", extra={"event": "audio_skip", "outcome": outcome})
        return outcome


async def load_audio_from_ref(
    ref: DetectedReference,
    workspace_dir: str | Path,
    *,
    max_bytes: int | None = None,
    sandbox_root: str | Path | None = None,
) -> LoadedContent | None:
    """Load audio for a reference with the default filesystem primitives.

    Returns:
        LoadedContent, or None if the reference was skipped for any reason
    """
    return await AudioLoader().load(ref, workspace_dir, max_bytes=max_bytes, sandbox_root=sandbox_root)
