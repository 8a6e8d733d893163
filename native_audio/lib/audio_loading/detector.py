"""Audio reference detection with precedence and de-duplication."""

from __future__ import annotations

import logging
from collections.abc import Callable
from collections.abc import Iterable

from ...paths import expand_user_path
from ...utils.references import AUDIO_EXTENSIONS
from ...utils.references import ReferencePatterns
from ...utils.references import file_url_to_path
from ...utils.references import find_file_url_candidates
from ...utils.references import find_marker_candidates
from ...utils.references import find_path_candidates
from ...utils.references import has_audio_extension
from ...utils.references import is_file_url
from ...utils.references import is_remote
from .models import DetectedReference
from .models import ReferenceKind

logger = logging.getLogger(__name__)


class AudioReferenceDetector:
    """Finds audio references in free-form text.

    Scan order (first match wins, keyed by lowercase raw text):
    1. Structured markers: [media attached: path (type) | url]
    2. file:// URLs
    3. Bare paths: ./x.mp3, ../x.mp3, ~/x.mp3, /x.mp3

    Detection is pure: no filesystem access, never raises.
    """

    def __init__(
        self,
        extensions: Iterable[str] = AUDIO_EXTENSIONS,
        expand_user: Callable[[str], str] = expand_user_path,
    ):
        """Initialize detector.

        Args:
            extensions: Recognized extensions (case-insensitive, dot optional)
            expand_user: Expands a leading ~ to an absolute path
        """
        self.patterns = ReferencePatterns.compile(extensions)
        self._expand_user = expand_user

    @property
    def extensions(self) -> frozenset[str]:
        return self.patterns.extensions

    def detect(self, text: str) -> list[DetectedReference]:
        """Detect audio references in text.

        Args:
            text: Prompt text to scan

        Returns:
            Ordered, de-duplicated references (all of kind PATH)
        """
        if not text:
            return []

        refs: list[DetectedReference] = []
        seen: set[str] = set()

        for candidate in find_marker_candidates(text, self.patterns):
            self._add_path_ref(candidate, refs, seen)

        for raw in find_file_url_candidates(text, self.patterns):
            key = raw.lower()
            if key in seen:
                continue
            seen.add(key)
            try:
                resolved = file_url_to_path(raw)
            except ValueError as e:
                logger.debug(f"Native audio: skipping malformed file URL {raw}: {e}")
                continue
            refs.append(DetectedReference(raw=raw, kind=ReferenceKind.PATH, resolved=resolved))

        for candidate in find_path_candidates(text, self.patterns):
            self._add_path_ref(candidate, refs, seen)

        return refs

    def has_references(self, text: str) -> bool:
        return bool(self.detect(text))

    def _add_path_ref(self, raw: str, refs: list[DetectedReference], seen: set[str]) -> None:
        trimmed = raw.strip()
        if not trimmed or trimmed.lower() in seen:
            return
        if is_remote(trimmed):
            return
        if not has_audio_extension(trimmed, self.extensions):
            return
        seen.add(trimmed.lower())

        if is_file_url(trimmed):
            try:
                resolved = file_url_to_path(trimmed)
            except ValueError as e:
                logger.debug(f"Native audio: skipping malformed file URL {trimmed}: {e}")
                return
        elif trimmed.startswith("~"):
            resolved = self._expand_user(trimmed)
        else:
            resolved = trimmed

        refs.append(DetectedReference(raw=trimmed, kind=ReferenceKind.PATH, resolved=resolved))


_default_detector: AudioReferenceDetector | None = None


def _get_default_detector() -> AudioReferenceDetector:
    global _default_detector
    if _default_detector is None:
        _default_detector = AudioReferenceDetector()
    return _default_detector


def detect_audio_references(text: str) -> list[DetectedReference]:
    """Detect audio references using the default extension set.

    Examples:
        >>> [r.resolved for r in detect_audio_references("file:///tmp/a.wav and file:///tmp/a.wav")]
        ['/tmp/a.wav']
    """
    return _get_default_detector().detect(text)


def has_audio_references(text: str) -> bool:
    """Check if text contains at least one audio reference."""
    return _get_default_detector().has_references(text)
