"""Pure text processing for audio references - no file I/O.

Three reference shapes are recognized, each by its own pattern:
- Structured markers: [media attached: /path/to/clip.mp3 (audio/mpeg)]
- file:// URLs: file:///path/to/clip.wav
- Bare paths: /abs/clip.ogg, ./rel/clip.m4a, ../up/clip.flac, ~/home/clip.opus

Every pattern is compiled from an extension set so deployments can change
the recognized extensions without touching the matching logic.
"""

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from re import Pattern
from urllib.parse import unquote
from urllib.parse import urlsplit

AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".mp3",
        ".wav",
        ".aac",
        ".flac",
        ".ogg",
        ".opus",
        ".m4a",
        ".mp4",  # usually video, accepted for audio-only payloads
        ".mpeg",
        ".mpga",
        ".webm",
    }
)

REMOTE_PREFIXES = ("http://", "https://")

# "[media attached: 3 files]" summarizes a group and carries no path
FILE_COUNT_PATTERN: Pattern = re.compile(r"^\d+\s+files?$", re.IGNORECASE)


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Normalize extensions to lowercase with a leading dot.

    Examples:
        >>> sorted(normalize_extensions(["MP3", ".wav", " ogg "]))
        ['.mp3', '.ogg', '.wav']
    """
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)


def has_audio_extension(candidate: str, extensions: frozenset[str] = AUDIO_EXTENSIONS) -> bool:
    """Check if a path-like string ends in a recognized extension."""
    _, ext = os.path.splitext(candidate)
    return ext.lower() in extensions


def is_remote(candidate: str) -> bool:
    """Check if a candidate uses an http(s) scheme."""
    return candidate.lower().startswith(REMOTE_PREFIXES)


def is_file_url(candidate: str) -> bool:
    return candidate.lower().startswith("file://")


def file_url_to_path(url: str) -> str:
    """Convert a file:// URL to a POSIX filesystem path.

    Args:
        url: URL with the file scheme

    Returns:
        Percent-decoded absolute path

    Raises:
        ValueError: If the URL is not a local file URL or cannot be decoded

    Examples:
        >>> file_url_to_path("file:///tmp/a.wav")
        '/tmp/a.wav'
        >>> file_url_to_path("file://localhost/tmp/my%20song.mp3")
        '/tmp/my song.mp3'
    """
    parts = urlsplit(url)
    if parts.scheme.lower() != "file":
        raise ValueError(f"Not a file URL: {url}")
    if parts.netloc and parts.netloc.lower() != "localhost":
        raise ValueError(f"File URL host must be empty or localhost: {url}")
    if not parts.path:
        raise ValueError(f"File URL has no path: {url}")
    if "%2f" in parts.path.lower():
        raise ValueError(f"File URL path must not include encoded '/': {url}")

    path = unquote(parts.path, errors="strict")
    if "\x00" in path:
        raise ValueError(f"File URL path contains a NUL byte: {url}")
    return path


@dataclass(frozen=True)
class ReferencePatterns:
    """Compiled patterns for one extension set."""

    extensions: frozenset[str]
    marker: Pattern
    marker_path: Pattern
    file_url: Pattern
    bare_path: Pattern

    @classmethod
    def compile(cls, extensions: Iterable[str] = AUDIO_EXTENSIONS) -> "ReferencePatterns":
        normalized = normalize_extensions(extensions)
        if not normalized:
            raise ValueError("At least one extension is required")

        # Longest first so "mpeg" is tried before "mp"-style prefixes
        alternation = "|".join(re.escape(ext[1:]) for ext in sorted(normalized, key=lambda e: (-len(e), e)))
        ext_group = rf"\.(?:{alternation})"

        return cls(
            extensions=normalized,
            marker=re.compile(r"\[media attached(?:\s+\d+/\d+)?:\s*([^\]]+)\]", re.IGNORECASE),
            marker_path=re.compile(rf"^\s*(.+?{ext_group})\s*(?:\(|\Z|\|)", re.IGNORECASE),
            file_url=re.compile(rf"file://[^\s<>\"'`\]]+{ext_group}", re.IGNORECASE),
            bare_path=re.compile(
                rf"(?<![^\s\"'`(])((?:\.\.?/|[~/])[^\s\"'`()\[\]]*{ext_group})",
                re.IGNORECASE,
            ),
        )


DEFAULT_PATTERNS = ReferencePatterns.compile(AUDIO_EXTENSIONS)


def find_marker_candidates(text: str, patterns: ReferencePatterns = DEFAULT_PATTERNS) -> list[str]:
    """Extract path tokens from [media attached: ...] markers.

    Examples:
        >>> find_marker_candidates("[media attached: /tmp/a.mp3 (audio/mpeg) | /tmp/a.mp3]")
        ['/tmp/a.mp3']
        >>> find_marker_candidates("[media attached: 2 files]")
        []
    """
    candidates = []
    for match in patterns.marker.finditer(text):
        content = match.group(1)
        if FILE_COUNT_PATTERN.match(content.strip()):
            continue
        path_match = patterns.marker_path.match(content)
        if path_match and path_match.group(1):
            candidates.append(path_match.group(1).strip())
    return candidates


def find_file_url_candidates(text: str, patterns: ReferencePatterns = DEFAULT_PATTERNS) -> list[str]:
    """Extract raw file:// URLs ending in a recognized extension."""
    return [match.group(0) for match in patterns.file_url.finditer(text)]


def find_path_candidates(text: str, patterns: ReferencePatterns = DEFAULT_PATTERNS) -> list[str]:
    """Extract bare ./, ../, ~ and / prefixed path tokens.

    Examples:
        >>> find_path_candidates('play "./clips/intro.wav" then ~/Music/b.ogg')
        ['./clips/intro.wav', '~/Music/b.ogg']
    """
    return [match.group(1) for match in patterns.bare_path.finditer(text)]
