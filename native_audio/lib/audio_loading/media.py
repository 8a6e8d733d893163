"""Local media loading with content-type sniffing.

Reads a file from disk, detects its content type from magic bytes (falling
back to the file extension) and classifies it into a media kind.
"""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

SNIFF_BYTES = 64


class MediaKind(str, Enum):
    """Broad media class of a loaded file."""

    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


class MediaLoadError(Exception):
    """Raised when a media file cannot be loaded."""


class MediaTooLargeError(MediaLoadError):
    """Raised when a media file exceeds the byte cap."""

    def __init__(self, path: str | Path, size: int, max_bytes: int):
        super().__init__(f"Media exceeds {max_bytes} byte limit ({size} bytes): {path}")
        self.size = size
        self.max_bytes = max_bytes


@dataclass(frozen=True)
class LoadedMedia:
    """Raw bytes of a media file with its detected type."""

    kind: MediaKind
    content_type: str | None
    buffer: bytes
    file_name: str | None = None


class MediaLoader(Protocol):
    """Protocol for media byte loaders."""

    def __call__(self, path: str | Path, max_bytes: int | None = None) -> LoadedMedia:
        """Load a file and classify it."""
        ...


# Extension fallbacks for types the mimetypes registry often lacks
EXTENSION_CONTENT_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".mpga": "audio/mpeg",
    ".mpeg": "audio/mpeg",
    ".wav": "audio/wav",
    ".aac": "audio/aac",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
    ".opus": "audio/opus",
    ".m4a": "audio/mp4",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}

# ISO-BMFF brands used by audio-only MPEG-4 files
M4A_BRANDS = frozenset({b"M4A ", b"M4B ", b"M4P ", b"F4A ", b"F4B "})

DOCUMENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/json",
        "application/xml",
        "application/rtf",
    }
)


def _sniff_magic(head: bytes) -> str | None:
    """Detect a content type from leading bytes."""
    if head.startswith(b"ID3"):
        return "audio/mpeg"
    if head[:4] == b"RIFF" and head[8:12] == b"WAVE":
        return "audio/wav"
    if head.startswith(b"fLaC"):
        return "audio/flac"
    if head.startswith(b"OggS"):
        return "audio/opus" if b"OpusHead" in head else "audio/ogg"
    if head[4:8] == b"ftyp":
        return "audio/mp4" if head[8:12] in M4A_BRANDS else "video/mp4"
    if head.startswith(b"\x1a\x45\xdf\xa3"):
        return "video/webm"
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if head.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if head.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if head.startswith(b"%PDF"):
        return "application/pdf"
    # Frame sync: 11 set bits. ADTS AAC has layer bits 00, MPEG audio does not.
    if len(head) >= 2 and head[0] == 0xFF and (head[1] & 0xE0) == 0xE0:
        return "audio/aac" if (head[1] & 0x06) == 0 else "audio/mpeg"
    return None


def sniff_content_type(head: bytes, file_name: str | None = None) -> str | None:
    """Best-effort content type from magic bytes, then the file name.

    Args:
        head: Leading bytes of the file
        file_name: Optional file name for extension fallback

    Returns:
        Content type, or None if nothing matched
    """
    sniffed = _sniff_magic(head)
    if sniffed:
        return sniffed

    if not file_name:
        return None

    ext = Path(file_name).suffix.lower()
    if ext in EXTENSION_CONTENT_TYPES:
        return EXTENSION_CONTENT_TYPES[ext]

    guessed, _ = mimetypes.guess_type(file_name)
    return guessed


def media_kind_for(content_type: str | None) -> MediaKind:
    """Classify a content type into a media kind."""
    if not content_type:
        return MediaKind.UNKNOWN
    main = content_type.split(";", 1)[0].strip().lower()
    if main.startswith("audio/"):
        return MediaKind.AUDIO
    if main.startswith("video/"):
        return MediaKind.VIDEO
    if main.startswith("image/"):
        return MediaKind.IMAGE
    if main.startswith("text/") or main in DOCUMENT_TYPES:
        return MediaKind.DOCUMENT
    return MediaKind.UNKNOWN


def load_local_media(path: str | Path, max_bytes: int | None = None) -> LoadedMedia:
    """Read a local file and classify it.

    Args:
        path: File to read
        max_bytes: Optional size cap; larger files are rejected, never truncated

    Returns:
        LoadedMedia with bytes, detected content type and kind

    Raises:
        MediaTooLargeError: If the file exceeds max_bytes
        MediaLoadError: If the path is not a regular file or cannot be read
    """
    file_path = Path(path)
    try:
        stat = file_path.stat()
    except OSError as e:
        raise MediaLoadError(f"Cannot stat {file_path}: {e}") from e

    if not file_path.is_file():
        raise MediaLoadError(f"Not a regular file: {file_path}")

    if max_bytes is not None and stat.st_size > max_bytes:
        raise MediaTooLargeError(file_path, stat.st_size, max_bytes)

    try:
        with file_path.open("rb") as f:
            # Read one byte past the cap to catch files that grew after stat
            buffer = f.read() if max_bytes is None else f.read(max_bytes + 1)
    except OSError as e:
        raise MediaLoadError(f"Cannot read {file_path}: {e}") from e

    if max_bytes is not None and len(buffer) > max_bytes:
        raise MediaTooLargeError(file_path, len(buffer), max_bytes)

    content_type = sniff_content_type(buffer[:SNIFF_BYTES], file_path.name)
    kind = media_kind_for(content_type)
    logger.debug(f"Loaded media {file_path}: {len(buffer)} bytes, {content_type or 'unknown type'}")
    return LoadedMedia(kind=kind, content_type=content_type, buffer=buffer, file_name=file_path.name)
