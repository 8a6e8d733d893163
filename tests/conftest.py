"""Pytest configuration for native-audio tests."""

import sys
from pathlib import Path

import pytest

# Make the package importable when running from a source checkout
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt \x10\x00\x00\x00\x01\x00\x01\x00" + b"\x00" * 24
MP3_BYTES = b"ID3\x04\x00\x00\x00\x00\x00\x00" + bytes(range(64))
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def audio_files(tmp_path):
    """Create a workspace with a few media files."""
    workspace = tmp_path / "workspace"
    (workspace / "clips").mkdir(parents=True)

    (workspace / "clips" / "intro.wav").write_bytes(WAV_BYTES)
    (workspace / "song.mp3").write_bytes(MP3_BYTES)
    # Audio extension, image contents
    (workspace / "fake.mp3").write_bytes(PNG_BYTES)

    yield {
        "root": tmp_path,
        "workspace": workspace,
        "wav": workspace / "clips" / "intro.wav",
        "mp3": workspace / "song.mp3",
        "fake": workspace / "fake.mp3",
    }
