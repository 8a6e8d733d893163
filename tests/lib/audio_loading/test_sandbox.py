"""Tests for sandbox containment checks."""

import os

import pytest
from native_audio.lib.audio_loading.sandbox import SandboxViolationError
from native_audio.lib.audio_loading.sandbox import assert_sandbox_path


@pytest.fixture
def sandbox(tmp_path):
    root = tmp_path / "sandbox"
    (root / "music").mkdir(parents=True)
    (root / "music" / "a.mp3").write_bytes(b"ID3")
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.mp3").write_bytes(b"ID3")
    return {"root": root, "outside": outside}


def test_relative_path_inside_root(sandbox):
    root = sandbox["root"]

    result = assert_sandbox_path("music/a.mp3", cwd=root, root=root)

    assert result.resolved == (root / "music" / "a.mp3").resolve()
    assert str(result.relative) == os.path.join("music", "a.mp3")


def test_absolute_path_inside_root(sandbox):
    root = sandbox["root"]

    result = assert_sandbox_path(str(root / "music" / "a.mp3"), cwd=root, root=root)

    assert result.resolved.name == "a.mp3"


def test_parent_traversal_is_rejected(sandbox):
    root = sandbox["root"]

    with pytest.raises(SandboxViolationError) as exc_info:
        assert_sandbox_path("../outside/secret.mp3", cwd=root, root=root)

    assert "escapes sandbox root" in str(exc_info.value)


def test_traversal_hidden_mid_path_is_rejected(sandbox):
    root = sandbox["root"]

    with pytest.raises(SandboxViolationError):
        assert_sandbox_path("music/../../outside/secret.mp3", cwd=root, root=root)


def test_foreign_absolute_path_is_rejected(sandbox):
    root = sandbox["root"]

    with pytest.raises(SandboxViolationError):
        assert_sandbox_path(str(sandbox["outside"] / "secret.mp3"), cwd=root, root=root)


def test_symlink_escape_is_rejected(sandbox):
    root = sandbox["root"]
    link = root / "music" / "escape.mp3"
    link.symlink_to(sandbox["outside"] / "secret.mp3")

    with pytest.raises(SandboxViolationError) as exc_info:
        assert_sandbox_path("music/escape.mp3", cwd=root, root=root)

    assert "outside sandbox root" in str(exc_info.value)


def test_symlinked_directory_escape_is_rejected(sandbox):
    root = sandbox["root"]
    (root / "linked").symlink_to(sandbox["outside"], target_is_directory=True)

    with pytest.raises(SandboxViolationError):
        assert_sandbox_path("linked/secret.mp3", cwd=root, root=root)


def test_symlink_within_root_is_canonicalized(sandbox):
    root = sandbox["root"]
    link = root / "alias.mp3"
    link.symlink_to(root / "music" / "a.mp3")

    result = assert_sandbox_path("alias.mp3", cwd=root, root=root)

    assert result.resolved == (root / "music" / "a.mp3").resolve()


def test_empty_path_is_rejected(sandbox):
    with pytest.raises(SandboxViolationError):
        assert_sandbox_path("  ", cwd=sandbox["root"], root=sandbox["root"])


def test_violation_error_carries_path_and_root(sandbox):
    root = sandbox["root"]

    with pytest.raises(SandboxViolationError) as exc_info:
        assert_sandbox_path("../x.mp3", cwd=root, root=root)

    assert exc_info.value.path == "../x.mp3"
    assert exc_info.value.root == str(root)
