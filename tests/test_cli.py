"""Tests for the native-audio command line interface."""

import json
import logging

import pytest
import yaml
from click.testing import CliRunner
from native_audio.main import cli


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point settings at a throwaway home and project directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("NATIVE_AUDIO_MAX_BYTES", raising=False)
    monkeypatch.delenv("NATIVE_AUDIO_SANDBOX_ROOT", raising=False)
    return home


@pytest.fixture
def runner():
    return CliRunner()


def test_detect_lists_references(runner, isolated_env):
    result = runner.invoke(cli, ["detect", "play [media attached: /tmp/a.mp3] and file:///tmp/b.wav"])

    assert result.exit_code == 0
    assert "/tmp/a.mp3" in result.output
    assert "/tmp/b.wav" in result.output


def test_detect_reads_stdin(runner, isolated_env):
    result = runner.invoke(cli, ["detect", "-"], input="listen to ./clip.ogg\n")

    assert result.exit_code == 0
    assert "./clip.ogg" in result.output


def test_detect_without_references(runner, isolated_env):
    result = runner.invoke(cli, ["detect", "hello there"])

    assert result.exit_code == 0
    assert "No audio references found" in result.output


def test_load_json_output(runner, isolated_env, audio_files, monkeypatch):
    monkeypatch.chdir(audio_files["workspace"])

    result = runner.invoke(cli, ["load", "./song.mp3 and ./missing.wav", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["loaded_count"] == 1
    assert payload["skipped_count"] == 1
    assert payload["audio"][0]["mimeType"] == "audio/mpeg"


def test_load_respects_sandbox_root(runner, isolated_env, audio_files):
    result = runner.invoke(
        cli,
        [
            "load",
            f"{audio_files['mp3']}",
            "--sandbox-root",
            str(audio_files["workspace"] / "clips"),
            "--json",
        ],
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["loaded_count"] == 0
    assert payload["skipped_count"] == 1


def test_load_text_model_loads_nothing(runner, isolated_env, audio_files):
    result = runner.invoke(
        cli,
        ["load", str(audio_files["mp3"]), "--model-input", "text", "--workspace", str(audio_files["workspace"])],
    )

    assert result.exit_code == 0
    assert "Loaded: 0" in result.output
    assert "Skipped: 0" in result.output


def test_config_set_show_unset(runner, isolated_env, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli, ["config", "set", "max_bytes", "2048", "--scope", "project"])
    assert result.exit_code == 0
    settings_file = tmp_path / ".native-audio" / "settings.yaml"
    assert yaml.safe_load(settings_file.read_text()) == {"audio": {"max_bytes": 2048}}

    result = runner.invoke(cli, ["config", "show"])
    assert result.exit_code == 0
    assert "2048" in result.output

    result = runner.invoke(cli, ["config", "unset", "max_bytes", "--scope", "project"])
    assert result.exit_code == 0
    assert "Removed max_bytes" in result.output


def test_config_set_invalid_value(runner, isolated_env, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli, ["config", "set", "max_concurrency", "0"])

    assert result.exit_code == 1
    assert "Invalid value" in result.output


def test_log_file_option(runner, isolated_env, tmp_path):
    log_path = tmp_path / "cli.jsonl"
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    result = runner.invoke(cli, ["--log-file", str(log_path), "--log-level", "DEBUG", "detect", "file://host/x.wav"])

    assert result.exit_code == 0
    assert log_path.exists()
    assert "malformed file URL" in log_path.read_text()

    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
