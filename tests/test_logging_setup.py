"""Tests for the JSONL logging bootstrap."""

import json
import logging

import pytest
from native_audio.lib.audio_loading.loader import AudioLoader
from native_audio.lib.audio_loading.models import DetectedReference
from native_audio.lib.audio_loading.models import LoadedContent
from native_audio.lib.audio_loading.models import LoadOutcome
from native_audio.lib.audio_loading.models import SkipReason
from native_audio.logging_setup import JsonlHandler
from native_audio.logging_setup import init_json_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


def test_writes_jsonl_records(tmp_path, restore_root_logger):
    log_path = tmp_path / "logs" / "audio.jsonl"
    init_json_logging(log_path, "debug")

    logging.getLogger("native_audio.test").debug("Native audio: detected 2 audio refs", extra={"event": "detect"})

    lines = log_path.read_text().splitlines()
    record = json.loads(lines[-1])
    assert record["lvl"] == "DEBUG"
    assert record["logger"] == "native_audio.test"
    assert record["event"] == "detect"
    assert record["message"] == "Native audio: detected 2 audio refs"
    assert record["schema"]["name"] == "native_audio.log"


def test_reinitializing_replaces_handler(tmp_path, restore_root_logger):
    init_json_logging(tmp_path / "a.jsonl", "INFO")
    init_json_logging(tmp_path / "b.jsonl", "INFO")

    jsonl_handlers = [h for h in restore_root_logger.handlers if isinstance(h, JsonlHandler)]
    assert len(jsonl_handlers) == 1
    assert jsonl_handlers[0].path == tmp_path / "b.jsonl"


def test_extra_fields_are_attached(tmp_path, restore_root_logger):
    log_path = tmp_path / "audio.jsonl"
    init_json_logging(log_path, "INFO")

    logging.getLogger("native_audio.test").info("loaded", extra={"loaded_count": 3})

    record = json.loads(log_path.read_text().splitlines()[-1])
    assert record["loaded_count"] == 3


def test_outcome_extra_is_flattened(tmp_path, restore_root_logger):
    log_path = tmp_path / "audio.jsonl"
    init_json_logging(log_path, "INFO")
    ref = DetectedReference(raw="./a.mp3", resolved="/work/a.mp3")
    outcome = LoadOutcome.skipped(ref, SkipReason.SANDBOX_VIOLATION, "outside root")

    logging.getLogger("native_audio.test").info("skip", extra={"event": "audio_skip", "outcome": outcome})

    record = json.loads(log_path.read_text().splitlines()[-1])
    assert record["event"] == "audio_skip"
    assert record["ref"] == "./a.mp3"
    assert record["kind"] == "path"
    assert record["resolved"] == "/work/a.mp3"
    assert record["reason"] == "sandbox_violation"
    assert record["detail"] == "outside root"
    assert record["loaded"] is False
    assert "outcome" not in record


def test_loaded_outcome_omits_audio_data(tmp_path, restore_root_logger):
    log_path = tmp_path / "audio.jsonl"
    init_json_logging(log_path, "INFO")
    ref = DetectedReference(raw="/work/a.wav", resolved="/work/a.wav")
    outcome = LoadOutcome.success(ref, LoadedContent(data="UklGRg==", mime_type="audio/wav"))

    logging.getLogger("native_audio.test").info("loaded", extra={"outcome": outcome})

    line = log_path.read_text().splitlines()[-1]
    record = json.loads(line)
    assert record["loaded"] is True
    assert record["mime_type"] == "audio/wav"
    assert "reason" not in record
    assert "UklGRg==" not in line


@pytest.mark.asyncio
async def test_loader_skips_are_logged_with_reason(tmp_path, restore_root_logger):
    log_path = tmp_path / "audio.jsonl"
    init_json_logging(log_path, "DEBUG")
    ref = DetectedReference(raw="./missing.mp3", resolved="./missing.mp3")

    await AudioLoader().try_load(ref, tmp_path)

    records = [json.loads(line) for line in log_path.read_text().splitlines()]
    skips = [r for r in records if r["event"] == "audio_skip"]
    assert len(skips) == 1
    assert skips[0]["reason"] == "not_found"
    assert skips[0]["ref"] == "./missing.mp3"
    assert skips[0]["logger"] == "native_audio.lib.audio_loading.loader"
