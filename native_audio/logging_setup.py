"""
JSONL logging bootstrap.

Load diagnostics are logged with structured extras. A record may carry an
``outcome`` (LoadOutcome) or a ``ref`` (DetectedReference); both are flattened
into plain ``ref``/``kind``/``resolved``/``reason`` fields so a log can be
filtered by skip reason without parsing messages. Audio payloads are never
written to the log.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any

from .lib.audio_loading.models import DetectedReference
from .lib.audio_loading.models import LoadOutcome

DEFAULT_PATH = os.environ.get("NATIVE_AUDIO_LOG_PATH", "./native-audio.log.jsonl")
DEFAULT_LEVEL = os.environ.get("NATIVE_AUDIO_LOG_LEVEL", "INFO").upper()

SCHEMA = {"name": "native_audio.log", "ver": "1.1.0"}

# Attributes every LogRecord has; anything else was passed via extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def reference_fields(ref: DetectedReference) -> dict[str, Any]:
    """Flatten a detected reference for a log line."""
    return {"ref": ref.raw, "kind": ref.kind.value, "resolved": ref.resolved}


def outcome_fields(outcome: LoadOutcome) -> dict[str, Any]:
    """Flatten a load outcome for a log line, leaving out the audio bytes."""
    fields = reference_fields(outcome.ref)
    fields["loaded"] = outcome.loaded
    if outcome.content is not None:
        fields["mime_type"] = outcome.content.mime_type
    else:
        fields["reason"] = outcome.reason.value
        fields["detail"] = outcome.detail
    return fields


class JsonlHandler(logging.Handler):
    """Appends one JSON object per record to a file."""

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def build_payload(self, record: logging.LogRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": SCHEMA,
            "logger": record.name,
            "event": getattr(record, "event", None),
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key == "event":
                continue
            if isinstance(value, LoadOutcome):
                payload.update(outcome_fields(value))
            elif isinstance(value, DetectedReference):
                payload.update(reference_fields(value))
            else:
                payload.setdefault(key, value)
        return payload

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.build_payload(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | Path | None = None, level: str | None = None) -> JsonlHandler:
    """Attach a JsonlHandler to the root logger, replacing any previous one."""
    path = path or DEFAULT_PATH
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler):
            root.removeHandler(h)
            h.close()
    handler = JsonlHandler(path)
    root.addHandler(handler)
    return handler
