"""Settings management for native-audio.

Simple, scope-aware YAML settings. All options live under the ``audio:`` key.

Scope priority (most specific wins):
1. local (.native-audio/settings.local.yaml) - gitignored, machine-specific
2. project (.native-audio/settings.yaml) - committed, team-shared
3. global (~/.native-audio/settings.yaml) - user defaults

Environment variables override every scope:
- NATIVE_AUDIO_MAX_BYTES
- NATIVE_AUDIO_SANDBOX_ROOT
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import Literal

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

from .paths import get_app_home
from .paths import get_project_dir
from .utils.references import AUDIO_EXTENSIONS
from .utils.references import normalize_extensions

logger = logging.getLogger(__name__)

Scope = Literal["local", "project", "global"]

SETTINGS_KEY = "audio"
DEFAULT_MAX_BYTES = 20 * 1024 * 1024

ENV_MAX_BYTES = "NATIVE_AUDIO_MAX_BYTES"
ENV_SANDBOX_ROOT = "NATIVE_AUDIO_SANDBOX_ROOT"


class AudioConfig(BaseModel):
    """Policy for detecting and loading prompt audio."""

    extensions: frozenset[str] = Field(default=AUDIO_EXTENSIONS, description="Recognized audio extensions")
    max_bytes: int | None = Field(default=DEFAULT_MAX_BYTES, description="Per-file byte cap (null = no cap)")
    sandbox_root: Path | None = Field(default=None, description="Containment boundary for referenced files")
    image_implies_audio: bool = Field(default=True, description="Treat image-capable models as audio-capable")
    max_concurrency: int = Field(default=4, ge=1, description="Maximum concurrent file loads")

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            value = value.split(",")
        normalized = normalize_extensions(value)
        if not normalized:
            raise ValueError("extensions must not be empty")
        return normalized

    @field_validator("max_bytes")
    @classmethod
    def _positive_max_bytes(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("max_bytes must be positive")
        return value

    @field_validator("sandbox_root", mode="before")
    @classmethod
    def _expand_sandbox_root(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return None
            return Path(value).expanduser()
        return value


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        """Create default paths for the standard layout."""
        return cls(
            global_settings=get_app_home() / "settings.yaml",
            project_settings=get_project_dir() / "settings.yaml",
            local_settings=get_project_dir() / "settings.local.yaml",
        )


class AppSettings:
    """Scope-aware settings manager.

    Usage:
        settings = AppSettings()
        config = settings.get_audio_config()
        settings.set_audio_option("max_bytes", 1048576, scope="project")
    """

    def __init__(self, paths: SettingsPaths | None = None, environ: dict[str, str] | None = None) -> None:
        self.paths = paths or SettingsPaths.default()
        self._environ = environ if environ is not None else os.environ

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]:
            if path.exists():
                try:
                    with open(path) as f:
                        content = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Skipping malformed settings file {path}: {e}")
                    continue
                if not isinstance(content, dict):
                    logger.warning(f"Skipping settings file {path}: expected a mapping")
                    continue
                result = self._deep_merge(result, content)
        return result

    # ----- Audio settings -----

    def get_audio_options(self) -> dict[str, Any]:
        """Get the merged ``audio:`` section with environment overrides applied."""
        options = dict(self.get_merged_settings().get(SETTINGS_KEY) or {})

        max_bytes = self._environ.get(ENV_MAX_BYTES)
        if max_bytes:
            options["max_bytes"] = int(max_bytes)
        sandbox_root = self._environ.get(ENV_SANDBOX_ROOT)
        if sandbox_root:
            options["sandbox_root"] = sandbox_root

        return options

    def get_audio_config(self) -> AudioConfig:
        """Build a validated AudioConfig from merged settings."""
        return AudioConfig(**self.get_audio_options())

    def set_audio_option(self, key: str, value: Any, scope: Scope = "global") -> None:
        """Set one ``audio:`` option at the specified scope."""
        if key not in AudioConfig.model_fields:
            raise KeyError(f"Unknown audio option: {key}")
        settings = self._read_scope(scope)
        section = dict(settings.get(SETTINGS_KEY) or {})
        section[key] = value
        # Validate before writing so a bad value never lands on disk
        AudioConfig(**section)
        settings[SETTINGS_KEY] = section
        self._write_scope(scope, settings)

    def clear_audio_option(self, key: str, scope: Scope = "global") -> bool:
        """Remove one ``audio:`` option from the specified scope.

        Returns:
            True if the option was present
        """
        settings = self._read_scope(scope)
        section = dict(settings.get(SETTINGS_KEY) or {})
        if key not in section:
            return False
        del section[key]
        if section:
            settings[SETTINGS_KEY] = section
        else:
            settings.pop(SETTINGS_KEY, None)
        self._write_scope(scope, settings)
        return True

    # ----- Scope utilities -----

    def _get_scope_path(self, scope: Scope) -> Path:
        """Get settings file path for scope."""
        return {
            "local": self.paths.local_settings,
            "project": self.paths.project_settings,
            "global": self.paths.global_settings,
        }[scope]

    def _read_scope(self, scope: Scope) -> dict[str, Any]:
        """Read settings from a specific scope."""
        path = self._get_scope_path(scope)
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return {}
        return content if isinstance(content, dict) else {}

    def _write_scope(self, scope: Scope, settings: dict[str, Any]) -> None:
        """Write settings to a specific scope."""
        path = self._get_scope_path(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(settings, f, default_flow_style=False)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dicts, overlay wins."""
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def get_settings() -> AppSettings:
    """Get a settings instance with default paths."""
    return AppSettings()
