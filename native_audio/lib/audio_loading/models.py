"""Data models for audio reference detection and loading."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator


class ReferenceKind(str, Enum):
    """Kind of a detected reference.

    Types:
    - PATH: Local filesystem reference (absolute, relative, home or file://)
    - URL: Remote reference, detected but never loaded
    """

    PATH = "path"
    URL = "url"


class SkipReason(str, Enum):
    """Why a reference produced no content."""

    REMOTE_URL = "remote_url"
    SANDBOX_VIOLATION = "sandbox_violation"
    NOT_FOUND = "not_found"
    LOAD_FAILED = "load_failed"
    NOT_AUDIO = "not_audio"


class DetectedReference(BaseModel):
    """A text span that points at a candidate audio file.

    Attributes:
        raw: Exact substring matched in the source text (trimmed)
        kind: Path or URL
        resolved: Best-effort canonical form (home expanded, file:// decoded)
        origin_index: Index into history messages, None for the prompt itself
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    kind: ReferenceKind = ReferenceKind.PATH
    resolved: str
    origin_index: int | None = None


class LoadedContent(BaseModel):
    """Audio content block ready for a model call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["audio"] = "audio"
    data: str = Field(description="Base64-encoded file bytes")
    mime_type: str = Field(alias="mimeType", description="Content type of the payload")


class LoadOutcome(BaseModel):
    """Result of one load attempt: content or a skip reason, never both."""

    model_config = ConfigDict(frozen=True)

    ref: DetectedReference
    content: LoadedContent | None = None
    reason: SkipReason | None = None
    detail: str | None = None

    @model_validator(mode="after")
    def _content_xor_reason(self) -> LoadOutcome:
        if (self.content is None) == (self.reason is None):
            raise ValueError("LoadOutcome needs exactly one of content or reason")
        return self

    @property
    def loaded(self) -> bool:
        return self.content is not None

    @classmethod
    def success(cls, ref: DetectedReference, content: LoadedContent) -> LoadOutcome:
        return cls(ref=ref, content=content)

    @classmethod
    def skipped(cls, ref: DetectedReference, reason: SkipReason, detail: str | None = None) -> LoadOutcome:
        return cls(ref=ref, reason=reason, detail=detail)


class BatchResult(BaseModel):
    """Merged output of a detect-and-load pass.

    Attributes:
        audio: Previously carried content first, then new items in detection order
        loaded_count: References that produced content
        skipped_count: References that were skipped
    """

    model_config = ConfigDict(frozen=True)

    audio: list[LoadedContent] = Field(default_factory=list)
    loaded_count: int = 0
    skipped_count: int = 0


class ModelDescriptor(BaseModel):
    """Caller-supplied description of the target model's input modalities."""

    id: str | None = None
    input: list[str] | None = None
