"""Detect-and-load orchestration for prompt audio."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ...settings import AudioConfig
from .detector import AudioReferenceDetector
from .detector import detect_audio_references
from .loader import AudioLoader
from .models import BatchResult
from .models import DetectedReference
from .models import LoadedContent
from .models import LoadOutcome

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


def _model_inputs(model: Any) -> list[str]:
    if model is None:
        return []
    if isinstance(model, Mapping):
        inputs = model.get("input")
    else:
        inputs = getattr(model, "input", None)
    return list(inputs or [])


def model_supports_audio(model: Any, *, image_implies_audio: bool = True) -> bool:
    """Check whether a model accepts audio input.

    A model qualifies if it declares "audio" input. Declaring "image" also
    qualifies while image_implies_audio is set: image support is used as a
    proxy for general multimodal input, which is an approximation.

    Args:
        model: ModelDescriptor, object with an `input` attribute, or mapping with "input"
        image_implies_audio: Treat "image" input as audio-capable

    Returns:
        True if audio should be attached for this model
    """
    inputs = _model_inputs(model)
    if "audio" in inputs:
        return True
    return image_implies_audio and "image" in inputs


async def _load_all(
    refs: Sequence[DetectedReference],
    loader: AudioLoader,
    workspace_dir: str | Path,
    max_bytes: int | None,
    sandbox_root: str | Path | None,
    max_concurrency: int,
) -> list[LoadOutcome]:
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _load_one(ref: DetectedReference) -> LoadOutcome:
        async with semaphore:
            return await loader.try_load(ref, workspace_dir, max_bytes=max_bytes, sandbox_root=sandbox_root)

    # gather preserves input order regardless of completion order
    return list(await asyncio.gather(*(_load_one(ref) for ref in refs)))


async def detect_and_load_prompt_audio(
    prompt: str,
    workspace_dir: str | Path,
    model: Any,
    *,
    existing_audio: Sequence[LoadedContent] | None = None,
    history_messages: Sequence[Any] | None = None,
    max_bytes: int | None = None,
    sandbox_root: str | Path | None = None,
    detector: AudioReferenceDetector | None = None,
    loader: AudioLoader | None = None,
    image_implies_audio: bool = True,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> BatchResult:
    """Detect audio references in a prompt and load them.

    Args:
        prompt: User prompt text
        workspace_dir: Base directory for relative paths
        model: Target model descriptor (see model_supports_audio)
        existing_audio: Content carried over from earlier turns, kept first
        history_messages: Accepted for interface stability; not scanned
        max_bytes: Per-file byte cap
        sandbox_root: Optional containment boundary
        detector: Custom detector (default: standard extension set)
        loader: Custom loader (default: local filesystem)
        image_implies_audio: Treat image-capable models as audio-capable
        max_concurrency: Maximum loads in flight

    Returns:
        BatchResult with merged content and loaded/skipped counts
    """
    if not model_supports_audio(model, image_implies_audio=image_implies_audio):
        return BatchResult(audio=[], loaded_count=0, skipped_count=0)

    refs = detector.detect(prompt) if detector is not None else detect_audio_references(prompt)
    if history_messages:
        logger.debug(f"Native audio: {len(history_messages)} history messages not scanned")

    if not refs:
        return BatchResult(audio=list(existing_audio or []), loaded_count=0, skipped_count=0)

    logger.debug(
        f"Native audio: detected {len(refs)} audio refs",
        extra={"event": "audio_detect", "ref_count": len(refs)},
    )

    outcomes = await _load_all(
        refs,
        loader or AudioLoader(),
        workspace_dir,
        max_bytes,
        sandbox_root,
        max_concurrency,
    )

    audio = list(existing_audio or [])
    loaded_count = 0
    skipped_count = 0
    for outcome in outcomes:
        if outcome.content is not None:
            audio.append(outcome.content)
            loaded_count += 1
            logger.debug(
                f"Native audio: loaded {outcome.ref.kind.value} {outcome.ref.resolved}",
                extra={"event": "audio_load", "outcome": outcome},
            )
        else:
            skipped_count += 1

    logger.info(
        f"Native audio: loaded {loaded_count}, skipped {skipped_count}",
        extra={"event": "audio_batch", "loaded_count": loaded_count, "skipped_count": skipped_count},
    )
    return BatchResult(audio=audio, loaded_count=loaded_count, skipped_count=skipped_count)


class AudioPipeline:
    """Binds an AudioConfig to a detector/loader pair.

    Usage:
        pipeline = AudioPipeline(get_settings().get_audio_config())
        result = await pipeline.run(prompt, workspace_dir, model)
    """

    def __init__(self, config: AudioConfig | None = None, loader: AudioLoader | None = None):
        self.config = config or AudioConfig()
        self.detector = AudioReferenceDetector(extensions=self.config.extensions)
        self.loader = loader or AudioLoader()

    def detect(self, text: str) -> list[DetectedReference]:
        return self.detector.detect(text)

    def supports(self, model: Any) -> bool:
        return model_supports_audio(model, image_implies_audio=self.config.image_implies_audio)

    async def run(
        self,
        prompt: str,
        workspace_dir: str | Path,
        model: Any,
        existing_audio: Sequence[LoadedContent] | None = None,
        history_messages: Sequence[Any] | None = None,
    ) -> BatchResult:
        return await detect_and_load_prompt_audio(
            prompt,
            workspace_dir,
            model,
            existing_audio=existing_audio,
            history_messages=history_messages,
            max_bytes=self.config.max_bytes,
            sandbox_root=self.config.sandbox_root,
            detector=self.detector,
            loader=self.loader,
            image_implies_audio=self.config.image_implies_audio,
            max_concurrency=self.config.max_concurrency,
        )
