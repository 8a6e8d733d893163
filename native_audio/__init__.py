"""Detect and load audio files referenced in prompt text."""

from .lib.audio_loading import AudioLoader
from .lib.audio_loading import AudioPipeline
from .lib.audio_loading import AudioReferenceDetector
from .lib.audio_loading import BatchResult
from .lib.audio_loading import DetectedReference
from .lib.audio_loading import LoadedContent
from .lib.audio_loading import ModelDescriptor
from .lib.audio_loading import ReferenceKind
from .lib.audio_loading import detect_and_load_prompt_audio
from .lib.audio_loading import detect_audio_references
from .lib.audio_loading import load_audio_from_ref
from .lib.audio_loading import model_supports_audio
from .settings import AudioConfig
from .utils.references import AUDIO_EXTENSIONS

__all__ = [
    "AUDIO_EXTENSIONS",
    "AudioConfig",
    "AudioLoader",
    "AudioPipeline",
    "AudioReferenceDetector",
    "BatchResult",
    "DetectedReference",
    "LoadedContent",
    "ModelDescriptor",
    "ReferenceKind",
    "detect_and_load_prompt_audio",
    "detect_audio_references",
    "load_audio_from_ref",
    "model_supports_audio",
]
