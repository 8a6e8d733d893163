"""Audio loading library for native-audio.

This library detects audio references in prompt text, loads the referenced
files under an optional sandbox, and returns audio content blocks for use in
a model call.
"""

from .detector import AudioReferenceDetector
from .detector import detect_audio_references
from .detector import has_audio_references
from .loader import DEFAULT_AUDIO_MIME_TYPE
from .loader import AudioLoader
from .loader import load_audio_from_ref
from .models import BatchResult
from .models import DetectedReference
from .models import LoadedContent
from .models import LoadOutcome
from .models import ModelDescriptor
from .models import ReferenceKind
from .models import SkipReason
from .orchestrator import AudioPipeline
from .orchestrator import detect_and_load_prompt_audio
from .orchestrator import model_supports_audio

__all__ = [
    "DEFAULT_AUDIO_MIME_TYPE",
    "AudioLoader",
    "AudioPipeline",
    "AudioReferenceDetector",
    "BatchResult",
    "DetectedReference",
    "LoadOutcome",
    "LoadedContent",
    "ModelDescriptor",
    "ReferenceKind",
    "SkipReason",
    "detect_and_load_prompt_audio",
    "detect_audio_references",
    "has_audio_references",
    "load_audio_from_ref",
    "model_supports_audio",
]
