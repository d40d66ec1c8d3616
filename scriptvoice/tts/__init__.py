"""Text-to-speech provider abstractions.

This package contains model capability resolution and the chunk-level
synthesizer used by the sequencer.
"""

from .capabilities import ModelCapabilities, build_request_settings, resolve_model_capabilities
from .synthesizer import ElevenLabsSynthesizer, TTSSynthesizer

__all__ = [
    "ModelCapabilities",
    "build_request_settings",
    "resolve_model_capabilities",
    "ElevenLabsSynthesizer",
    "TTSSynthesizer",
]
