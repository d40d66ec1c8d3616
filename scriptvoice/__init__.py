"""Top-level package for Scriptvoice.

Scriptvoice turns long-form scripts into ElevenLabs voiceovers, chunk by
chunk, while preserving prosodic continuity across chunks. The main entry
point is `VoiceoverService`.
"""

from .pipeline import VoiceoverService

__all__ = ["VoiceoverService", "__version__"]

__version__ = "0.1.0"
