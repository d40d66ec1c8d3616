"""Shared typed data models for Scriptvoice.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    Artifact,
    ChunkAudio,
    HistoryRecord,
    Job,
    JobProgress,
    JobStatus,
    SynthesisRequest,
    SynthesisResult,
    VoiceSettings,
)

__all__ = [
    "Artifact",
    "ChunkAudio",
    "HistoryRecord",
    "Job",
    "JobProgress",
    "JobStatus",
    "SynthesisRequest",
    "SynthesisResult",
    "VoiceSettings",
]
