"""Core datatypes shared across Scriptvoice modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Provide explicit typing for job snapshots and persisted history records.

Key types:
- `VoiceSettings`, `SynthesisRequest`, `SynthesisResult`, `ChunkAudio`,
  `Artifact`, `JobStatus`, `JobProgress`, `Job`, and `HistoryRecord`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from ..errors import ValidationError


@dataclass(frozen=True, slots=True)
class VoiceSettings:
    """Caller-supplied voice tuning values.

    Attributes:
        stability: Voice stability slider value in `[0, 1]`.
        similarity_boost: Optional clarity/similarity slider value in `[0, 1]`.
        style: Optional style exaggeration value in `[0, 1]`.
        use_speaker_boost: Optional speaker-boost toggle.
        speed: Accepted for compatibility; outgoing requests always use 1.0.
    """

    stability: float
    similarity_boost: float | None = None
    style: float | None = None
    use_speaker_boost: bool | None = None
    speed: float | None = None

    def validate(self) -> None:
        """Raise `ValidationError` when a slider value is outside `[0, 1]`."""

        for name in ("stability", "similarity_boost", "style"):
            value = getattr(self, name)
            if value is None:
                if name == "stability":
                    raise ValidationError("`stability` is required.")
                continue
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise ValidationError(f"`{name}` must be a number between 0 and 1.")
            if not 0.0 <= float(value) <= 1.0:
                raise ValidationError(f"`{name}` must be a number between 0 and 1.")

    def as_dict(self) -> dict[str, Any]:
        """Return set fields as a plain mapping for JSON serialization."""

        payload: dict[str, Any] = {"stability": self.stability}
        if self.similarity_boost is not None:
            payload["similarity_boost"] = self.similarity_boost
        if self.style is not None:
            payload["style"] = self.style
        if self.use_speaker_boost is not None:
            payload["use_speaker_boost"] = self.use_speaker_boost
        if self.speed is not None:
            payload["speed"] = self.speed
        return payload

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> VoiceSettings:
        """Build settings from a mapping such as a YAML `voice_settings` block."""

        unknown = sorted(
            set(payload)
            - {"stability", "similarity_boost", "style", "use_speaker_boost", "speed"}
        )
        if unknown:
            raise ValidationError(f"Unknown voice setting(s): {', '.join(unknown)}.")
        if "stability" not in payload:
            raise ValidationError("`stability` is required.")
        settings = cls(
            stability=payload["stability"],
            similarity_boost=payload.get("similarity_boost"),
            style=payload.get("style"),
            use_speaker_boost=payload.get("use_speaker_boost"),
            speed=payload.get("speed"),
        )
        settings.validate()
        return settings


@dataclass(frozen=True, slots=True)
class SynthesisRequest:
    """One chunk-level synthesis request.

    Attributes:
        text: Chunk text.
        voice_id: Provider voice identifier.
        model_id: Provider model identifier.
        voice_settings: Caller settings before capability filtering.
        previous_request_id: Continuity token of the previous chunk, if any.
    """

    text: str
    voice_id: str
    model_id: str
    voice_settings: VoiceSettings
    previous_request_id: str | None = None


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """Audio returned for one chunk plus the continuity token for the next one."""

    audio: bytes
    request_id: str
    media_type: str = "audio/mpeg"


@dataclass(frozen=True, slots=True)
class ChunkAudio:
    """Audio synthesized for one 1-based chunk of a script."""

    index: int
    text: str
    audio: bytes
    request_id: str
    media_type: str = "audio/mpeg"


@dataclass(frozen=True, slots=True)
class Artifact:
    """Combined and per-chunk audio outputs of one completed sequencer run."""

    combined: bytes
    chunks: tuple[ChunkAudio, ...]
    media_type: str = "audio/mpeg"

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


class JobStatus(str, Enum):
    """Batch job lifecycle states."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)


@dataclass(frozen=True, slots=True)
class JobProgress:
    """Per-chunk progress of a processing job."""

    current: int
    total: int


@dataclass(frozen=True, slots=True)
class Job:
    """Read-only snapshot of one batch job.

    Attributes:
        id: Unique job identifier.
        created_at: ISO-8601 UTC creation timestamp.
        script_content: Raw script text.
        original_filename: Source name the script was enqueued under.
        voice_id: Provider voice identifier.
        model_id: Provider model identifier.
        paragraphs_per_chunk: Paragraph window size for chunking.
        voice_settings: Caller voice settings.
        status: Current lifecycle state.
        progress: Chunk progress while processing, otherwise `None`.
        artifact: Combined artifact once completed.
        final_audio_path: Persisted combined audio path, when stored.
        error_message: Display-ready failure message for `error` jobs.
        error_kind: Failure tag for `error` jobs.
        partial_chunks: Chunks produced before a failure.
    """

    id: str
    created_at: str
    script_content: str
    original_filename: str
    voice_id: str
    model_id: str
    paragraphs_per_chunk: int
    voice_settings: VoiceSettings
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress | None = None
    artifact: Artifact | None = None
    final_audio_path: Path | None = None
    error_message: str | None = None
    error_kind: str | None = None
    partial_chunks: tuple[ChunkAudio, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """Persisted record of one completed voiceover."""

    id: str
    name: str
    created_at: str
    audio_path: str

    def as_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "audio_path": self.audio_path,
        }
