"""Continuity-aware chunk sequencing for one script.

Responsibilities:
- Chunk a script and synthesize its chunks strictly in order.
- Feed each request the continuity token returned for the previous chunk.
- Keep chunks produced before a failure available to the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from ..audio.assembler import ArtifactAssembler
from ..errors import EmptyInputError, ValidationError
from ..models.datatypes import Artifact, ChunkAudio, VoiceSettings
from ..telemetry.logger import RunLogger
from ..text.chunking import split_script
from ..tts.synthesizer import TTSSynthesizer

ProgressCallback = Callable[[int, int], None]

EMPTY_SCRIPT_MESSAGE = "Script is empty or contains no paragraphs."


@dataclass(frozen=True, slots=True)
class _SequenceState:
    """Accumulator threaded through the chunk fold."""

    previous_request_id: str | None = None
    completed: tuple[ChunkAudio, ...] = ()


@dataclass(slots=True)
class SequenceRun:
    """One prepared script run; `completed_chunks` survives a failed `execute`."""

    synthesizer: TTSSynthesizer
    chunks: tuple[str, ...]
    voice_id: str
    model_id: str
    voice_settings: VoiceSettings
    run_logger: RunLogger | None = None
    assembler: ArtifactAssembler = field(default_factory=ArtifactAssembler)
    completed_chunks: tuple[ChunkAudio, ...] = ()

    @property
    def total(self) -> int:
        return len(self.chunks)

    def execute(self, progress_callback: ProgressCallback | None = None) -> Artifact:
        """Synthesize every chunk in order and assemble the artifact.

        Any synthesis failure aborts the remaining chunks and propagates
        unchanged; retries already happened in the transport.
        """

        state = _SequenceState()
        for index, chunk_text in enumerate(self.chunks, start=1):
            if progress_callback is not None:
                progress_callback(index, self.total)
            if self.run_logger is not None:
                self.run_logger.log_chunk_progress(index, self.total)
            state = self._step(state, index, chunk_text)
            self.completed_chunks = state.completed
        return self.assembler.combine(state.completed)

    def _step(self, state: _SequenceState, index: int, chunk_text: str) -> _SequenceState:
        result = self.synthesizer.synthesize(
            chunk_text,
            self.voice_id,
            self.voice_settings,
            self.model_id,
            state.previous_request_id,
        )
        chunk = ChunkAudio(
            index=index,
            text=chunk_text,
            audio=result.audio,
            request_id=result.request_id,
            media_type=result.media_type,
        )
        # An empty token means no continuity is available for the next chunk.
        return _SequenceState(
            previous_request_id=result.request_id or None,
            completed=(*state.completed, chunk),
        )


class VoiceoverSequencer:
    """Turn a script plus voice configuration into an ordered artifact."""

    def __init__(
        self,
        synthesizer: TTSSynthesizer,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.synthesizer = synthesizer
        self.run_logger = run_logger

    def prepare(
        self,
        script: str,
        paragraphs_per_chunk: int,
        voice_id: str,
        model_id: str,
        voice_settings: VoiceSettings,
    ) -> SequenceRun:
        """Validate inputs and chunk the script.

        Raises:
            ValidationError: For a non-positive chunk size or missing voice id.
            EmptyInputError: When the script yields zero chunks.
        """

        if isinstance(paragraphs_per_chunk, bool) or paragraphs_per_chunk <= 0:
            raise ValidationError("Paragraphs per chunk must be a positive integer.")
        if not voice_id or not voice_id.strip():
            raise ValidationError("ElevenLabs voice id is required.")
        chunks = split_script(script, paragraphs_per_chunk)
        if not chunks:
            raise EmptyInputError(
                EMPTY_SCRIPT_MESSAGE,
                hint="Add at least one non-empty paragraph to the script.",
            )
        return SequenceRun(
            synthesizer=self.synthesizer,
            chunks=tuple(chunks),
            voice_id=voice_id,
            model_id=model_id,
            voice_settings=voice_settings,
            run_logger=self.run_logger,
        )

    def synthesize_script(
        self,
        script: str,
        paragraphs_per_chunk: int,
        voice_id: str,
        model_id: str,
        voice_settings: VoiceSettings,
        progress_callback: ProgressCallback | None = None,
    ) -> Artifact:
        """Prepare and execute one run."""

        run = self.prepare(script, paragraphs_per_chunk, voice_id, model_id, voice_settings)
        return run.execute(progress_callback)
