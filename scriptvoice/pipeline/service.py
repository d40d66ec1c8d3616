"""Service facade wiring configuration to the voiceover pipeline.

Responsibilities:
- Build the ElevenLabs client, synthesizer, sequencer, and orchestrator from
  one `VoiceoverConfig`.
- Run single scripts and batches, persisting artifacts and history records.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
import uuid

from loguru import logger

from ..audio.assembler import extension_for_media_type, write_artifact
from ..audio.bundle import ArtifactBundler
from ..config import VoiceoverConfig
from ..errors import VoiceoverError
from ..io.history import HistoryStore
from ..io.storage import ArtifactStore
from ..models.datatypes import Artifact, HistoryRecord
from ..provider.elevenlabs_client import ElevenLabsClient
from ..provider.transport import ResilientTransport
from ..telemetry.logger import RunLogger
from ..text.slug import safe_filename, script_display_name
from ..tts.synthesizer import ElevenLabsSynthesizer, TTSSynthesizer
from .orchestrator import BatchOrchestrator, BatchSummary, ScriptSources
from .sequencer import ProgressCallback, SequenceRun, VoiceoverSequencer

_STEM_NAME_CHARS = 40


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class SingleRunResult:
    """Outputs of one single-script run."""

    artifact: Artifact
    audio_path: Path
    record: HistoryRecord


def create_client(
    config: VoiceoverConfig,
    sleeper: Callable[[float], None] | None = None,
) -> ElevenLabsClient:
    """Create an ElevenLabs client whose transport follows the configured retry budget."""

    transport_options: dict[str, Any] = {
        "max_retries": config.max_retries,
        "initial_backoff_seconds": config.initial_backoff_seconds,
    }
    if sleeper is not None:
        transport_options["sleeper"] = sleeper
    return ElevenLabsClient(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout_seconds=config.timeout_seconds,
        output_format=config.output_format,
        transport=ResilientTransport(**transport_options),
    )


class VoiceoverService:
    """Coordinate single and batch voiceover runs for one configuration."""

    def __init__(
        self,
        config: VoiceoverConfig,
        synthesizer: TTSSynthesizer | None = None,
        client: ElevenLabsClient | None = None,
        run_logger: RunLogger | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config
        self.client = client if client is not None else create_client(config)
        self.synthesizer = (
            synthesizer if synthesizer is not None else ElevenLabsSynthesizer(self.client)
        )
        self.run_logger = run_logger
        self.clock = clock
        self.artifact_store = ArtifactStore(config.output_dir)
        self.history = HistoryStore(self.artifact_store)
        self.sequencer = VoiceoverSequencer(self.synthesizer, run_logger=run_logger)
        self.orchestrator = BatchOrchestrator(
            self.sequencer,
            artifact_store=self.artifact_store,
            history=self.history,
            run_logger=run_logger,
            clock=clock,
        )
        self.last_run: SequenceRun | None = None
        self.saved_partial_paths: list[Path] = []

    def generate_single(
        self,
        script: str,
        progress_callback: ProgressCallback | None = None,
    ) -> SingleRunResult:
        """Synthesize one script, persist its artifact, and record history.

        On failure the chunks produced so far are written under `chunks/` and
        stay available through `last_run` before the error propagates.
        """

        self.config.validate_for_synthesis()
        self._stage_start("sequence")
        self.last_run = None
        self.saved_partial_paths = []
        run =self.sequencer.prepare(
            script,
            self.config.paragraphs_per_chunk,
            self.config.voice_id,
            self.config.model_id,
            self.config.voice_settings,
        )
        self.last_run = run
        record_id = str(uuid.uuid4())
        display_name = script_display_name(script)
        stem = f"{record_id[:8]}_{safe_filename(display_name.rstrip('.'))[:_STEM_NAME_CHARS]}"
        try:
            artifact = run.execute(progress_callback)
        except Exception as exc:
            self._stage_failure("sequence", exc)
            try:
                self._save_partial(run, stem)
            except VoiceoverError as save_exc:
                logger.opt(exception=save_exc).error(
                    "Failed to save partial chunks for {}.", stem
                )
                self._stage_failure("persist", save_exc)
            raise
        self._stage_complete("sequence", chunks=artifact.chunk_count)

        self._stage_start("persist")
        try:
            audio_path = write_artifact(artifact, self.artifact_store, stem)
            record = self.history.append(
                HistoryRecord(
                    id=record_id,
                    name=display_name,
                    created_at=self.clock().isoformat(),
                    audio_path=str(audio_path),
                )
            )
        except Exception as exc:
            self._stage_failure("persist", exc)
            raise
        self._stage_complete("persist")
        return SingleRunResult(artifact=artifact, audio_path=audio_path, record=record)

    def run_batch(self, sources: ScriptSources) -> BatchSummary:
        """Enqueue every source and drain the queue."""

        self.config.validate_for_synthesis()
        self.orchestrator.enqueue(
            sources,
            voice_id=self.config.voice_id,
            model_id=self.config.model_id,
            paragraphs_per_chunk=self.config.paragraphs_per_chunk,
            voice_settings=self.config.voice_settings,
        )
        return self.orchestrator.process_queued()

    def bundle_completed(self) -> Path | None:
        """Zip the combined audio of completed batch jobs."""

        return ArtifactBundler().bundle(self.orchestrator.jobs(), self.config.output_dir)

    def list_history(self) -> list[HistoryRecord]:
        return self.history.list_records()

    def list_models(self) -> list[dict[str, Any]]:
        return self.client.list_models()

    def _save_partial(self, run: SequenceRun, stem: str) -> None:
        for chunk in run.completed_chunks:
            extension = extension_for_media_type(chunk.media_type)
            path = self.artifact_store.save_audio(
                Path("chunks") / f"{stem}_{chunk.index:03d}{extension}",
                chunk.audio,
            )
            self.saved_partial_paths.append(path)

    def _stage_start(self, stage: str) -> None:
        if self.run_logger is not None:
            self.run_logger.log_stage_start(stage)

    def _stage_complete(self, stage: str, **context: object) -> None:
        if self.run_logger is not None:
            self.run_logger.log_stage_complete(stage, **context)

    def _stage_failure(self, stage: str, exc: Exception) -> None:
        if self.run_logger is not None:
            self.run_logger.log_stage_failure(stage, type(exc).__name__)
