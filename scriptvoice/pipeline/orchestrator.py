"""Batch orchestration for many scripts.

Responsibilities:
- Turn named script sources into `queued` jobs.
- Drain queued jobs one at a time in enqueue order through the sequencer.
- Isolate failures per job so one failing script never stops the batch.
- Offer consistency-checked clearing and requeueing of finished jobs.

Key types:
- `BatchOrchestrator`: single driver of the job state machine.
- `BatchSummary`: per-run completion counts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
import uuid

from ..audio.assembler import write_artifact
from ..errors import JobStateError, ValidationError, VoiceoverError
from ..io.history import HistoryStore
from ..io.storage import ArtifactStore
from ..models.datatypes import (
    Artifact,
    ChunkAudio,
    HistoryRecord,
    Job,
    JobProgress,
    JobStatus,
    VoiceSettings,
)
from ..telemetry.logger import RunLogger
from ..text.slug import safe_filename, source_display_name
from .jobs import JobStore
from .sequencer import SequenceRun, VoiceoverSequencer

ScriptSources = Mapping[str, str] | Iterable[tuple[str, str]]

_UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class BatchSummary:
    """Outcome of one `process_queued` drain."""

    completed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.completed) + len(self.failed)


class BatchOrchestrator:
    """Drive one sequencer run per job with partial-failure isolation."""

    def __init__(
        self,
        sequencer: VoiceoverSequencer,
        store: JobStore | None = None,
        artifact_store: ArtifactStore | None = None,
        history: HistoryStore | None = None,
        run_logger: RunLogger | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.sequencer = sequencer
        self.store = store if store is not None else JobStore()
        self.artifact_store = artifact_store
        self.history = history
        self.run_logger = run_logger
        self.clock = clock

    def jobs(self) -> tuple[Job, ...]:
        """Return read-only job snapshots in enqueue order."""

        return self.store.snapshot()

    def enqueue(
        self,
        sources: ScriptSources,
        *,
        voice_id: str,
        model_id: str,
        paragraphs_per_chunk: int,
        voice_settings: VoiceSettings,
    ) -> list[Job]:
        """Create one `queued` job per `(name, content)` source.

        Raises:
            ValidationError: When the shared configuration is invalid.
        """

        if isinstance(paragraphs_per_chunk, bool) or paragraphs_per_chunk <= 0:
            raise ValidationError("Paragraphs per chunk must be a positive integer.")
        if not voice_id or not voice_id.strip():
            raise ValidationError("ElevenLabs voice id is required.")
        voice_settings.validate()

        items = sources.items() if isinstance(sources, Mapping) else sources
        created: list[Job] = []
        for name, content in items:
            job = Job(
                id=str(uuid.uuid4()),
                created_at=self.clock().isoformat(),
                script_content=content,
                original_filename=name,
                voice_id=voice_id.strip(),
                model_id=model_id,
                paragraphs_per_chunk=paragraphs_per_chunk,
                voice_settings=voice_settings,
            )
            created.append(self.store.add(job))
            self._log_transition(job)
        return created

    def process_queued(self) -> BatchSummary:
        """Process queued jobs one at a time until none are left."""

        summary = BatchSummary()
        while True:
            job = self.store.next_queued()
            if job is None:
                break
            outcome = self._process(job)
            if outcome is JobStatus.COMPLETED:
                summary.completed.append(job.id)
            elif outcome is JobStatus.ERROR:
                summary.failed.append(job.id)
            else:
                summary.skipped.append(job.id)
        return summary

    def delete_job(self, job_id: str) -> bool:
        """Delete a job in any state."""

        return self.store.delete(job_id)

    def clear_finished(
        self,
        statuses: Iterable[JobStatus | str] = (JobStatus.COMPLETED,),
    ) -> list[str]:
        """Delete jobs in the given terminal states and return their ids.

        Raises:
            ValidationError: When a non-terminal status is requested.
        """

        targets = {JobStatus(status) for status in statuses}
        non_terminal = sorted(status.value for status in targets if not status.is_terminal)
        if non_terminal:
            raise ValidationError(
                f"Only completed or error jobs can be cleared, not: {', '.join(non_terminal)}."
            )

        removed: list[str] = []
        for candidate in self.store.snapshot():
            if candidate.status not in targets:
                continue
            current = self.store.get(candidate.id)
            if current is None or current.status not in targets:
                continue
            if self.store.delete(candidate.id):
                removed.append(candidate.id)
        return removed

    def requeue_failed(self, job_ids: Iterable[str] | None = None) -> list[Job]:
        """Replace `error` jobs with fresh `queued` copies and return the new jobs."""

        wanted = set(job_ids) if job_ids is not None else None
        requeued: list[Job] = []
        for job in self.store.snapshot():
            if job.status is not JobStatus.ERROR:
                continue
            if wanted is not None and job.id not in wanted:
                continue
            if not self.store.delete(job.id):
                continue
            requeued.extend(
                self.enqueue(
                    [(job.original_filename, job.script_content)],
                    voice_id=job.voice_id,
                    model_id=job.model_id,
                    paragraphs_per_chunk=job.paragraphs_per_chunk,
                    voice_settings=job.voice_settings,
                )
            )
        return requeued

    def reset(self) -> None:
        """Discard all local job state; in-flight requests finish on their own."""

        self.store.clear()

    def _process(self, job: Job) -> JobStatus | None:
        try:
            job = self.store.transition(job.id, JobStatus.QUEUED, JobStatus.PROCESSING)
        except JobStateError:
            return None
        self._log_transition(job)

        run: SequenceRun | None = None
        try:
            run = self.sequencer.prepare(
                job.script_content,
                job.paragraphs_per_chunk,
                job.voice_id,
                job.model_id,
                job.voice_settings,
            )
            artifact = run.execute(
                progress_callback=lambda current, total: self._on_progress(
                    job.id, current, total
                )
            )
            if job.id not in self.store:
                return None
            final_path = self._persist(job, artifact)
        except Exception as exc:
            partial = run.completed_chunks if run is not None else ()
            return self._fail(job.id, exc, partial)
        return self._complete(job.id, artifact, final_path)

    def _on_progress(self, job_id: str, current: int, total: int) -> None:
        if job_id not in self.store:
            return
        self.store.update_progress(job_id, JobProgress(current=current, total=total))

    def _persist(self, job: Job, artifact: Artifact) -> Path | None:
        if self.artifact_store is None:
            return None
        display_name = source_display_name(job.original_filename)
        stem = f"{job.id[:8]}_{safe_filename(display_name)}"
        final_path = write_artifact(artifact, self.artifact_store, stem)
        if self.history is not None:
            self.history.append(
                HistoryRecord(
                    id=str(uuid.uuid4()),
                    name=display_name,
                    created_at=self.clock().isoformat(),
                    audio_path=str(final_path),
                )
            )
        return final_path

    def _complete(
        self,
        job_id: str,
        artifact: Artifact,
        final_path: Path | None,
    ) -> JobStatus | None:
        if job_id not in self.store:
            return None
        job = self.store.transition(
            job_id,
            JobStatus.PROCESSING,
            JobStatus.COMPLETED,
            artifact=artifact,
            final_audio_path=final_path,
            progress=None,
        )
        self._log_transition(job, chunks=artifact.chunk_count)
        return JobStatus.COMPLETED

    def _fail(
        self,
        job_id: str,
        exc: Exception,
        partial: tuple[ChunkAudio, ...],
    ) -> JobStatus | None:
        if job_id not in self.store:
            return None
        if isinstance(exc, VoiceoverError):
            message = exc.message
            kind = exc.kind.value
        else:
            message = str(exc) or _UNKNOWN_ERROR_MESSAGE
            kind = "unknown"
        job = self.store.transition(
            job_id,
            JobStatus.PROCESSING,
            JobStatus.ERROR,
            error_message=message,
            error_kind=kind,
            partial_chunks=partial,
            progress=None,
        )
        self._log_transition(job, error_type=type(exc).__name__, partial=len(partial))
        return JobStatus.ERROR

    def _log_transition(self, job: Job, **context: object) -> None:
        if self.run_logger is not None:
            self.run_logger.log_job_transition(job.id, job.status.value, **context)
