"""Single-owner job store for batch processing.

Responsibilities:
- Hold job snapshots in enqueue order.
- Enforce the `queued -> processing -> completed|error` state machine with
  compare-and-set transitions.
- Publish post-transition snapshots to optional observers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from loguru import logger

from ..errors import JobStateError
from ..models.datatypes import Job, JobProgress, JobStatus

JobListener = Callable[[Job], None]

_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.ERROR}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.ERROR: frozenset(),
}


class JobStore:
    """In-memory job collection mutated only by the batch orchestrator."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._listeners: list[JobListener] = []

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    def subscribe(self, listener: JobListener) -> Callable[[], None]:
        """Register an observer and return a callable that unsubscribes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> tuple[Job, ...]:
        """Return all jobs in enqueue order."""

        return tuple(self._jobs.values())

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def next_queued(self) -> Job | None:
        """Return the oldest `queued` job, if any."""

        for job in self._jobs.values():
            if job.status is JobStatus.QUEUED:
                return job
        return None

    def add(self, job: Job) -> Job:
        if job.id in self._jobs:
            raise JobStateError(f"Job `{job.id}` already exists.")
        if job.status is not JobStatus.QUEUED:
            raise JobStateError(f"New job `{job.id}` must start as `queued`.")
        self._jobs[job.id] = job
        self._publish(job)
        return job

    def delete(self, job_id: str) -> bool:
        """Remove a job in any state and report whether it existed."""

        return self._jobs.pop(job_id, None) is not None

    def clear(self) -> None:
        self._jobs.clear()

    def transition(
        self,
        job_id: str,
        expected: JobStatus,
        target: JobStatus,
        **changes: Any,
    ) -> Job:
        """Move a job from `expected` to `target`, applying `changes` atomically.

        Raises:
            JobStateError: When the job is missing, not in `expected`, or the
                transition is not part of the state machine.
        """

        current = self._require(job_id)
        if current.status is not expected:
            raise JobStateError(
                f"Job `{job_id}` is `{current.status.value}`, expected `{expected.value}`."
            )
        if target not in _ALLOWED_TRANSITIONS[current.status]:
            raise JobStateError(
                f"Job `{job_id}` cannot move from `{current.status.value}` to `{target.value}`."
            )
        updated = replace(current, status=target, **changes)
        self._jobs[job_id] = updated
        self._publish(updated)
        return updated

    def update_progress(self, job_id: str, progress: JobProgress) -> Job:
        """Record chunk progress on a `processing` job."""

        current = self._require(job_id)
        if current.status is not JobStatus.PROCESSING:
            raise JobStateError(
                f"Job `{job_id}` is `{current.status.value}`; progress needs `processing`."
            )
        updated = replace(current, progress=progress)
        self._jobs[job_id] = updated
        self._publish(updated)
        return updated

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobStateError(f"Job `{job_id}` does not exist.")
        return job

    def _publish(self, job: Job) -> None:
        for listener in list(self._listeners):
            try:
                listener(job)
            except Exception:
                logger.exception("Job listener failed for job {}", job.id)
