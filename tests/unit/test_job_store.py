"""Unit tests for the compare-and-set batch job store."""

from __future__ import annotations

import pytest

from scriptvoice.errors import JobStateError
from scriptvoice.models.datatypes import Job, JobProgress, JobStatus, VoiceSettings
from scriptvoice.pipeline.jobs import JobStore


def _job(job_id: str, status: JobStatus = JobStatus.QUEUED) -> Job:
    return Job(
        id=job_id,
        created_at="2026-01-01T00:00:00+00:00",
        script_content="Hello.",
        original_filename=f"{job_id}.txt",
        voice_id="voice-1",
        model_id="eleven_multilingual_v2",
        paragraphs_per_chunk=1,
        voice_settings=VoiceSettings(stability=0.5),
        status=status,
    )


def test_add_keeps_enqueue_order_and_rejects_duplicates() -> None:
    store = JobStore()
    store.add(_job("a"))
    store.add(_job("b"))

    assert [job.id for job in store.snapshot()] == ["a", "b"]
    assert len(store) == 2
    assert "a" in store
    with pytest.raises(JobStateError, match="already exists"):
        store.add(_job("a"))


def test_add_requires_queued_status() -> None:
    with pytest.raises(JobStateError, match="must start as `queued`"):
        JobStore().add(_job("a", JobStatus.COMPLETED))


def test_transition_follows_state_machine_and_applies_changes() -> None:
    """Jobs move queued -> processing -> error and carry the given field changes."""

    store = JobStore()
    store.add(_job("a"))

    processing = store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)
    failed = store.transition(
        "a", JobStatus.PROCESSING, JobStatus.ERROR, error_message="boom", error_kind="api"
    )

    assert processing.status is JobStatus.PROCESSING
    assert failed.status is JobStatus.ERROR
    assert store.get("a").error_message == "boom"
    assert store.get("a").error_kind == "api"


def test_transition_rejects_stale_expected_status() -> None:
    """A compare-and-set with a stale expected status should fail without changes."""

    store = JobStore()
    store.add(_job("a"))
    store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)

    with pytest.raises(JobStateError, match="expected `queued`"):
        store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)

    assert store.get("a").status is JobStatus.PROCESSING


@pytest.mark.parametrize(
    ("expected", "target"),
    [
        (JobStatus.QUEUED, JobStatus.COMPLETED),
        (JobStatus.QUEUED, JobStatus.ERROR),
    ],
)
def test_transition_rejects_skipping_processing(expected: JobStatus, target: JobStatus) -> None:
    store = JobStore()
    store.add(_job("a"))

    with pytest.raises(JobStateError, match="cannot move"):
        store.transition("a", expected, target)


def test_terminal_states_are_final() -> None:
    store = JobStore()
    store.add(_job("a"))
    store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)
    store.transition("a", JobStatus.PROCESSING, JobStatus.COMPLETED)

    for target in JobStatus:
        with pytest.raises(JobStateError):
            store.transition("a", JobStatus.COMPLETED, target)


def test_transition_of_missing_job_fails() -> None:
    with pytest.raises(JobStateError, match="does not exist"):
        JobStore().transition("ghost", JobStatus.QUEUED, JobStatus.PROCESSING)


def test_progress_requires_processing_status() -> None:
    store = JobStore()
    store.add(_job("a"))

    with pytest.raises(JobStateError, match="progress needs `processing`"):
        store.update_progress("a", JobProgress(1, 3))

    store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)
    assert store.update_progress("a", JobProgress(1, 3)).progress == JobProgress(1, 3)


def test_next_queued_returns_oldest_queued_job() -> None:
    store = JobStore()
    store.add(_job("a"))
    store.add(_job("b"))
    store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)

    assert store.next_queued().id == "b"


def test_listeners_receive_snapshots_until_unsubscribed() -> None:
    store = JobStore()
    seen: list[tuple[str, JobStatus]] = []
    unsubscribe = store.subscribe(lambda job: seen.append((job.id, job.status)))

    store.add(_job("a"))
    store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)
    unsubscribe()
    store.transition("a", JobStatus.PROCESSING, JobStatus.COMPLETED)

    assert seen == [("a", JobStatus.QUEUED), ("a", JobStatus.PROCESSING)]


def test_failing_listener_does_not_block_state_changes() -> None:
    store = JobStore()

    def _broken_listener(job: Job) -> None:
        raise RuntimeError("listener bug")

    store.subscribe(_broken_listener)
    store.add(_job("a"))
    store.transition("a", JobStatus.QUEUED, JobStatus.PROCESSING)

    assert store.get("a").status is JobStatus.PROCESSING


def test_delete_and_clear() -> None:
    store = JobStore()
    store.add(_job("a"))
    store.add(_job("b"))

    assert store.delete("a") is True
    assert store.delete("a") is False
    store.clear()
    assert len(store) == 0
