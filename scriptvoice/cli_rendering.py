"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
chunk previews, batch job rows, model capability tables, and history listings.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, NoReturn

import typer

from .errors import PipelineStageError, VoiceoverError
from .models.datatypes import HistoryRecord, Job, JobStatus
from .pipeline.orchestrator import BatchSummary
from .text.chunking import ChunkPreview
from .tts.capabilities import ModelCapabilities

_PREVIEW_CHARS = 60


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = exc.hint
    elif isinstance(exc, VoiceoverError):
        typer.secho(
            f"{command_name} failed ({exc.kind.value}): {exc.message}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = exc.hint
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
        hint = None
    if hint:
        typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def echo_chunk_previews(previews: list[ChunkPreview]) -> None:
    """Print one row per planned chunk."""

    typer.echo(f"Chunks: {len(previews)}")
    for preview in previews:
        first_line = " ".join(preview.text.split())
        if len(first_line) > _PREVIEW_CHARS:
            first_line = f"{first_line[: _PREVIEW_CHARS - 3]}..."
        typer.echo(
            f"{preview.index}. paragraphs={preview.paragraph_count} "
            f"chars={preview.char_count} | {first_line}"
        )


def echo_job_rows(jobs: Iterable[Job]) -> None:
    """Print job status rows in enqueue order."""

    for job in jobs:
        line = f"[{job.status.value}] {job.original_filename}"
        if job.status is JobStatus.COMPLETED and job.final_audio_path is not None:
            line += f" -> {job.final_audio_path}"
        if job.status is JobStatus.ERROR:
            line += f": {job.error_message}"
            if job.partial_chunks:
                line += f" ({len(job.partial_chunks)} chunk(s) synthesized before failure)"
        color = typer.colors.RED if job.status is JobStatus.ERROR else None
        typer.secho(line, fg=color)


def echo_batch_summary(summary: BatchSummary, total_jobs: int) -> None:
    typer.echo(
        f"Batch jobs: {len(summary.completed)}/{total_jobs} completed, "
        f"{len(summary.failed)} failed."
    )


def echo_capabilities(model_id: str, capabilities: ModelCapabilities, settings: dict[str, Any]) -> None:
    """Print capability flags and the effective outgoing voice settings."""

    def _flag(value: bool) -> str:
        return "yes" if value else "no"

    typer.echo(f"Model: {model_id}")
    typer.echo(f"Clarity (similarity boost): {_flag(capabilities.supports_clarity)}")
    typer.echo(f"Style: {_flag(capabilities.supports_style)}")
    typer.echo(f"Speaker boost: {_flag(capabilities.supports_speaker_boost)}")
    typer.echo(f"Stability: {capabilities.stability_type}")
    typer.echo("Effective voice settings:")
    for key in sorted(settings):
        typer.echo(f"  {key}: {settings[key]}")


def echo_models(models: list[dict[str, Any]]) -> None:
    """Print model ids and names from the model catalogue."""

    for model in models:
        if model.get("can_do_text_to_speech") is False:
            continue
        typer.echo(f"{model.get('model_id', '?')}  {model.get('name', '')}".rstrip())


def echo_history(records: list[HistoryRecord]) -> None:
    if not records:
        typer.echo("No history records.")
        return
    for record in records:
        typer.echo(f"{record.created_at}  {record.name}  {record.audio_path}")
