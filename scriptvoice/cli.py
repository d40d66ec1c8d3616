"""Command-line interface for Scriptvoice.

Responsibilities:
- Expose user-facing commands for single-script and batch voiceover runs.
- Convert CLI arguments, YAML config, and environment into `VoiceoverConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_batch_summary,
    echo_capabilities,
    echo_chunk_previews,
    echo_history,
    echo_job_rows,
    echo_models,
    exit_with_command_error,
)
from .config import ConfigLoader, VoiceoverConfig
from .errors import PipelineStageError, VoiceoverError
from .pipeline.service import VoiceoverService
from .telemetry.logger import RunLogger
from .text.chunking import Chunker
from .tts.capabilities import build_request_settings, resolve_model_capabilities

app = typer.Typer(
    name="scriptvoice",
    no_args_is_help=True,
    help="Scriptvoice CLI.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
OutOption = Annotated[
    Path | None,
    typer.Option("--out", help="Output directory (overrides config file value)."),
]
VoiceIdOption = Annotated[
    str | None, typer.Option("--voice-id", help="ElevenLabs voice id.")
]
ModelIdOption = Annotated[
    str | None, typer.Option("--model-id", help="ElevenLabs model id.")
]
ParagraphsOption = Annotated[
    int | None,
    typer.Option("--paragraphs", min=1, help="Paragraphs per synthesized chunk."),
]
StabilityOption = Annotated[
    float | None, typer.Option("--stability", min=0.0, max=1.0, help="Voice stability (0-1).")
]
SimilarityOption = Annotated[
    float | None,
    typer.Option("--similarity-boost", min=0.0, max=1.0, help="Clarity/similarity boost (0-1)."),
]
StyleOption = Annotated[
    float | None, typer.Option("--style", min=0.0, max=1.0, help="Style exaggeration (0-1).")
]
SpeakerBoostOption = Annotated[
    bool | None,
    typer.Option("--speaker-boost/--no-speaker-boost", help="Toggle speaker boost."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="ElevenLabs API key override. Prefer `ELEVENLABS_API_KEY` to avoid shell history.",
    ),
]


class ChunkProgressIndicator:
    """Render deterministic per-chunk progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str, label: str | None = None) -> None:
        self._command_name = command_name
        self._label = label

    def on_chunk_start(self, current: int, total: int) -> None:
        """Print one progress line for a chunk start."""

        spinner = self._SPINNER_FRAMES[(current - 1) % len(self._SPINNER_FRAMES)]
        source = f" source={self._label}" if self._label else ""
        typer.echo(
            f"[progress] command={self._command_name}{source} "
            f"{spinner} chunk {current}/{total}"
        )


def _load_config(
    config_file: Path | None,
    out: Path | None = None,
    voice_id: str | None = None,
    model_id: str | None = None,
    paragraphs: int | None = None,
    stability: float | None = None,
    similarity_boost: float | None = None,
    style: float | None = None,
    speaker_boost: bool | None = None,
    api_key: str | None = None,
) -> VoiceoverConfig:
    """Resolve effective config: CLI option > YAML file > environment > default."""

    try:
        config = ConfigLoader.from_env()
    except VoiceoverError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid environment configuration: {exc.message}",
            hint="Fix or unset the offending `SCRIPTVOICE_*` variable.",
        ) from exc

    if config_file is not None:
        try:
            config = ConfigLoader.from_yaml(config_file, base=config)
        except FileNotFoundError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Config file not found: `{config_file}`.",
                hint="Provide an existing path via `--config <path.yaml>`.",
            ) from exc
        except VoiceoverError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid config file `{config_file}`: {exc.message}",
                hint="Fix config schema/values and rerun.",
            ) from exc
        except OSError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Failed to load config file `{config_file}`: {exc}",
                hint="Verify file permissions.",
            ) from exc

    config = config.with_overrides(
        output_dir=out,
        voice_id=voice_id,
        model_id=model_id,
        paragraphs_per_chunk=paragraphs,
        api_key=api_key,
    ).with_voice_overrides(
        stability=stability,
        similarity_boost=similarity_boost,
        style=style,
        use_speaker_boost=speaker_boost,
    )
    config.validate()
    return config


def _read_script(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Failed to read script `{path}`: {exc}",
            hint="Verify the script file exists and is readable UTF-8 text.",
        ) from exc
    except UnicodeDecodeError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Script `{path}` is not valid UTF-8 text.",
            hint="Save the script as UTF-8 and rerun.",
        ) from exc


@app.command("generate")
def generate_command(
    script: Annotated[Path, typer.Argument(help="Path to the script text file.")],
    config_file: ConfigOption = None,
    out: OutOption = None,
    voice_id: VoiceIdOption = None,
    model_id: ModelIdOption = None,
    paragraphs: ParagraphsOption = None,
    stability: StabilityOption = None,
    similarity_boost: SimilarityOption = None,
    style: StyleOption = None,
    speaker_boost: SpeakerBoostOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Synthesize one script into a combined voiceover plus per-chunk files."""

    service: VoiceoverService | None = None
    try:
        config = _load_config(
            config_file,
            out=out,
            voice_id=voice_id,
            model_id=model_id,
            paragraphs=paragraphs,
            stability=stability,
            similarity_boost=similarity_boost,
            style=style,
            speaker_boost=speaker_boost,
            api_key=api_key,
        )
        script_text = _read_script(script)
        service = VoiceoverService(config, run_logger=RunLogger())
        progress = ChunkProgressIndicator(command_name="generate")
        result = service.generate_single(script_text, progress_callback=progress.on_chunk_start)
    except Exception as exc:
        run = service.last_run if service is not None else None
        if run is not None and service is not None and service.saved_partial_paths:
            typer.echo(
                f"Saved {len(service.saved_partial_paths)} of {run.total} chunk(s) to "
                f"`{service.config.output_dir / 'chunks'}` before the failure."
            )
        exit_with_command_error("generate", exc)

    typer.echo(f"Chunks: {result.artifact.chunk_count}")
    typer.echo(f"Combined audio: {result.audio_path}")
    typer.echo(f"History record: {result.record.name}")


@app.command("batch")
def batch_command(
    scripts: Annotated[list[Path], typer.Argument(help="Script text files, one job each.")],
    config_file: ConfigOption = None,
    out: OutOption = None,
    voice_id: VoiceIdOption = None,
    model_id: ModelIdOption = None,
    paragraphs: ParagraphsOption = None,
    stability: StabilityOption = None,
    similarity_boost: SimilarityOption = None,
    style: StyleOption = None,
    speaker_boost: SpeakerBoostOption = None,
    api_key: ApiKeyOption = None,
    bundle: Annotated[
        bool,
        typer.Option(
            "--bundle/--no-bundle",
            help="Write completed voiceovers into `batch_voiceovers.zip`.",
        ),
    ] = True,
) -> None:
    """Queue every script as a job and process the queue one job at a time."""

    try:
        config = _load_config(
            config_file,
            out=out,
            voice_id=voice_id,
            model_id=model_id,
            paragraphs=paragraphs,
            stability=stability,
            similarity_boost=similarity_boost,
            style=style,
            speaker_boost=speaker_boost,
            api_key=api_key,
        )
        sources = [(path.name, _read_script(path)) for path in scripts]
        service = VoiceoverService(config, run_logger=RunLogger())
        summary = service.run_batch(sources)
        bundle_path = service.bundle_completed() if bundle else None
    except Exception as exc:
        exit_with_command_error("batch", exc)

    jobs = service.orchestrator.jobs()
    echo_job_rows(jobs)
    echo_batch_summary(summary, len(jobs))
    if bundle_path is not None:
        typer.echo(f"Bundle: {bundle_path}")
    if summary.failed:
        raise typer.Exit(code=1)


@app.command("split")
def split_command(
    script: Annotated[Path, typer.Argument(help="Path to the script text file.")],
    config_file: ConfigOption = None,
    paragraphs: ParagraphsOption = None,
) -> None:
    """Preview how a script is chunked, without calling the API."""

    try:
        config = _load_config(config_file, paragraphs=paragraphs)
        previews = Chunker().preview(_read_script(script), config.paragraphs_per_chunk)
    except Exception as exc:
        exit_with_command_error("split", exc)

    if not previews:
        typer.echo("Script is empty or contains no paragraphs.")
        return
    echo_chunk_previews(previews)


@app.command("capabilities")
def capabilities_command(
    model_id: Annotated[str, typer.Argument(help="ElevenLabs model id.")],
    config_file: ConfigOption = None,
    stability: StabilityOption = None,
    similarity_boost: SimilarityOption = None,
    style: StyleOption = None,
    speaker_boost: SpeakerBoostOption = None,
) -> None:
    """Show which voice settings a model honors and what would be sent."""

    try:
        config = _load_config(
            config_file,
            model_id=model_id,
            stability=stability,
            similarity_boost=similarity_boost,
            style=style,
            speaker_boost=speaker_boost,
        )
        capabilities = resolve_model_capabilities(config.model_id)
        settings = build_request_settings(config.voice_settings, capabilities)
    except Exception as exc:
        exit_with_command_error("capabilities", exc)

    echo_capabilities(config.model_id, capabilities, settings)


@app.command("models")
def models_command(
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """List text-to-speech models available to the API key."""

    try:
        config = _load_config(config_file, api_key=api_key)
        models = VoiceoverService(config).list_models()
    except Exception as exc:
        exit_with_command_error("models", exc)

    echo_models(models)


@app.command("history")
def history_command(
    config_file: ConfigOption = None,
    out: OutOption = None,
) -> None:
    """List completed voiceovers recorded in the output directory."""

    try:
        config = _load_config(config_file, out=out)
        records = VoiceoverService(config).list_history()
    except Exception as exc:
        exit_with_command_error("history", exc)

    echo_history(records)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
