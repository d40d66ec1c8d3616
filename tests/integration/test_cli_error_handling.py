"""CLI error-handling tests for concise command diagnostics."""

from pathlib import Path

from pytest import MonkeyPatch
from typer.testing import CliRunner

from scriptvoice.cli import app
from scriptvoice.errors import PipelineStageError, TransportError


def test_generate_command_reports_stage_error_with_hint(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """Generate should print stage-aware diagnostics and fail with exit code 1."""

    def _failing_generate(*_: object, **__: object) -> None:
        """Raise a stage-specific error to simulate pipeline failure."""

        raise PipelineStageError(
            stage="persist",
            detail="Failed to write combined audio.",
            hint="Check free disk space in the output directory.",
        )

    monkeypatch.setattr("scriptvoice.cli.VoiceoverService.generate_single", _failing_generate)
    script = tmp_path / "episode.txt"
    script.write_text("Hello.", encoding="utf-8")

    result = CliRunner().invoke(app, ["generate", str(script), "--out", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "generate failed at stage `persist`: Failed to write combined audio." in result.output
    assert "Hint: Check free disk space in the output directory." in result.output


def test_batch_command_reports_transport_error(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Tagged errors escaping the batch runner should render with their kind."""

    def _failing_batch(*_: object, **__: object) -> None:
        raise TransportError("Request to api failed after 5 attempts: reset", hint="Check network.")

    monkeypatch.setattr("scriptvoice.cli.VoiceoverService.run_batch", _failing_batch)
    script = tmp_path / "a.txt"
    script.write_text("Hello.", encoding="utf-8")

    result = CliRunner().invoke(app, ["batch", str(script), "--out", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "batch failed (transport): Request to api failed after 5 attempts" in result.output
    assert "Hint: Check network." in result.output


def test_generate_command_reports_unexpected_error(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """Untagged exceptions should still be reported with exit code 1."""

    def _failing_generate(*_: object, **__: object) -> None:
        raise RuntimeError("unexpected failure")

    monkeypatch.setattr("scriptvoice.cli.VoiceoverService.generate_single", _failing_generate)
    script = tmp_path / "episode.txt"
    script.write_text("Hello.", encoding="utf-8")

    result = CliRunner().invoke(app, ["generate", str(script), "--out", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "generate failed: unexpected failure" in result.output


def test_generate_command_reports_missing_config_file(tmp_path: Path) -> None:
    """Generate should fail with stage-aware diagnostics when `--config` path is missing."""

    result = CliRunner().invoke(
        app,
        ["generate", str(tmp_path / "episode.txt"), "--config", str(tmp_path / "missing.yml")],
    )

    assert result.exit_code == 1
    assert "generate failed at stage `config`: Config file not found" in result.output
    assert "Hint: Provide an existing path via `--config <path.yaml>`." in result.output


def test_generate_command_reports_invalid_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.yml"
    config_path.write_text("unknown_key: 1\n", encoding="utf-8")

    result = CliRunner().invoke(
        app, ["generate", str(tmp_path / "episode.txt"), "--config", str(config_path)]
    )

    assert result.exit_code == 1
    assert "generate failed at stage `config`: Invalid config file" in result.output
    assert "unsupported key(s): unknown_key" in result.output


def test_invalid_environment_is_reported_as_config_stage(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("SCRIPTVOICE_PARAGRAPHS_PER_CHUNK", "zero")
    script = tmp_path / "episode.txt"
    script.write_text("Hello.", encoding="utf-8")

    result = CliRunner().invoke(app, ["split", str(script)])

    assert result.exit_code == 1
    assert "split failed at stage `config`: Invalid environment configuration" in result.output
    assert "Hint: Fix or unset the offending `SCRIPTVOICE_*` variable." in result.output


def test_missing_script_file_is_reported_as_input_stage(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["split", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1
    assert "split failed at stage `input`: Failed to read script" in result.output


def test_out_of_range_options_are_rejected_by_the_parser(tmp_path: Path) -> None:
    script = tmp_path / "episode.txt"
    script.write_text("Hello.", encoding="utf-8")

    result = CliRunner().invoke(app, ["split", str(script), "--paragraphs", "0"])

    assert result.exit_code == 2
