"""Integration tests for the `batch` CLI command."""

from __future__ import annotations

from pathlib import Path
from typing import Any
import zipfile

from pytest import MonkeyPatch
from typer.testing import CliRunner

from scriptvoice.cli import app


def _write_scripts(tmp_path: Path, scripts: dict[str, str]) -> list[str]:
    paths: list[str] = []
    for name, text in scripts.items():
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        paths.append(str(path))
    return paths


def test_batch_command_isolates_failures_and_bundles_completed_jobs(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    elevenlabs_requests: list[dict[str, Any]],
) -> None:
    """An empty script fails alone while the other jobs complete and get bundled."""

    monkeypatch.setenv("ELEVENLABS_API_KEY", "test-key")
    paths = _write_scripts(
        tmp_path,
        {"intro.txt": "Welcome.\n\nLet's begin.", "blank.txt": "  \n", "outro.txt": "Goodbye."},
    )
    out_dir = tmp_path / "out"

    result = CliRunner().invoke(
        app, ["batch", *paths, "--out", str(out_dir), "--voice-id", "voice-1"]
    )

    assert result.exit_code == 1
    assert "[completed] intro.txt ->" in result.output
    assert "[error] blank.txt: Script is empty or contains no paragraphs." in result.output
    assert "[completed] outro.txt ->" in result.output
    assert "Batch jobs: 2/3 completed, 1 failed." in result.output
    assert f"Bundle: {out_dir / 'batch_voiceovers.zip'}" in result.output

    with zipfile.ZipFile(out_dir / "batch_voiceovers.zip") as archive:
        assert archive.namelist() == ["intro.mp3", "outro.mp3"]
        assert archive.read("intro.mp3") == b"mp3:Welcome.|mp3:Let's begin.|"

    assert [request["payload"]["text"] for request in elevenlabs_requests] == [
        "Welcome.",
        "Let's begin.",
        "Goodbye.",
    ]
    assert "previous_request_ids" not in elevenlabs_requests[2]["payload"]


def test_batch_command_without_bundle_succeeds(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
) -> None:
    monkeypatch.setenv("ELEVENLABS_API_KEY", "test-key")
    paths = _write_scripts(tmp_path, {"a.txt": "Alpha.", "b.txt": "Beta."})
    out_dir = tmp_path / "out"

    result = CliRunner().invoke(
        app, ["batch", *paths, "--out", str(out_dir), "--voice-id", "voice-1", "--no-bundle"]
    )

    assert result.exit_code == 0, result.output
    assert "Batch jobs: 2/2 completed, 0 failed." in result.output
    assert "Bundle:" not in result.output
    assert not (out_dir / "batch_voiceovers.zip").exists()
    assert len(list(out_dir.glob("*.mp3"))) == 2


def test_batch_command_reads_defaults_from_yaml_config(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    elevenlabs_requests: list[dict[str, Any]],
) -> None:
    """YAML values should apply, and CLI options should win over them."""

    monkeypatch.setenv("ELEVENLABS_API_KEY", "test-key")
    config_path = tmp_path / "scriptvoice.yml"
    config_path.write_text(
        f"""
output_dir: {tmp_path / "yaml-out"}
voice_id: voice-yaml
paragraphs_per_chunk: 2
voice_settings:
  stability: 0.3
""".strip(),
        encoding="utf-8",
    )
    paths = _write_scripts(tmp_path, {"a.txt": "One.\n\nTwo.\n\nThree."})

    result = CliRunner().invoke(
        app,
        ["batch", *paths, "--config", str(config_path), "--paragraphs", "3", "--no-bundle"],
    )

    assert result.exit_code == 0, result.output
    (request,) = elevenlabs_requests
    assert request["voice_id"] == "voice-yaml"
    assert request["payload"]["text"] == "One.\n\nTwo.\n\nThree."
    assert request["payload"]["voice_settings"]["stability"] == 0.3
    assert len(list((tmp_path / "yaml-out").glob("*.mp3"))) == 1
