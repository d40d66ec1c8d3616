"""Artifact storage abstraction.

Responsibilities:
- Provide filesystem storage for audio and JSON artifacts.
- Map filesystem failures to `StorageError` so they fail only the current job.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import StorageError


class ArtifactStore:
    """Filesystem-backed artifact store rooted at one output directory."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def save_audio(self, relative_path: Path, data: bytes) -> Path:
        """Save audio bytes and return final path."""

        path = self.root / relative_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Storage Error: failed to write `{path}`: {exc}") from exc
        return path

    def save_json(self, relative_path: Path, payload: Any) -> Path:
        """Save JSON-serializable payload and return final path."""

        path = self.root / relative_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StorageError(f"Storage Error: failed to write `{path}`: {exc}") from exc
        return path

    def load_json(self, relative_path: Path) -> Any:
        """Load a JSON artifact."""

        path = self.root / relative_path
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Storage Error: failed to read `{path}`: {exc}") from exc

    def exists(self, relative_path: Path) -> bool:
        """Return whether the given artifact exists."""

        return (self.root / relative_path).exists()
