"""History record persistence for completed voiceovers.

Records are kept newest-first in one `history.json` file inside an
`ArtifactStore`.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import StorageError
from ..models.datatypes import HistoryRecord
from .storage import ArtifactStore

HISTORY_FILE = Path("history.json")


class HistoryStore:
    """Append-only history of completed voiceovers."""

    def __init__(self, store: ArtifactStore, relative_path: Path = HISTORY_FILE) -> None:
        self.store = store
        self.relative_path = relative_path

    def list_records(self) -> list[HistoryRecord]:
        """Return stored records, newest first."""

        if not self.store.exists(self.relative_path):
            return []
        payload = self.store.load_json(self.relative_path)
        if not isinstance(payload, list):
            raise StorageError(
                f"Database Error: `{self.relative_path}` must contain a JSON list."
            )
        records: list[HistoryRecord] = []
        for item in payload:
            try:
                records.append(
                    HistoryRecord(
                        id=str(item["id"]),
                        name=str(item["name"]),
                        created_at=str(item["created_at"]),
                        audio_path=str(item["audio_path"]),
                    )
                )
            except (KeyError, TypeError) as exc:
                raise StorageError(
                    f"Database Error: malformed history record in `{self.relative_path}`."
                ) from exc
        return records

    def append(self, record: HistoryRecord) -> HistoryRecord:
        """Insert `record` at the front of the history and persist it."""

        records = [record, *self.list_records()]
        self.store.save_json(self.relative_path, [item.as_dict() for item in records])
        return record
