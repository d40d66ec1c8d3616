"""Persistence components: artifact files and voiceover history records."""

from .history import HistoryStore
from .storage import ArtifactStore

__all__ = ["ArtifactStore", "HistoryStore"]
