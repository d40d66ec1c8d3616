"""Text segmentation and naming helpers."""

from .chunking import Chunker, ChunkPreview, split_paragraphs, split_script
from .slug import audio_filename, safe_filename, script_display_name, source_display_name

__all__ = [
    "Chunker",
    "ChunkPreview",
    "split_paragraphs",
    "split_script",
    "audio_filename",
    "safe_filename",
    "script_display_name",
    "source_display_name",
]
