"""Script-to-chunk segmentation logic.

Responsibilities:
- Split a script into paragraph-grouped chunks sized for one synthesis request.
- Keep segmentation pure and deterministic so chunk order can drive continuity.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

_PARAGRAPH_BREAK = re.compile(r"\n+")
PARAGRAPH_SEPARATOR = "\n\n"


def split_paragraphs(text: str) -> list[str]:
    """Split text on newline runs and drop whitespace-only paragraphs."""

    return [paragraph for paragraph in _PARAGRAPH_BREAK.split(text) if paragraph.strip()]


def split_script(text: str, paragraphs_per_chunk: int) -> list[str]:
    """Group non-empty paragraphs into fixed-size windows.

    Args:
        text: Raw script text.
        paragraphs_per_chunk: Number of paragraphs per chunk.

    Returns:
        Ordered chunk strings joined with a blank line. Empty when the text is
        blank or the window size is not positive.
    """

    if not text.strip() or paragraphs_per_chunk <= 0:
        return []
    paragraphs = split_paragraphs(text)
    return [
        PARAGRAPH_SEPARATOR.join(paragraphs[start : start + paragraphs_per_chunk])
        for start in range(0, len(paragraphs), paragraphs_per_chunk)
    ]


@dataclass(frozen=True, slots=True)
class ChunkPreview:
    """Size summary for one planned chunk."""

    index: int
    paragraph_count: int
    char_count: int
    text: str


class Chunker:
    """Paragraph-window chunker used by the sequencer and the `split` command."""

    def split(self, text: str, paragraphs_per_chunk: int) -> list[str]:
        """Return ordered chunk strings for a script."""

        return split_script(text, paragraphs_per_chunk)

    def preview(self, text: str, paragraphs_per_chunk: int) -> list[ChunkPreview]:
        """Return 1-based chunk previews with paragraph and character counts."""

        return [
            ChunkPreview(
                index=index,
                paragraph_count=len(chunk.split(PARAGRAPH_SEPARATOR)),
                char_count=len(chunk),
                text=chunk,
            )
            for index, chunk in enumerate(self.split(text, paragraphs_per_chunk), start=1)
        ]
