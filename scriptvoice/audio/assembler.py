"""Artifact assembly for synthesized chunks.

Responsibilities:
- Concatenate ordered chunk audio into one playable artifact without transcoding.
- Keep per-chunk audio available for individual access.
- Persist artifacts through `ArtifactStore`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ..errors import ValidationError
from ..io.storage import ArtifactStore
from ..models.datatypes import Artifact, ChunkAudio

_MEDIA_TYPE_EXTENSIONS = {
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/pcm": ".pcm",
    "audio/basic": ".ulaw",
    "audio/ogg": ".ogg",
    "audio/opus": ".opus",
}


def extension_for_media_type(media_type: str) -> str:
    """Return the file extension used when persisting audio of `media_type`."""

    return _MEDIA_TYPE_EXTENSIONS.get(media_type.lower(), ".mp3")


class ArtifactAssembler:
    """Combine ordered chunk audio into one artifact."""

    def combine(self, chunks: Sequence[ChunkAudio]) -> Artifact:
        """Concatenate chunk audio in the given order.

        Raises:
            ValidationError: When there are no chunks or media types differ.
        """

        if not chunks:
            raise ValidationError("Cannot assemble an artifact from zero chunks.")
        media_type = chunks[0].media_type
        for chunk in chunks:
            if chunk.media_type != media_type:
                raise ValidationError(
                    f"Incompatible media type for chunk {chunk.index}: "
                    f"{chunk.media_type} (expected {media_type})."
                )
        return Artifact(
            combined=b"".join(chunk.audio for chunk in chunks),
            chunks=tuple(chunks),
            media_type=media_type,
        )


def write_artifact(artifact: Artifact, store: ArtifactStore, stem: str) -> Path:
    """Persist combined and per-chunk audio and return the combined file path."""

    extension = extension_for_media_type(artifact.media_type)
    for chunk in artifact.chunks:
        store.save_audio(Path("chunks") / f"{stem}_{chunk.index:03d}{extension}", chunk.audio)
    return store.save_audio(Path(f"{stem}{extension}"), artifact.combined)
