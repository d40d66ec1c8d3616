"""Audio assembly and packaging components."""

from .assembler import ArtifactAssembler, extension_for_media_type, write_artifact
from .bundle import ArtifactBundler

__all__ = [
    "ArtifactAssembler",
    "ArtifactBundler",
    "extension_for_media_type",
    "write_artifact",
]
