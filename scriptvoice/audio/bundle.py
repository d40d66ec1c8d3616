"""Zip packaging of completed batch outputs."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import zipfile

from ..errors import StorageError
from ..models.datatypes import Job, JobStatus
from ..text.slug import audio_filename
from .assembler import extension_for_media_type

DEFAULT_BUNDLE_NAME = "batch_voiceovers"


class ArtifactBundler:
    """Write the combined audio of completed jobs into one zip archive."""

    def bundle(
        self,
        jobs: Iterable[Job],
        output_dir: Path,
        name: str = DEFAULT_BUNDLE_NAME,
    ) -> Path | None:
        """Return the archive path, or `None` when no job has completed audio."""

        completed = [
            (job, job.artifact)
            for job in jobs
            if job.status is JobStatus.COMPLETED and job.artifact is not None
        ]
        if not completed:
            return None

        archive_path = output_dir / f"{name}.zip"
        used_names: set[str] = set()
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for job, artifact in completed:
                    entry = self._unique_name(
                        audio_filename(
                            job.original_filename,
                            extension_for_media_type(artifact.media_type),
                        ),
                        used_names,
                    )
                    archive.writestr(entry, artifact.combined)
        except OSError as exc:
            raise StorageError(f"Storage Error: failed to write `{archive_path}`: {exc}") from exc
        return archive_path

    @staticmethod
    def _unique_name(candidate: str, used_names: set[str]) -> str:
        name = candidate
        counter = 2
        while name in used_names:
            stem, dot, suffix = candidate.rpartition(".")
            name = f"{stem} ({counter}).{suffix}" if dot else f"{candidate} ({counter})"
            counter += 1
        used_names.add(name)
        return name
