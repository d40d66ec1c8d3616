"""Filename and display-name helpers for persisted voiceovers.

Responsibilities:
- Turn source names into filesystem-safe audio file names.
- Derive history display names from source names or script text.
"""

from __future__ import annotations

import re

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9.]", re.IGNORECASE)
_DISPLAY_NAME_WORDS = 5
UNTITLED_NAME = "Untitled Voiceover"


def safe_filename(value: str) -> str:
    """Replace every character outside `[a-z0-9.]` with an underscore."""

    return _UNSAFE_FILENAME_CHARS.sub("_", value) or "voiceover"


def audio_filename(source_name: str, extension: str = ".mp3") -> str:
    """Return the download name for a source, swapping `.txt` for the audio extension."""

    if source_name.lower().endswith(".txt"):
        return f"{source_name[:-4]}{extension}"
    return f"{source_name}{extension}"


def source_display_name(source_name: str) -> str:
    """Return a history name for a batch source file."""

    if source_name.lower().endswith(".txt"):
        return source_name[:-4]
    return source_name


def script_display_name(script: str) -> str:
    """Return the first words of a script, with an ellipsis when truncated."""

    words = script.split()
    if not words:
        return UNTITLED_NAME
    name = " ".join(words[:_DISPLAY_NAME_WORDS])
    if len(words) > _DISPLAY_NAME_WORDS:
        name += "..."
    return name
