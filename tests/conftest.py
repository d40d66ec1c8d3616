"""Shared pytest fixtures for the full Scriptvoice test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator
import sys
from typing import Any

from loguru import logger
import pytest
import requests

from scriptvoice.models.datatypes import SynthesisResult, VoiceSettings


class RecordingSynthesizer:
    """Synthesizer test double that records calls and returns deterministic audio."""

    def __init__(
        self,
        fail_when: Callable[[str, int], Exception | None] | None = None,
        media_type: str = "audio/mpeg",
    ) -> None:
        """Initialize with an optional failure rule `(chunk_text, call_number) -> error`."""

        self.calls: list[dict[str, Any]] = []
        self.fail_when = fail_when
        self.media_type = media_type

    def synthesize(
        self,
        chunk_text: str,
        voice_id: str,
        voice_settings: VoiceSettings,
        model_id: str,
        previous_request_id: str | None = None,
    ) -> SynthesisResult:
        """Return `<chunk_text>` bytes and a `req-N` continuity token."""

        call_number = len(self.calls) + 1
        self.calls.append(
            {
                "text": chunk_text,
                "voice_id": voice_id,
                "voice_settings": voice_settings,
                "model_id": model_id,
                "previous_request_id": previous_request_id,
            }
        )
        if self.fail_when is not None:
            error = self.fail_when(chunk_text, call_number)
            if error is not None:
                raise error
        return SynthesisResult(
            audio=f"<{chunk_text}>".encode("utf-8"),
            request_id=f"req-{call_number}",
            media_type=self.media_type,
        )


class ScriptedSession:
    """`requests.Session` stand-in replaying scripted responses or exceptions."""

    def __init__(self, outcomes: list[requests.Response | Exception]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Record the call and return (or raise) the next scripted outcome."""

        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def build_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: dict[str, str] | None = None,
    reason: str | None = None,
) -> requests.Response:
    """Build a real `requests.Response` without network access."""

    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.headers.update(headers or {})
    response.reason = reason
    response.url = "https://api.elevenlabs.test/v1/mock"
    return response


@pytest.fixture
def recording_synthesizer() -> type[RecordingSynthesizer]:
    """Provide the recording synthesizer class for per-test configuration."""

    return RecordingSynthesizer


@pytest.fixture
def scripted_session() -> type[ScriptedSession]:
    """Provide the scripted session class for transport tests."""

    return ScriptedSession


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Provide the offline response builder."""

    return build_response


@pytest.fixture
def voice_settings() -> VoiceSettings:
    """Default caller voice settings with every optional field set."""

    return VoiceSettings(
        stability=0.75,
        similarity_boost=0.75,
        style=0.5,
        use_speaker_boost=True,
    )


@pytest.fixture(autouse=True)
def _restore_loguru_sink() -> Iterator[None]:
    """Reset loguru handlers replaced by `RunLogger` during a test."""

    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of config resolution."""

    for key in (
        "ELEVENLABS_API_KEY",
        "SCRIPTVOICE_OUTPUT_DIR",
        "SCRIPTVOICE_BASE_URL",
        "SCRIPTVOICE_VOICE_ID",
        "SCRIPTVOICE_MODEL_ID",
        "SCRIPTVOICE_PARAGRAPHS_PER_CHUNK",
        "SCRIPTVOICE_OUTPUT_FORMAT",
        "SCRIPTVOICE_SPEAKER_BOOST",
    ):
        monkeypatch.delenv(key, raising=False)
