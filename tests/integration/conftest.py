"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
import requests

from scriptvoice.provider.elevenlabs_client import ElevenLabsClient


@pytest.fixture(autouse=True)
def elevenlabs_requests(
    monkeypatch: pytest.MonkeyPatch,
    make_response: Callable[..., requests.Response],
) -> list[dict[str, Any]]:
    """Mock ElevenLabs HTTP calls in integration tests to avoid network/key requirements."""

    sent: list[dict[str, Any]] = []

    def _mock_text_to_speech(self, voice_id: str, payload: dict[str, Any]) -> requests.Response:
        """Return deterministic MP3-labelled bytes and a sequential request id."""

        self._require_api_key()
        sent.append({"voice_id": voice_id, "payload": payload})
        return make_response(
            200,
            content=f"mp3:{payload['text']}|".encode("utf-8"),
            headers={"Content-Type": "audio/mpeg", "request-id": f"req-{len(sent)}"},
        )

    def _mock_list_models(self) -> list[dict[str, Any]]:
        """Return a small fixed model catalogue."""

        self._require_api_key()
        return [
            {"model_id": "eleven_multilingual_v2", "name": "Eleven Multilingual v2"},
            {"model_id": "eleven_turbo_v2_5", "name": "Eleven Turbo v2.5"},
            {"model_id": "eleven_english_sts_v2", "name": "STS", "can_do_text_to_speech": False},
        ]

    monkeypatch.setattr(ElevenLabsClient, "text_to_speech", _mock_text_to_speech)
    monkeypatch.setattr(ElevenLabsClient, "list_models", _mock_list_models)
    return sent
