"""TTS synthesizer interfaces and ElevenLabs-backed implementation.

Responsibilities:
- Define the protocol for chunk-level speech synthesis.
- Shape each request to the model's capabilities and thread the continuity token.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..errors import ApiError, ValidationError
from ..models.datatypes import SynthesisRequest, SynthesisResult, VoiceSettings
from ..provider.elevenlabs_client import ElevenLabsClient
from .capabilities import build_request_settings, resolve_model_capabilities

_REQUEST_ID_HEADERS = ("request-id", "xi-request-id")
_DEFAULT_MEDIA_TYPE = "audio/mpeg"


class TTSSynthesizer(Protocol):
    """Protocol for chunk-level TTS provider implementations."""

    def synthesize(
        self,
        chunk_text: str,
        voice_id: str,
        voice_settings: VoiceSettings,
        model_id: str,
        previous_request_id: str | None = None,
    ) -> SynthesisResult:
        """Synthesize one chunk and return its audio plus continuity token."""


def build_synthesis_payload(request: SynthesisRequest) -> dict[str, Any]:
    """Compose the JSON body for one synthesis request."""

    capabilities = resolve_model_capabilities(request.model_id)
    payload: dict[str, Any] = {
        "text": request.text,
        "model_id": request.model_id,
        "voice_settings": build_request_settings(request.voice_settings, capabilities),
    }
    if request.previous_request_id:
        payload["previous_request_ids"] = [request.previous_request_id]
    return payload


class ElevenLabsSynthesizer:
    """ElevenLabs-backed synthesizer returning raw audio bytes per chunk."""

    def __init__(self, client: ElevenLabsClient) -> None:
        self.client = client

    @property
    def retry_attempt_count(self) -> int:
        return self.client.retry_attempt_count

    def synthesize(
        self,
        chunk_text: str,
        voice_id: str,
        voice_settings: VoiceSettings,
        model_id: str,
        previous_request_id: str | None = None,
    ) -> SynthesisResult:
        """Synthesize one chunk, linking it to the previous chunk when a token is given."""

        if not voice_id or not voice_id.strip():
            raise ValidationError("ElevenLabs voice id is required.")
        voice_settings.validate()
        request = SynthesisRequest(
            text=chunk_text,
            voice_id=voice_id.strip(),
            model_id=model_id,
            voice_settings=voice_settings,
            previous_request_id=previous_request_id,
        )
        response = self.client.text_to_speech(request.voice_id, build_synthesis_payload(request))
        audio = bytes(response.content)
        if not audio:
            raise ApiError(
                f"API Error: {response.status_code}. Speech response is empty.",
                response.status_code,
            )
        return SynthesisResult(
            audio=audio,
            request_id=self._request_id(response.headers),
            media_type=self._media_type(response.headers),
        )

    @staticmethod
    def _request_id(headers: Any) -> str:
        for name in _REQUEST_ID_HEADERS:
            value = headers.get(name)
            if value:
                return str(value).strip()
        return ""

    @staticmethod
    def _media_type(headers: Any) -> str:
        content_type = headers.get("Content-Type") or ""
        media_type = content_type.split(";", 1)[0].strip().lower()
        return media_type or _DEFAULT_MEDIA_TYPE
