"""ElevenLabs HTTP client utilities for the TTS stage.

Responsibilities:
- Send text-to-speech and model-listing requests to the ElevenLabs REST API.
- Route every call through `ResilientTransport` for rate-limit recovery.
- Raise `ApiError` with a human-readable server detail for non-success responses.
"""

from __future__ import annotations

import re
from typing import Any

import requests

from ..errors import ApiError, ValidationError
from .transport import ResilientTransport

DEFAULT_BASE_URL = "https://api.elevenlabs.io"
DEFAULT_OUTPUT_FORMAT = "mp3_44100_128"


class ElevenLabsClient:
    """Minimal requests-based ElevenLabs client."""

    _MAX_PROVIDER_MESSAGE_CHARS = 300

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 60.0,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        transport: ResilientTransport | None = None,
    ) -> None:
        """Initialize ElevenLabs HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.output_format = output_format
        self.transport = transport if transport is not None else ResilientTransport()

    @property
    def retry_attempt_count(self) -> int:
        """Return retry attempt count performed by the underlying transport."""

        return self.transport.retry_attempt_count

    def _require_api_key(self) -> None:
        """Require API key presence before issuing requests."""

        if not self.api_key:
            raise ValidationError(
                "Missing ElevenLabs API key.",
                hint="Set `ELEVENLABS_API_KEY`, pass `--api-key`, or add `api_key` to the config file.",
            )

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "xi-api-key": self.api_key,
            "Accept": accept,
            "Content-Type": "application/json",
        }

    def text_to_speech(self, voice_id: str, payload: dict[str, Any]) -> requests.Response:
        """POST a synthesis payload and return the successful audio response."""

        self._require_api_key()
        response = self.transport.request_with_retry(
            "POST",
            f"{self.base_url}/v1/text-to-speech/{voice_id}",
            params={"output_format": self.output_format},
            headers=self._headers("audio/mpeg"),
            json=payload,
            timeout=self.timeout_seconds,
        )
        self._raise_for_status(response)
        return response

    def list_models(self) -> list[dict[str, Any]]:
        """Return the model catalogue from `GET /v1/models`."""

        self._require_api_key()
        response = self.transport.request_with_retry(
            "GET",
            f"{self.base_url}/v1/models",
            headers=self._headers("application/json"),
            timeout=self.timeout_seconds,
        )
        self._raise_for_status(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(
                "API Error: invalid JSON in models response.", response.status_code
            ) from exc
        if not isinstance(payload, list):
            raise ApiError(
                "API Error: models response is not a list.", response.status_code
            )
        return [item for item in payload if isinstance(item, dict)]

    @classmethod
    def _raise_for_status(cls, response: requests.Response) -> None:
        if response.ok:
            return
        raise cls.error_from_response(response)

    @classmethod
    def error_from_response(cls, response: requests.Response) -> ApiError:
        """Convert a non-success response into an `ApiError` with server detail."""

        status_code = response.status_code
        detail = f"Request failed with status code {status_code}"
        try:
            payload = response.json()
        except ValueError:
            detail = response.reason or "An unknown API error occurred."
        else:
            extracted = cls._extract_detail(payload)
            if extracted:
                detail = extracted
        message = f"API Error: {status_code}. {cls._short_message(cls._redact(detail))}"
        return ApiError(message, status_code)

    @staticmethod
    def _extract_detail(payload: Any) -> str | None:
        """Pick the most specific human-readable message in an error payload."""

        if not isinstance(payload, dict):
            return None
        detail = payload.get("detail")
        if isinstance(detail, dict) and isinstance(detail.get("message"), str):
            return detail["message"]
        if isinstance(detail, list) and detail:
            first = detail[0]
            if isinstance(first, dict) and first.get("msg"):
                return ", ".join(
                    str(item.get("msg")) for item in detail if isinstance(item, dict)
                )
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        return None

    @staticmethod
    def _redact(text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        return re.sub(r"\bsk_[A-Za-z0-9]{16,}\b", "[redacted-key]", text)

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."
