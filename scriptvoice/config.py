"""Configuration model and loaders for Scriptvoice.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Load configuration from the environment and from YAML files.
- Apply command-line overrides with deterministic precedence.

Precedence for every field is: command-line option > YAML file > environment >
dataclass default.

Key types:
- `VoiceoverConfig`: normalized runtime settings for a run.
- `ConfigLoader`: static construction helpers for `VoiceoverConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ValidationError
from .models.datatypes import VoiceSettings
from .parsing import (
    normalize_optional_string,
    parse_permissive_boolean,
    parse_positive_int,
)
from .provider.elevenlabs_client import DEFAULT_BASE_URL, DEFAULT_OUTPUT_FORMAT

DEFAULT_MODEL_ID = "eleven_multilingual_v2"
DEFAULT_VOICE_SETTINGS = VoiceSettings(
    stability=0.75,
    similarity_boost=0.75,
    style=0.5,
    use_speaker_boost=True,
)


@dataclass(frozen=True, slots=True)
class VoiceoverConfig:
    """Runtime configuration for one Scriptvoice invocation.

    Attributes:
        output_dir: Directory receiving audio, chunk files, and history.
        api_key: ElevenLabs API key (never persisted).
        base_url: ElevenLabs API base URL.
        voice_id: Provider voice identifier.
        model_id: Provider model identifier.
        paragraphs_per_chunk: Paragraph window size for chunking.
        voice_settings: Caller voice settings before capability filtering.
        output_format: ElevenLabs `output_format` query value.
        max_retries: Attempts per request for rate limits and network faults.
        initial_backoff_seconds: First retry wait, grown by 1.5x per retry.
        timeout_seconds: Per-request HTTP timeout.
    """

    output_dir: Path = Path("out")
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    voice_id: str = ""
    model_id: str = DEFAULT_MODEL_ID
    paragraphs_per_chunk: int = 1
    voice_settings: VoiceSettings = DEFAULT_VOICE_SETTINGS
    output_format: str = DEFAULT_OUTPUT_FORMAT
    max_retries: int = 5
    initial_backoff_seconds: float = 0.5
    timeout_seconds: float = 60.0

    def validate(self) -> None:
        """Validate configuration values that do not depend on the command."""

        if isinstance(self.paragraphs_per_chunk, bool) or self.paragraphs_per_chunk <= 0:
            raise ValidationError("`paragraphs_per_chunk` must be a positive integer.")
        if self.max_retries <= 0:
            raise ValidationError("`max_retries` must be a positive integer.")
        if self.initial_backoff_seconds < 0:
            raise ValidationError("`initial_backoff_seconds` must not be negative.")
        if self.timeout_seconds <= 0:
            raise ValidationError("`timeout_seconds` must be positive.")
        if not self.model_id.strip():
            raise ValidationError("`model_id` must be a non-empty string.")
        self.voice_settings.validate()

    def validate_for_synthesis(self) -> None:
        """Validate everything a synthesis run needs, including voice and key."""

        self.validate()
        if not self.voice_id.strip():
            raise ValidationError(
                "ElevenLabs voice id is required.",
                hint="Pass `--voice-id`, set `SCRIPTVOICE_VOICE_ID`, or add `voice_id` to the config file.",
            )
        if not (self.api_key or "").strip():
            raise ValidationError(
                "Missing ElevenLabs API key.",
                hint="Set `ELEVENLABS_API_KEY`, pass `--api-key`, or add `api_key` to the config file.",
            )

    def with_overrides(self, **overrides: Any) -> VoiceoverConfig:
        """Return a copy with every non-`None` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)

    def with_voice_overrides(
        self,
        *,
        stability: float | None = None,
        similarity_boost: float | None = None,
        style: float | None = None,
        use_speaker_boost: bool | None = None,
    ) -> VoiceoverConfig:
        """Return a copy whose voice settings take the given non-`None` values."""

        changes = {
            key: value
            for key, value in {
                "stability": stability,
                "similarity_boost": similarity_boost,
                "style": style,
                "use_speaker_boost": use_speaker_boost,
            }.items()
            if value is not None
        }
        if not changes:
            return self
        return replace(self, voice_settings=replace(self.voice_settings, **changes))


class ConfigLoader:
    """Factory methods for creating `VoiceoverConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "output_dir",
            "api_key",
            "base_url",
            "voice_id",
            "model_id",
            "paragraphs_per_chunk",
            "voice_settings",
            "output_format",
            "max_retries",
            "initial_backoff_seconds",
            "timeout_seconds",
        }
    )
    _ENV_KEYS = {
        "ELEVENLABS_API_KEY": "api_key",
        "SCRIPTVOICE_OUTPUT_DIR": "output_dir",
        "SCRIPTVOICE_BASE_URL": "base_url",
        "SCRIPTVOICE_VOICE_ID": "voice_id",
        "SCRIPTVOICE_MODEL_ID": "model_id",
        "SCRIPTVOICE_PARAGRAPHS_PER_CHUNK": "paragraphs_per_chunk",
        "SCRIPTVOICE_OUTPUT_FORMAT": "output_format",
        "SCRIPTVOICE_SPEAKER_BOOST": "use_speaker_boost",
    }

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> VoiceoverConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        changes: dict[str, Any] = {}
        speaker_boost: bool | None = None
        for env_key, field_name in ConfigLoader._ENV_KEYS.items():
            value = normalize_optional_string(env_map.get(env_key))
            if value is None:
                continue
            if field_name == "output_dir":
                changes[field_name] = Path(value)
            elif field_name == "paragraphs_per_chunk":
                changes[field_name] = parse_positive_int(value, env_key)
            elif field_name == "use_speaker_boost":
                speaker_boost = parse_permissive_boolean(value)
                if speaker_boost is None:
                    raise ValidationError(f"`{env_key}` must be a boolean value.")
            else:
                changes[field_name] = value

        config = VoiceoverConfig(**changes).with_voice_overrides(
            use_speaker_boost=speaker_boost
        )
        config.validate()
        return config

    @staticmethod
    def from_yaml(path: Path, base: VoiceoverConfig | None = None) -> VoiceoverConfig:
        """Create a validated config from a YAML file layered over `base`."""

        raw_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(raw_text, path)
        return ConfigLoader.from_mapping(
            payload,
            base=base,
            source_label=f"YAML `{path}`",
        )

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any],
        base: VoiceoverConfig | None = None,
        source_label: str = "config",
    ) -> VoiceoverConfig:
        """Build a validated config from a mapping payload."""

        unknown = sorted(set(payload) - ConfigLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise ValidationError(
                f"{source_label} contains unsupported key(s): {', '.join(unknown)}."
            )

        config = base if base is not None else VoiceoverConfig()
        changes: dict[str, Any] = {}
        for key, value in payload.items():
            if value is None:
                continue
            if key == "output_dir":
                changes[key] = Path(str(value).strip())
            elif key in {"paragraphs_per_chunk", "max_retries"}:
                changes[key] = parse_positive_int(value, key)
            elif key in {"initial_backoff_seconds", "timeout_seconds"}:
                changes[key] = ConfigLoader._number(value, key, source_label)
            elif key == "voice_settings":
                if not isinstance(value, Mapping):
                    raise ValidationError(
                        f"{source_label}: `voice_settings` must be a mapping."
                    )
                merged = {**config.voice_settings.as_dict(), **value}
                changes[key] = VoiceSettings.from_mapping(merged)
            else:
                text = normalize_optional_string(value)
                if text is None:
                    raise ValidationError(
                        f"{source_label}: `{key}` must be a non-empty string."
                    )
                changes[key] = text

        resolved = replace(config, **changes) if changes else config
        resolved.validate()
        return resolved

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValidationError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValidationError(f"YAML config `{path}` must contain a top-level mapping.")
        return payload

    @staticmethod
    def _number(value: Any, key: str, source_label: str) -> float:
        if isinstance(value, bool):
            raise ValidationError(f"{source_label}: `{key}` must be a number.")
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"{source_label}: `{key}` must be a number.") from exc
