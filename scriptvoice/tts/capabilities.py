"""Model capability resolution and voice-setting shaping.

Responsibilities:
- Classify a model id into the subset of voice settings the model honors.
- Build the outgoing `voice_settings` payload from caller settings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from loguru import logger

from ..models.datatypes import VoiceSettings

CONTINUOUS = "continuous"
DISCRETE = "discrete"

STABILITY_PRESETS: tuple[tuple[float, str], ...] = (
    (0.0, "creative"),
    (0.5, "natural"),
    (1.0, "robust"),
)

# Every request is sent at normal speed so chunk timing stays consistent.
FIXED_SPEED = 1.0


@dataclass(frozen=True, slots=True)
class ModelCapabilities:
    """Voice-setting fields a model family honors."""

    supports_clarity: bool = True
    supports_style: bool = True
    supports_speaker_boost: bool = True
    stability_type: str = CONTINUOUS


_DEFAULT_CAPABILITIES = ModelCapabilities()


def resolve_model_capabilities(model_id: str) -> ModelCapabilities:
    """Classify a model id by its family marker."""

    if "_v1" in model_id:
        return replace(
            _DEFAULT_CAPABILITIES,
            supports_style=False,
            supports_speaker_boost=False,
        )
    if "turbo" in model_id:
        return replace(_DEFAULT_CAPABILITIES, stability_type=DISCRETE)
    if "_v3" in model_id:
        return replace(
            _DEFAULT_CAPABILITIES,
            supports_clarity=False,
            supports_style=False,
            supports_speaker_boost=False,
        )
    return _DEFAULT_CAPABILITIES


def snap_stability(value: float) -> float:
    """Return the discrete stability preset closest to `value` (ties go lower)."""

    return min(STABILITY_PRESETS, key=lambda preset: abs(preset[0] - value))[0]


def stability_preset_name(value: float) -> str | None:
    for preset_value, name in STABILITY_PRESETS:
        if preset_value == value:
            return name
    return None


def build_request_settings(
    settings: VoiceSettings,
    capabilities: ModelCapabilities,
) -> dict[str, Any]:
    """Return the `voice_settings` payload with unsupported fields omitted."""

    stability = float(settings.stability)
    if capabilities.stability_type == DISCRETE:
        snapped = snap_stability(stability)
        if snapped != stability:
            logger.info(
                "Stability {} is not a preset for this model; using {} ({}).",
                stability,
                snapped,
                stability_preset_name(snapped),
            )
        stability = snapped

    payload: dict[str, Any] = {"stability": stability, "speed": FIXED_SPEED}
    if capabilities.supports_clarity and settings.similarity_boost is not None:
        payload["similarity_boost"] = settings.similarity_boost
    if capabilities.supports_style and settings.style is not None:
        payload["style"] = settings.style
    if capabilities.supports_speaker_boost and settings.use_speaker_boost is not None:
        payload["use_speaker_boost"] = settings.use_speaker_boost
    return payload
