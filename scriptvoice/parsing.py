"""Shared parsing helpers for config, environment, and CLI value normalization."""

from __future__ import annotations

from .errors import ValidationError


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer or raise an actionable validation error."""

    if isinstance(value, bool):
        raise ValidationError(f"`{field_name}` must be a positive integer.")
    try:
        parsed = int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValidationError(f"`{field_name}` must be a positive integer.")
    return parsed
