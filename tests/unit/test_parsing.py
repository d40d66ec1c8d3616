"""Unit tests for shared config and environment parsing helpers."""

import pytest

from scriptvoice.errors import ValidationError
from scriptvoice.parsing import (
    normalize_optional_string,
    parse_permissive_boolean,
    parse_positive_int,
)


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("") is None
    assert normalize_optional_string("   ") is None


def test_normalize_optional_string_strips_non_blank_values() -> None:
    """Normalization should return stripped content for non-empty values."""

    assert normalize_optional_string("  value  ") == "value"
    assert normalize_optional_string(42) == "42"


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("TrUe", True),
        ("  ON ", True),
        ("YeS", True),
        ("FALSE", False),
        (" oFf ", False),
        ("nO", False),
    ],
)
def test_parse_permissive_boolean_accepts_mixed_case_tokens(
    token: str, expected: bool
) -> None:
    """Permissive parsing should accept valid tokens case-insensitively."""

    assert parse_permissive_boolean(token) is expected


@pytest.mark.parametrize("value", ["", "   ", "maybe", "2", object()])
def test_parse_permissive_boolean_returns_none_for_invalid_tokens(value: object) -> None:
    """Permissive parsing should return `None` for invalid or blank inputs."""

    assert parse_permissive_boolean(value) is None


def test_parse_positive_int_accepts_padded_text_and_ints() -> None:
    """Positive integer parsing should accept ints and padded numeric strings."""

    assert parse_positive_int(" 3 ", "paragraphs_per_chunk") == 3
    assert parse_positive_int(7, "max_retries") == 7


@pytest.mark.parametrize("value", ["0", "-2", "abc", True, ""])
def test_parse_positive_int_rejects_invalid_values(value: object) -> None:
    """Positive integer parsing should name the offending field in its error."""

    with pytest.raises(ValidationError, match="`paragraphs_per_chunk` must be a positive integer"):
        parse_positive_int(value, "paragraphs_per_chunk")
