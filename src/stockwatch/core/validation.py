"""
Input validation utilities for stockwatch.

Checks user-supplied symbols, search keywords and chart ranges before they
become cache keys or query parameters.
"""

import re

from stockwatch.core.exceptions import ValidationError
from stockwatch.core.models import ChartRange

# Tickers: letters, digits, dots and dashes (BRK.B, RDS-A, 7203.T)
_SYMBOL_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-]*$")

MAX_INPUT_LENGTH = 64

# Maximum response size (10 MB); full daily series are a few MB
MAX_RESPONSE_SIZE = 10 * 1024 * 1024


def _check_text(field: str, value: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(field, repr(value), f"{field.capitalize()} must be a string")

    if value is None or not value.strip():
        raise ValidationError(field, value or "", f"{field.capitalize()} cannot be empty")

    value = value.strip()

    if len(value) > MAX_INPUT_LENGTH:
        raise ValidationError(
            field, value[:20] + "...", f"Exceeds {MAX_INPUT_LENGTH} character limit"
        )

    if any(ord(c) < 32 or ord(c) == 127 for c in value):
        raise ValidationError(field, repr(value), "Contains invalid control characters")

    return value


def validate_symbol(symbol: str) -> str:
    """Validate and normalize a ticker symbol.

    Args:
        symbol: Ticker to validate.

    Returns:
        Upper-cased, stripped symbol.

    Raises:
        ValidationError: If the symbol is invalid.
    """
    normalized = _check_text("symbol", symbol).upper()

    if not _SYMBOL_PATTERN.match(normalized):
        raise ValidationError(
            "symbol",
            normalized,
            "Symbol must start with a letter or digit and contain only "
            "letters, digits, dots and dashes",
        )

    return normalized


def validate_keywords(keywords: str) -> str:
    """Validate search keywords.

    Args:
        keywords: Free-text search input.

    Returns:
        Stripped keywords.

    Raises:
        ValidationError: If the keywords are empty or invalid.
    """
    return _check_text("keywords", keywords)


def parse_chart_range(value: "str | ChartRange") -> ChartRange:
    """Parse a chart range such as ``"3M"``.

    Raises:
        ValidationError: If the range is not one of 1W, 1M, 3M, 1Y.
    """
    if isinstance(value, ChartRange):
        return value

    try:
        return ChartRange(str(value).strip().upper())
    except ValueError:
        choices = ", ".join(r.value for r in ChartRange)
        raise ValidationError("range", str(value), f"Must be one of {choices}")


def validate_response_size(
    content_length: int | None,
    max_size: int = MAX_RESPONSE_SIZE,
) -> None:
    """Validate that a response size is within acceptable limits.

    Args:
        content_length: The Content-Length header value (may be None).
        max_size: Maximum allowed response size in bytes.

    Raises:
        ValidationError: If the response is too large.
    """
    if content_length is not None and content_length > max_size:
        size_mb = content_length / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            "response_size",
            f"{size_mb:.1f} MB",
            f"Response exceeds maximum size of {max_mb:.0f} MB",
        )
