"""
reportd/diagnosis/decoding.py

Per-field decode helpers shared by the builders.

Every helper either returns a decoded value or signals failure (None or
ValueError) so the caller can drop just the affected sample.
"""
from __future__ import annotations

import math
import re
from typing import Any

# Legacy octal literal ("0100"), which int(x, 0) rejects.
_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7]+")


def parse_check_id(text: str) -> int:
    """Parse an id tag such as ``"0x0100"``, ``"256"`` or ``"0400"``.

    The base is taken from the prefix (0x, 0o, 0b, or a bare leading 0 for
    octal), otherwise decimal.

    Raises:
        ValueError: *text* is not an integer literal.
    """
    text = text.strip()
    try:
        return int(text, 0)
    except ValueError:
        if _LEGACY_OCTAL.fullmatch(text):
            return int(text, 8)
        raise


def parse_int_tag(text: str | None) -> int | None:
    """Like parse_check_id but returns None for missing or unparsable text."""
    if text is None:
        return None
    try:
        return parse_check_id(text)
    except ValueError:
        return None


def as_number(value: Any) -> float | None:
    """Return *value* as a float if it is a finite real number, else None.

    Strings are not coerced: a string-typed value is a malformed sample.
    NaN and infinities are rejected since they cannot be rendered as JSON.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def field_key(field: str | None, measurement: str, qualified: bool) -> str | None:
    """Recover the logical field name from a sample's field.

    For backends that report ``<measurement>_<field>`` metric names the
    measurement prefix (and the joining underscore) is stripped.  Names that
    merely share leading characters, such as ``<measurement>2_end_time``,
    belong to another metric and are returned unchanged.
    """
    if field is None or not qualified or not measurement:
        return field
    if field == measurement:
        return ""
    if field.startswith(measurement + "_"):
        return field[len(measurement) + 1:]
    return field
