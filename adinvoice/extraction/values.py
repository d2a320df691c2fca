"""Coercion of loosely typed extracted values into numbers and dates."""

import math
import re
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

_NUMBER_NOISE_RE = re.compile(r"[,\s₹$€£]|INR|USD|EUR", re.IGNORECASE)


def to_number(value: Any) -> float | None:
    """Coerce to float, or None when the value is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = _NUMBER_NOISE_RE.sub("", value)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> int | None:
    number = to_number(value)
    return int(number) if number is not None else None


def to_text(value: Any) -> str | None:
    """Non-empty stripped string, or None. Numbers are kept as their text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def parse_date(value: Any) -> date | None:
    """Parse ISO or free-form dates ("12 March 2024"); None when unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError):
        return None


def round_money(value: float) -> float:
    return round(value, 2)
