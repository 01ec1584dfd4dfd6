"""Shared value coercion for form input and payloads."""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_CENT = Decimal("0.01")
_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_DASHES = re.compile(r"-+")


def to_number(value: Any) -> float | None:
    """Parse form input into a float, or None when blank or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_int(value: Any) -> int | None:
    number = to_number(value)
    return None if number is None else int(number)


def quantize2(value: float) -> Decimal:
    """Round half-up to two decimals."""
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    return float(quantize2(value))


def money(value: float) -> str:
    """Two-decimal string, e.g. ``1000.00``."""
    return str(quantize2(value))


def round6(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP))


def format_number(value: float | int) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def slugify(title: str) -> str:
    """URL slug from a title: lower-case, dashes for spaces, other symbols dropped."""
    slug = _SLUG_STRIP.sub("", title.lower())
    slug = _SLUG_SPACES.sub("-", slug)
    slug = _SLUG_DASHES.sub("-", slug)
    return slug.strip().strip("-")


def is_blank(value: Any) -> bool:
    """True for None, NaN, blank strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False
