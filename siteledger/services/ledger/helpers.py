from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Mapping

from infra.config import DATE_FORMATS
from siteledger.exceptions import ValidationError


def parse_amount(value: object) -> float | None:
    """
    Coerce a raw amount to a finite float.

    Returns None when the value cannot be read, so callers can count the
    problem before substituting 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").replace("٬", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def parse_date(value: object, formats: tuple[str, ...] = DATE_FORMATS) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    # ISO timestamps from the data layer: keep the calendar day only
    text = text.split("T", 1)[0].split(" ", 1)[0]
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def clamp_non_negative(value: float | None) -> float:
    if value is None or not math.isfinite(value) or value < 0.0:
        return 0.0
    return float(value)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Ratio for percentage displays; a zero denominator yields 0, never NaN or inf."""
    if not denominator:
        return 0.0
    ratio = float(numerator) / float(denominator)
    return ratio if math.isfinite(ratio) else 0.0


def validate_range(range_start: date, range_end: date) -> None:
    if range_start is None or range_end is None:
        raise ValidationError("Report range needs both a start and an end date.", code="INVALID_DATE_RANGE")
    if range_end < range_start:
        raise ValidationError(
            f"Report range end {range_end.isoformat()} is before start {range_start.isoformat()}.",
            code="INVALID_DATE_RANGE",
        )


def pick(row: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First non-empty value among camelCase / snake_case aliases of a raw field."""
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return default


def text_or(value: object, fallback: str) -> str:
    cleaned = " ".join(str(value or "").split()).strip()
    return cleaned or fallback


__all__ = [
    "parse_amount",
    "parse_date",
    "clamp_non_negative",
    "safe_ratio",
    "validate_range",
    "pick",
    "text_or",
]
