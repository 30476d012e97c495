# siteledger/reporting/formatting.py
from __future__ import annotations

import re
from datetime import date

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\x00-\x1f]+|\s+')
_REPEATED_UNDERSCORE = re.compile(r"_+")


def fmt_money(value: float | None, currency_suffix: str = "ريال") -> str:
    """
    Whole-number money with thousands separator and currency suffix.
    Example: 1234567.8 -> '1,234,568 ريال'
    """
    if value is None:
        return "-"
    return f"{round(float(value)):,} {currency_suffix}".strip()


def fmt_date(value: date | None, date_format: str = "%Y-%m-%d") -> str:
    if value is None:
        return "-"
    return value.strftime(date_format)


def fmt_percent(value: float | None, decimals: int = 1) -> str:
    """
    Format a 0-1 ratio as a percentage.
    Example: 0.753 -> '75.3 %'
    """
    if value is None:
        return "-"
    fmt = f"{{:.{decimals}f}} %"
    return fmt.format(float(value) * 100.0)


def safe_filename_part(value: object) -> str:
    """Replace path separators, reserved characters, control chars and whitespace runs with '_'."""
    cleaned = _UNSAFE_FILENAME.sub("_", str(value or "").strip())
    cleaned = _REPEATED_UNDERSCORE.sub("_", cleaned).strip("_.")
    return cleaned or "report"


def report_filename(
    report_type: str,
    entity_name: str,
    range_start: date,
    range_end: date,
    extension: str,
) -> str:
    parts = [
        safe_filename_part(report_type),
        safe_filename_part(entity_name),
        range_start.isoformat(),
        range_end.isoformat(),
    ]
    return f"{'_'.join(parts)}.{extension.lstrip('.')}"


__all__ = [
    "fmt_money",
    "fmt_date",
    "fmt_percent",
    "safe_filename_part",
    "report_filename",
]
