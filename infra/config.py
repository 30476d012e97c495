# infra/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from infra.path import default_export_dir

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%m/%d/%Y",
)

# Both spellings occur in the purchase rows; the Latin aliases come from imports.
DEFERRED_PAYMENT_MARKERS = ("آجل", "أجل", "credit", "deferred")
COMPLETED_TRANSFER_STATUS = "completed"


@dataclass(frozen=True)
class LedgerSettings:
    """Values the engine and renderers read instead of module globals."""

    currency_suffix: str = "ريال"
    company_name: str = "شركة الفتيني للمقاولات والاستشارات الهندسية"
    deferred_markers: tuple[str, ...] = DEFERRED_PAYMENT_MARKERS
    completed_transfer_status: str = COMPLETED_TRANSFER_STATUS
    date_formats: tuple[str, ...] = DATE_FORMATS
    report_date_format: str = "%Y-%m-%d"
    export_dir: Path | None = field(default=None)
    # TrueType font with Arabic glyphs for PDF output; bundled DejaVu Sans when unset.
    pdf_font_path: Path | None = field(default=None)

    @property
    def money_number_format(self) -> str:
        """Excel number format: thousands separator, no decimals, currency suffix."""
        return f'#,##0 "{self.currency_suffix}"'

    def resolved_export_dir(self) -> Path:
        return self.export_dir or default_export_dir()

    def is_deferred_payment(self, payment_type: object) -> bool:
        token = " ".join(str(payment_type or "").split()).strip().lower()
        if not token:
            return False
        return any(token == marker.lower() for marker in self.deferred_markers)


def _env(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def get_settings(**overrides) -> LedgerSettings:
    """
    Build settings from defaults, then environment, then explicit overrides.

    Environment variables:
        SITELEDGER_CURRENCY_SUFFIX, SITELEDGER_COMPANY_NAME,
        SITELEDGER_DATE_FORMAT, SITELEDGER_EXPORT_DIR, SITELEDGER_PDF_FONT
    """
    settings = LedgerSettings()
    env_values: dict[str, object] = {}
    if _env("SITELEDGER_CURRENCY_SUFFIX"):
        env_values["currency_suffix"] = _env("SITELEDGER_CURRENCY_SUFFIX")
    if _env("SITELEDGER_COMPANY_NAME"):
        env_values["company_name"] = _env("SITELEDGER_COMPANY_NAME")
    if _env("SITELEDGER_DATE_FORMAT"):
        env_values["report_date_format"] = _env("SITELEDGER_DATE_FORMAT")
    if _env("SITELEDGER_EXPORT_DIR"):
        env_values["export_dir"] = Path(_env("SITELEDGER_EXPORT_DIR"))
    if _env("SITELEDGER_PDF_FONT"):
        env_values["pdf_font_path"] = Path(_env("SITELEDGER_PDF_FONT"))
    if env_values:
        settings = replace(settings, **env_values)
    if overrides:
        settings = replace(settings, **overrides)
    return settings


__all__ = [
    "COMPLETED_TRANSFER_STATUS",
    "DATE_FORMATS",
    "DEFERRED_PAYMENT_MARKERS",
    "LedgerSettings",
    "get_settings",
]
