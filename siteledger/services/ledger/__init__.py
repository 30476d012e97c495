from .aggregator import aggregate
from .models import (
    CategoryTotalRow,
    DailyLedgerRow,
    LedgerDiagnostics,
    LedgerEntry,
    LedgerLine,
    ProjectLedgerSummary,
)
from .normalizer import normalize, normalize_many, normalize_sources
from .service import LedgerService

__all__ = [
    "LedgerService",
    "aggregate",
    "normalize",
    "normalize_many",
    "normalize_sources",
    "LedgerEntry",
    "LedgerLine",
    "LedgerDiagnostics",
    "CategoryTotalRow",
    "DailyLedgerRow",
    "ProjectLedgerSummary",
]
