from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from siteledger.models import EntryKind, LedgerCategory, SourceKind


@dataclass(frozen=True)
class LedgerEntry:
    project_id: str
    date: date | None
    kind: EntryKind
    category: LedgerCategory
    amount: float
    description: str
    source_id: str
    source_kind: SourceKind


@dataclass(frozen=True)
class LedgerLine:
    entry: LedgerEntry
    running_balance: float


@dataclass
class LedgerDiagnostics:
    """Tally of row-level data problems found while building a report."""

    invalid_amounts: int = 0
    invalid_dates: int = 0
    unknown_categories: int = 0
    skipped_transfers: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return self.invalid_amounts + self.invalid_dates + self.unknown_categories

    def warn(self, message: str) -> bool:
        """Record a warning once; returns False when it was already recorded."""
        if message in self.warnings:
            return False
        self.warnings.append(message)
        return True


@dataclass(frozen=True)
class CategoryTotalRow:
    category: LedgerCategory
    kind: EntryKind
    entries: int
    total: float


@dataclass(frozen=True)
class DailyLedgerRow:
    day: date
    carried_forward: float
    income: float
    expenses: float
    deferred: float
    closing_balance: float


@dataclass(frozen=True)
class ProjectLedgerSummary:
    project_id: str
    range_start: date
    range_end: date
    total_income: float
    total_expenses: float
    total_deferred: float
    carried_forward: float
    remaining_balance: float
    entries: list[LedgerLine]
    entries_count: int
    diagnostics: LedgerDiagnostics
    by_category: list[CategoryTotalRow] = field(default_factory=list)
    daily: list[DailyLedgerRow] = field(default_factory=list)


__all__ = [
    "LedgerEntry",
    "LedgerLine",
    "LedgerDiagnostics",
    "CategoryTotalRow",
    "DailyLedgerRow",
    "ProjectLedgerSummary",
]
