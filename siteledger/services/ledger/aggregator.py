from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from siteledger.models import INFLOW_KINDS, EntryKind
from siteledger.services.ledger.analytics import build_category_totals, build_daily_rows
from siteledger.services.ledger.helpers import validate_range
from siteledger.services.ledger.models import (
    LedgerDiagnostics,
    LedgerEntry,
    LedgerLine,
    ProjectLedgerSummary,
)

logger = logging.getLogger(__name__)


def apply_entry(balance: float, entry: LedgerEntry) -> float:
    """One step of the cash fold. Deferred purchases leave the balance untouched."""
    if entry.kind in INFLOW_KINDS:
        return balance + entry.amount
    if entry.kind == EntryKind.EXPENSE:
        return balance - entry.amount
    return balance


def sort_key(entry: LedgerEntry) -> tuple[date, str]:
    return entry.date, entry.source_id  # type: ignore[return-value]


def carried_forward(entries: Iterable[LedgerEntry], start: float = 0.0) -> float:
    balance = float(start)
    for entry in sorted(entries, key=sort_key):
        balance = apply_entry(balance, entry)
    return balance


def running_balance(entries: Iterable[LedgerEntry], opening: float = 0.0) -> list[LedgerLine]:
    lines: list[LedgerLine] = []
    balance = float(opening)
    for entry in sorted(entries, key=sort_key):
        balance = apply_entry(balance, entry)
        lines.append(LedgerLine(entry=entry, running_balance=balance))
    return lines


def aggregate(
    entries: Iterable[LedgerEntry],
    project_id: str,
    range_start: date,
    range_end: date,
    *,
    diagnostics: LedgerDiagnostics | None = None,
) -> ProjectLedgerSummary:
    """
    Build the project statement for [range_start, range_end].

    Entries without a date are counted in entries_count but kept out of
    both the carried-forward fold and the range. Raises ValidationError
    only for a reversed range.
    """
    validate_range(range_start, range_end)
    diagnostics = diagnostics if diagnostics is not None else LedgerDiagnostics()
    project_key = str(project_id)

    project_entries = [e for e in entries or [] if str(e.project_id) == project_key]
    before: list[LedgerEntry] = []
    in_range: list[LedgerEntry] = []
    undated = 0
    for entry in project_entries:
        if entry.date is None:
            undated += 1
            continue
        if entry.date < range_start:
            before.append(entry)
        elif entry.date <= range_end:
            in_range.append(entry)

    if undated:
        message = f"{undated} undated entries left out of project {project_key} statement"
        if diagnostics.warn(message):
            logger.warning(message)

    opening = carried_forward(before)
    lines = running_balance(in_range, opening)

    total_income = sum(e.amount for e in in_range if e.kind in INFLOW_KINDS)
    total_expenses = sum(e.amount for e in in_range if e.kind == EntryKind.EXPENSE)
    total_deferred = sum(e.amount for e in in_range if e.kind == EntryKind.DEFERRED)

    return ProjectLedgerSummary(
        project_id=project_key,
        range_start=range_start,
        range_end=range_end,
        total_income=float(total_income),
        total_expenses=float(total_expenses),
        total_deferred=float(total_deferred),
        carried_forward=opening,
        remaining_balance=opening + float(total_income) - float(total_expenses),
        entries=lines,
        entries_count=len(in_range) + undated,
        diagnostics=diagnostics,
        by_category=build_category_totals(in_range),
        daily=build_daily_rows(lines, opening),
    )


__all__ = ["aggregate", "apply_entry", "carried_forward", "running_balance"]
