from __future__ import annotations

from datetime import date

from siteledger.models import CATEGORY_LABELS, INFLOW_KINDS, EntryKind, LedgerCategory
from siteledger.services.ledger.models import (
    CategoryTotalRow,
    DailyLedgerRow,
    LedgerEntry,
    LedgerLine,
)


def build_category_totals(entries: list[LedgerEntry]) -> list[CategoryTotalRow]:
    buckets: dict[tuple[LedgerCategory, EntryKind], dict[str, float]] = {}
    for entry in entries:
        key = (entry.category, entry.kind)
        bucket = buckets.setdefault(key, {"entries": 0, "total": 0.0})
        bucket["entries"] += 1
        bucket["total"] += float(entry.amount or 0.0)

    rows = [
        CategoryTotalRow(
            category=category,
            kind=kind,
            entries=int(bucket["entries"]),
            total=float(bucket["total"]),
        )
        for (category, kind), bucket in buckets.items()
    ]
    rows.sort(key=lambda row: (-row.total, CATEGORY_LABELS.get(row.category, row.category.value), row.kind.value))
    return rows


def build_daily_rows(lines: list[LedgerLine], opening: float) -> list[DailyLedgerRow]:
    """
    Collapse running-balance lines into one row per day, the layout of the
    daily expenses sheet: opening (carried) balance, day movements, closing.
    """
    if not lines:
        return []

    buckets: dict[date, dict[str, float]] = {}
    order: list[date] = []
    for line in lines:
        day = line.entry.date
        bucket = buckets.get(day)
        if bucket is None:
            bucket = {"income": 0.0, "expenses": 0.0, "deferred": 0.0, "closing": 0.0}
            buckets[day] = bucket
            order.append(day)
        if line.entry.kind in INFLOW_KINDS:
            bucket["income"] += line.entry.amount
        elif line.entry.kind == EntryKind.EXPENSE:
            bucket["expenses"] += line.entry.amount
        else:
            bucket["deferred"] += line.entry.amount
        bucket["closing"] = line.running_balance

    out: list[DailyLedgerRow] = []
    carried = float(opening)
    for day in order:
        bucket = buckets[day]
        out.append(
            DailyLedgerRow(
                day=day,
                carried_forward=carried,
                income=float(bucket["income"]),
                expenses=float(bucket["expenses"]),
                deferred=float(bucket["deferred"]),
                closing_balance=float(bucket["closing"]),
            )
        )
        carried = float(bucket["closing"])
    return out


__all__ = ["build_category_totals", "build_daily_rows"]
