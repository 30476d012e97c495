from __future__ import annotations

from datetime import date

import pytest

from siteledger.exceptions import ValidationError
from siteledger.models import EntryKind, LedgerCategory, SourceKind
from siteledger.services.ledger.aggregator import aggregate, carried_forward
from siteledger.services.ledger.helpers import safe_ratio
from siteledger.services.ledger.models import LedgerEntry
from siteledger.services.ledger.normalizer import normalize_sources


def _entry(day, kind, amount, source_id, *, category=LedgerCategory.MISCELLANEOUS, project_id="p1"):
    return LedgerEntry(
        project_id=project_id,
        date=day,
        kind=kind,
        category=category,
        amount=amount,
        description="",
        source_id=source_id,
        source_kind=SourceKind.MISC_EXPENSE,
    )


def test_carried_forward_over_empty_history_is_zero():
    summary = aggregate([], "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert summary.carried_forward == 0.0
    assert summary.remaining_balance == 0.0
    assert summary.entries == []
    assert (summary.total_income, summary.total_expenses, summary.total_deferred) == (0.0, 0.0, 0.0)


def test_carried_forward_folds_prior_income_and_expense():
    entries = [
        _entry(date(2025, 7, 1), EntryKind.INCOME, 1000.0, "i1", category=LedgerCategory.FUND_TRANSFER),
        _entry(date(2025, 7, 2), EntryKind.EXPENSE, 300.0, "e1"),
        _entry(date(2025, 7, 3), EntryKind.DEFERRED, 999.0, "d1", category=LedgerCategory.MATERIALS),
    ]
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert summary.carried_forward == 700.0
    assert summary.remaining_balance == 700.0


def test_deferred_purchase_counts_only_in_deferred_total():
    entries = [_entry(date(2025, 8, 5), EntryKind.DEFERRED, 5000.0, "m1", category=LedgerCategory.MATERIALS)]
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert summary.total_expenses == 0.0
    assert summary.total_deferred == 5000.0
    assert summary.entries[0].running_balance == 0.0


def test_running_balance_walks_sorted_entries_from_carried_forward():
    entries = [
        _entry(date(2025, 8, 2), EntryKind.EXPENSE, 100.0, "b"),
        _entry(date(2025, 8, 2), EntryKind.EXPENSE, 50.0, "a"),
        _entry(date(2025, 8, 1), EntryKind.TRANSFER_IN, 400.0, "t"),
        _entry(date(2025, 7, 31), EntryKind.INCOME, 200.0, "prior"),
    ]
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert [line.entry.source_id for line in summary.entries] == ["t", "a", "b"]
    assert [line.running_balance for line in summary.entries] == [600.0, 550.0, 450.0]
    assert summary.remaining_balance == summary.entries[-1].running_balance


def test_other_projects_and_out_of_range_entries_are_left_out():
    entries = [
        _entry(date(2025, 8, 3), EntryKind.EXPENSE, 10.0, "mine"),
        _entry(date(2025, 8, 3), EntryKind.EXPENSE, 99.0, "theirs", project_id="p2"),
        _entry(date(2025, 9, 1), EntryKind.EXPENSE, 77.0, "later"),
    ]
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert [line.entry.source_id for line in summary.entries] == ["mine"]
    assert summary.total_expenses == 10.0


def test_range_bounds_are_inclusive():
    entries = [
        _entry(date(2025, 8, 1), EntryKind.INCOME, 1.0, "first"),
        _entry(date(2025, 8, 31), EntryKind.INCOME, 2.0, "last"),
    ]
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))
    assert summary.total_income == 3.0


def test_undated_entries_are_counted_but_not_totalled():
    entries = [
        _entry(None, EntryKind.EXPENSE, 500.0, "undated"),
        _entry(date(2025, 8, 3), EntryKind.EXPENSE, 10.0, "dated"),
    ]
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert summary.entries_count == 2
    assert summary.total_expenses == 10.0
    assert len(summary.diagnostics.warnings) == 1


def test_reversed_range_is_rejected():
    with pytest.raises(ValidationError) as exc:
        aggregate([], "p1", date(2025, 8, 31), date(2025, 8, 1))
    assert exc.value.code == "INVALID_DATE_RANGE"


def test_aggregate_is_idempotent(project_sources):
    entries, _ = normalize_sources(project_sources, "p1")
    first = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))
    second = aggregate(list(reversed(entries)), "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert first.entries == second.entries
    assert first.by_category == second.by_category
    assert first.daily == second.daily
    assert first.remaining_balance == second.remaining_balance


def test_each_entry_is_counted_in_exactly_one_total(project_sources):
    entries, _ = normalize_sources(project_sources, "p1")
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    in_range = sum(line.entry.amount for line in summary.entries)
    assert summary.total_income + summary.total_expenses + summary.total_deferred == pytest.approx(in_range)
    assert summary.total_income == 12000.0
    assert summary.total_expenses == 2250.0
    assert summary.total_deferred == 5000.0
    assert summary.carried_forward == 2950.0
    assert summary.remaining_balance == 12700.0


def test_splitting_the_range_keeps_the_balance(project_sources):
    entries, _ = normalize_sources(project_sources, "p1")
    whole = aggregate(entries, "p1", date(2025, 7, 1), date(2025, 8, 31))
    head = aggregate(entries, "p1", date(2025, 7, 1), date(2025, 8, 1))
    tail = aggregate(entries, "p1", date(2025, 8, 2), date(2025, 8, 31))

    assert tail.carried_forward == pytest.approx(head.remaining_balance)
    assert tail.remaining_balance == pytest.approx(whole.remaining_balance)
    assert carried_forward(line.entry for line in whole.entries) == pytest.approx(whole.remaining_balance)


def test_daily_rows_chain_closing_into_next_opening(project_sources):
    entries, _ = normalize_sources(project_sources, "p1")
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    assert [row.day for row in summary.daily] == [date(2025, 8, 1), date(2025, 8, 2)]
    assert summary.daily[0].carried_forward == summary.carried_forward
    assert summary.daily[1].carried_forward == summary.daily[0].closing_balance
    assert summary.daily[-1].closing_balance == summary.remaining_balance
    assert summary.daily[1].deferred == 5000.0


def test_category_breakdown_matches_totals(project_sources):
    entries, _ = normalize_sources(project_sources, "p1")
    summary = aggregate(entries, "p1", date(2025, 8, 1), date(2025, 8, 31))

    by_key = {(row.category, row.kind): row.total for row in summary.by_category}
    assert by_key[(LedgerCategory.WORKER_WAGES, EntryKind.EXPENSE)] == 300.0
    assert by_key[(LedgerCategory.MATERIALS, EntryKind.DEFERRED)] == 5000.0
    assert by_key[(LedgerCategory.INTER_PROJECT_TRANSFER, EntryKind.EXPENSE)] == 500.0
    assert by_key[(LedgerCategory.INTER_PROJECT_TRANSFER, EntryKind.TRANSFER_IN)] == 2000.0
    assert sum(row.total for row in summary.by_category) == pytest.approx(
        summary.total_income + summary.total_expenses + summary.total_deferred
    )


@pytest.mark.parametrize(
    ("numerator", "denominator", "expected"),
    [(300.0, 400.0, 0.75), (100.0, 0.0, 0.0), (0.0, 0.0, 0.0)],
)
def test_safe_ratio_never_divides_by_zero(numerator, denominator, expected):
    assert safe_ratio(numerator, denominator) == expected
