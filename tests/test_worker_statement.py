from __future__ import annotations

import logging
from datetime import date

import pytest

from siteledger.exceptions import ValidationError
from siteledger.models import AttendanceStatus, PaymentStatus
from siteledger.services.statement.builder import build_statement, resolve_day_wage

AUG_1 = date(2025, 8, 1)
AUG_31 = date(2025, 8, 31)


def test_two_present_days_with_partial_payment(worker, rows):
    attendance = [
        rows.attendance(id="a1", date="2025-08-01", paidAmount=200),
        rows.attendance(id="a2", date="2025-08-02", paidAmount=100),
    ]
    statement = build_statement(worker, attendance, [], AUG_1, AUG_31)

    assert statement.total_work_days == 2
    assert statement.total_wages_earned == 400.0
    assert statement.total_paid_amount == 300.0
    assert statement.remaining_balance == 100.0
    assert statement.paid_ratio == pytest.approx(0.75)
    assert [r.payment_status for r in statement.records] == [
        PaymentStatus.FULLY_PAID,
        PaymentStatus.PARTIALLY_PAID,
    ]


def test_absent_days_are_listed_but_not_counted(worker, rows):
    attendance = [
        rows.attendance(id="a1", date="2025-08-01", status="absent", paidAmount=0),
        rows.attendance(id="a2", date="2025-08-02", status="half_day", paidAmount=0),
    ]
    statement = build_statement(worker, attendance, [], AUG_1, AUG_31)

    assert len(statement.records) == 2
    assert statement.total_work_days == 1
    absent = statement.records[0]
    assert absent.status == AttendanceStatus.ABSENT
    assert absent.due == 0.0
    assert absent.payment_status == PaymentStatus.FULLY_PAID
    assert statement.records[1].payment_status == PaymentStatus.UNPAID


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"status": "half-day"}, AttendanceStatus.HALF_DAY),
        ({"status": "حاضر"}, AttendanceStatus.PRESENT),
        ({"status": "غائب"}, AttendanceStatus.ABSENT),
        ({"status": None, "isPresent": True}, AttendanceStatus.PRESENT),
        ({"status": None, "isPresent": False}, AttendanceStatus.ABSENT),
    ],
)
def test_attendance_status_spellings(worker, rows, raw, expected):
    statement = build_statement(worker, [rows.attendance(**raw)], [], AUG_1, AUG_31)
    assert statement.records[0].status == expected


def test_explicit_wage_overrides_daily_wage(worker, rows):
    attendance = [
        rows.attendance(id="a1", wage=250, paidAmount=250),
        rows.attendance(id="a2", date="2025-08-02", wage=0, paidAmount=0),
    ]
    statement = build_statement(worker, attendance, [], AUG_1, AUG_31)

    assert [r.day_wage for r in statement.records] == [250.0, 200.0]
    assert statement.total_wages_earned == 450.0


def test_resolve_day_wage_fallbacks():
    assert resolve_day_wage("300", 200.0) == 300.0
    assert resolve_day_wage(None, 200.0) == 200.0
    assert resolve_day_wage("", 200.0) == 200.0
    assert resolve_day_wage(0, 200.0) == 200.0
    assert resolve_day_wage(None, -5.0) == 0.0


def test_rows_outside_worker_range_or_project_are_filtered(worker, rows):
    attendance = [
        rows.attendance(id="a1"),
        rows.attendance(id="a2", workerId="w2"),
        rows.attendance(id="a3", date="2025-09-01"),
        rows.attendance(id="a4", projectId="p2"),
        rows.attendance(id="a5", date="garbage"),
    ]
    statement = build_statement(worker, attendance, [], AUG_1, AUG_31, project_id="p1")

    assert [r.source_id for r in statement.records] == ["a1"]
    assert statement.diagnostics.invalid_dates == 1


def test_transfers_count_only_for_worker_or_beneficiary(worker, rows):
    transfers = [
        rows.worker_transfer(id="t1", recipientName="محمد علي", amount=300),
        rows.worker_transfer(id="t2", recipientName="أحمد  علي", amount=100),
        rows.worker_transfer(id="t3", recipientName="", amount=50),
        rows.worker_transfer(id="t4", recipientName="مورد خارجي", amount=900),
        rows.worker_transfer(id="t5", workerId="w2", recipientName="محمد علي", amount=700),
        rows.worker_transfer(id="t6", transferDate="2025-07-15", amount=1000),
    ]
    statement = build_statement(worker, [rows.attendance()], transfers, AUG_1, AUG_31)

    assert statement.total_transfers == 450.0
    assert [t.source_id for t in statement.transfers] == ["t1", "t2", "t3", "t4"]
    assert [t.counted for t in statement.transfers] == [True, True, True, False]


def test_no_work_days_gives_zero_ratio(worker):
    statement = build_statement(worker, [], [], AUG_1, AUG_31)

    assert statement.records == []
    assert statement.paid_ratio == 0.0
    assert statement.remaining_balance == 0.0


def test_statement_is_deterministic(worker, rows):
    attendance = [rows.attendance(id="b", date="2025-08-02"), rows.attendance(id="a", date="2025-08-02")]
    first = build_statement(worker, attendance, [], AUG_1, AUG_31)
    second = build_statement(worker, list(reversed(attendance)), [], AUG_1, AUG_31)

    assert first.records == second.records
    assert [r.source_id for r in first.records] == ["a", "b"]


def test_reversed_range_is_rejected(worker):
    with pytest.raises(ValidationError) as exc:
        build_statement(worker, [], [], AUG_31, AUG_1)
    assert exc.value.code == "INVALID_DATE_RANGE"


def test_unreadable_transfer_amount_is_warned_once(worker, rows, caplog):
    transfers = [
        rows.worker_transfer(id="t1", amount="abc"),
        rows.worker_transfer(id="t1", amount="abc"),
    ]
    with caplog.at_level(logging.WARNING, logger="siteledger.services.statement.builder"):
        statement = build_statement(worker, [rows.attendance()], transfers, AUG_1, AUG_31)

    assert statement.diagnostics.invalid_amounts == 2
    assert statement.diagnostics.warnings == ["Unreadable transfer amount 'abc' in row t1"]
    assert len([r for r in caplog.records if "Unreadable transfer amount" in r.getMessage()]) == 1
    assert [t.amount for t in statement.transfers] == [0.0, 0.0]
