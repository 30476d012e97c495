from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping

from infra.config import LedgerSettings, get_settings
from siteledger.models import AttendanceStatus
from siteledger.services.ledger.helpers import (
    clamp_non_negative,
    parse_amount,
    parse_date,
    pick,
    safe_ratio,
    text_or,
    validate_range,
)
from siteledger.services.ledger.models import LedgerDiagnostics
from siteledger.services.payment_status import classify
from siteledger.services.statement.models import (
    StatementDay,
    TransferRecord,
    WorkerInfo,
    WorkerStatement,
)

logger = logging.getLogger(__name__)

_STATUS_ALIASES = {
    "present": AttendanceStatus.PRESENT,
    "حاضر": AttendanceStatus.PRESENT,
    "half_day": AttendanceStatus.HALF_DAY,
    "half-day": AttendanceStatus.HALF_DAY,
    "halfday": AttendanceStatus.HALF_DAY,
    "half day": AttendanceStatus.HALF_DAY,
    "نصف يوم": AttendanceStatus.HALF_DAY,
    "absent": AttendanceStatus.ABSENT,
    "غائب": AttendanceStatus.ABSENT,
}


def resolve_day_wage(wage: object, daily_wage: float) -> float:
    """Explicit non-zero wage on the attendance row, else the worker's daily wage."""
    explicit = parse_amount(wage)
    if explicit is not None and explicit != 0.0:
        return abs(explicit)
    return clamp_non_negative(daily_wage)


def parse_attendance_status(row: Mapping[str, Any]) -> AttendanceStatus | None:
    raw_status = pick(row, "status", "attendanceStatus", "attendance_status")
    if raw_status is not None:
        token = " ".join(str(raw_status).split()).strip().lower()
        return _STATUS_ALIASES.get(token)
    is_present = pick(row, "isPresent", "is_present")
    if isinstance(is_present, bool):
        return AttendanceStatus.PRESENT if is_present else AttendanceStatus.ABSENT
    return None


def _matches(row: Mapping[str, Any], keys: tuple[str, ...], expected: str | None) -> bool:
    if expected is None:
        return True
    return str(pick(row, *keys, default="")) == str(expected)


def _same_name(left: str, right: str) -> bool:
    return " ".join(left.split()).casefold() == " ".join(right.split()).casefold()


def is_worker_recipient(recipient: str, worker: WorkerInfo) -> bool:
    """A transfer counts for the worker when addressed to them, a beneficiary, or nobody."""
    if not recipient.strip():
        return True
    names = (worker.name, *worker.beneficiaries)
    return any(_same_name(recipient, name) for name in names if name)


def _build_day(
    row: Mapping[str, Any],
    worker: WorkerInfo,
    day: date,
    diagnostics: LedgerDiagnostics,
) -> StatementDay:
    source_id = str(pick(row, "id", default="") or "")
    status = parse_attendance_status(row)
    if status is None:
        status = AttendanceStatus.ABSENT
        raw_status = pick(row, "status", "attendanceStatus", "attendance_status")
        if diagnostics.warn(f"Unknown attendance status {raw_status!r} in row {source_id}"):
            logger.warning("Unknown attendance status %r in row %s; listed as absent", raw_status, source_id)

    day_wage = resolve_day_wage(pick(row, "wage", "dailyWage", "daily_wage"), worker.daily_wage)
    due = day_wage if status != AttendanceStatus.ABSENT else 0.0

    raw_paid = pick(row, "paidAmount", "paid_amount")
    paid = parse_amount(raw_paid)
    if paid is None:
        if raw_paid is not None:
            diagnostics.invalid_amounts += 1
            if diagnostics.warn(f"Unreadable paid amount {raw_paid!r} in row {source_id}"):
                logger.warning("Unreadable paid amount %r in row %s; using 0", raw_paid, source_id)
        paid = 0.0
    paid = abs(paid)

    return StatementDay(
        date=day,
        project_id=str(pick(row, "projectId", "project_id", default="") or ""),
        status=status,
        day_wage=day_wage,
        due=due,
        paid=paid,
        remaining=due - paid,
        payment_status=classify(paid, due),
        notes=text_or(pick(row, "notes", "workDescription"), ""),
        source_id=source_id,
    )


def build_statement(
    worker: WorkerInfo,
    attendance: Iterable[Mapping[str, Any]],
    transfers: Iterable[Mapping[str, Any]],
    range_start: date,
    range_end: date,
    *,
    project_id: str | None = None,
    settings: LedgerSettings | None = None,
) -> WorkerStatement:
    """
    Attendance and transfer statement for one worker over an inclusive range.

    Absent days are listed but carry no due amount and do not count as work
    days. Rows belonging to other workers, dates outside the range, or
    another project (when project_id is given) are left out.
    """
    validate_range(range_start, range_end)
    settings = settings or get_settings()
    diagnostics = LedgerDiagnostics()
    worker_keys = ("workerId", "worker_id")
    project_keys = ("projectId", "project_id")

    records: list[StatementDay] = []
    for row in attendance or []:
        if not _matches(row, worker_keys, worker.id) or not _matches(row, project_keys, project_id):
            continue
        raw_date = pick(row, "date", "attendanceDate", "attendance_date")
        day = parse_date(raw_date, settings.date_formats)
        if day is None:
            diagnostics.invalid_dates += 1
            if diagnostics.warn(f"Unparseable attendance date {raw_date!r} for worker {worker.id}"):
                logger.warning("Unparseable attendance date %r for worker %s", raw_date, worker.id)
            continue
        if not (range_start <= day <= range_end):
            continue
        records.append(_build_day(row, worker, day, diagnostics))
    records.sort(key=lambda r: (r.date, r.source_id))

    transfer_rows: list[TransferRecord] = []
    for row in transfers or []:
        if not _matches(row, worker_keys, worker.id):
            continue
        row_project = pick(row, *project_keys)
        if project_id is not None and row_project is not None and str(row_project) != str(project_id):
            continue
        raw_date = pick(row, "transferDate", "transfer_date", "date")
        day = parse_date(raw_date, settings.date_formats)
        if day is None:
            diagnostics.invalid_dates += 1
            if diagnostics.warn(f"Unparseable transfer date {raw_date!r} for worker {worker.id}"):
                logger.warning("Unparseable transfer date %r for worker %s", raw_date, worker.id)
            continue
        if not (range_start <= day <= range_end):
            continue
        raw_amount = pick(row, "amount")
        amount = parse_amount(raw_amount)
        if amount is None:
            source_id = pick(row, "id", default="")
            diagnostics.invalid_amounts += 1
            if diagnostics.warn(f"Unreadable transfer amount {raw_amount!r} in row {source_id}"):
                logger.warning("Unreadable transfer amount %r in row %s; using 0", raw_amount, source_id)
            amount = 0.0
        recipient = text_or(pick(row, "recipientName", "recipient_name"), "")
        transfer_rows.append(
            TransferRecord(
                date=day,
                amount=abs(amount),
                recipient=recipient,
                method=text_or(pick(row, "transferMethod", "method"), ""),
                notes=text_or(pick(row, "notes"), ""),
                source_id=str(pick(row, "id", default="") or ""),
                counted=is_worker_recipient(recipient, worker),
            )
        )
    transfer_rows.sort(key=lambda t: (t.date, t.source_id))

    total_earned = sum(r.due for r in records)
    total_paid = sum(r.paid for r in records)
    total_transfers = sum(t.amount for t in transfer_rows if t.counted)

    return WorkerStatement(
        worker=worker,
        range_start=range_start,
        range_end=range_end,
        project_id=project_id,
        total_work_days=sum(1 for r in records if r.is_work_day),
        total_wages_earned=float(total_earned),
        total_paid_amount=float(total_paid),
        total_transfers=float(total_transfers),
        remaining_balance=float(total_earned) - float(total_paid),
        paid_ratio=safe_ratio(total_paid, total_earned),
        records=records,
        transfers=transfer_rows,
        diagnostics=diagnostics,
    )


__all__ = [
    "build_statement",
    "resolve_day_wage",
    "parse_attendance_status",
    "is_worker_recipient",
]
