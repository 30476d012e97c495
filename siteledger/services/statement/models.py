from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from siteledger.models import AttendanceStatus, PaymentStatus
from siteledger.services.ledger.helpers import clamp_non_negative, parse_amount, pick, text_or
from siteledger.services.ledger.models import LedgerDiagnostics


@dataclass(frozen=True)
class WorkerInfo:
    id: str
    name: str
    trade: str = ""
    daily_wage: float = 0.0
    # Names transfers may be addressed to on the worker's behalf (family, agent).
    beneficiaries: tuple[str, ...] = ()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> WorkerInfo:
        raw_beneficiaries = pick(row, "beneficiaries", "beneficiaryNames", default=()) or ()
        if isinstance(raw_beneficiaries, str):
            raw_beneficiaries = [raw_beneficiaries]
        return cls(
            id=str(pick(row, "id", "workerId", "worker_id", default="")),
            name=text_or(pick(row, "name", "workerName", "worker_name"), "غير محدد"),
            trade=text_or(pick(row, "type", "trade", "workerType"), ""),
            daily_wage=clamp_non_negative(parse_amount(pick(row, "dailyWage", "daily_wage"))),
            beneficiaries=tuple(text_or(b, "") for b in raw_beneficiaries if text_or(b, "")),
        )


@dataclass(frozen=True)
class StatementDay:
    date: date
    project_id: str
    status: AttendanceStatus
    day_wage: float
    due: float
    paid: float
    remaining: float
    payment_status: PaymentStatus
    notes: str
    source_id: str

    @property
    def is_work_day(self) -> bool:
        return self.status in (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY)


@dataclass(frozen=True)
class TransferRecord:
    date: date
    amount: float
    recipient: str
    method: str
    notes: str
    source_id: str
    counted: bool


@dataclass(frozen=True)
class WorkerStatement:
    worker: WorkerInfo
    range_start: date
    range_end: date
    project_id: str | None
    total_work_days: int
    total_wages_earned: float
    total_paid_amount: float
    total_transfers: float
    remaining_balance: float
    paid_ratio: float
    records: list[StatementDay]
    transfers: list[TransferRecord] = field(default_factory=list)
    diagnostics: LedgerDiagnostics = field(default_factory=LedgerDiagnostics)


__all__ = ["WorkerInfo", "StatementDay", "TransferRecord", "WorkerStatement"]
