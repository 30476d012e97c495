from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Protocol

from siteledger.models import SourceKind

RawRow = Mapping[str, Any]


def _row_value(row: RawRow, *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return str(value)
    return ""


class LedgerSourceRepository(Protocol):
    """Read side of the data layer: raw rows exactly as delivered."""

    def get_worker(self, worker_id: str) -> RawRow | None: ...

    def list_attendance(self, *, project_id: str | None = None, worker_id: str | None = None) -> list[RawRow]: ...

    def list_material_purchases(self, *, project_id: str | None = None) -> list[RawRow]: ...

    def list_transportation(self, *, project_id: str | None = None) -> list[RawRow]: ...

    def list_misc_expenses(self, *, project_id: str | None = None) -> list[RawRow]: ...

    def list_fund_transfers(self, *, project_id: str | None = None) -> list[RawRow]: ...

    def list_project_transfers(self, *, project_id: str | None = None) -> list[RawRow]: ...

    def list_worker_transfers(self, *, project_id: str | None = None, worker_id: str | None = None) -> list[RawRow]: ...


@dataclass
class RawLedgerSources:
    """Raw rows of every source kind that feeds one project ledger."""

    attendance: list[RawRow] = field(default_factory=list)
    material_purchases: list[RawRow] = field(default_factory=list)
    transportation: list[RawRow] = field(default_factory=list)
    misc_expenses: list[RawRow] = field(default_factory=list)
    fund_transfers: list[RawRow] = field(default_factory=list)
    project_transfers: list[RawRow] = field(default_factory=list)
    worker_transfers: list[RawRow] = field(default_factory=list)

    def iter_sources(self) -> Iterator[tuple[SourceKind, list[RawRow]]]:
        yield SourceKind.ATTENDANCE, self.attendance
        yield SourceKind.MATERIAL_PURCHASE, self.material_purchases
        yield SourceKind.TRANSPORTATION, self.transportation
        yield SourceKind.MISC_EXPENSE, self.misc_expenses
        yield SourceKind.FUND_TRANSFER, self.fund_transfers
        yield SourceKind.PROJECT_TRANSFER, self.project_transfers
        yield SourceKind.WORKER_TRANSFER, self.worker_transfers

    @classmethod
    def load(cls, repo: LedgerSourceRepository, project_id: str) -> RawLedgerSources:
        return cls(
            attendance=list(repo.list_attendance(project_id=project_id)),
            material_purchases=list(repo.list_material_purchases(project_id=project_id)),
            transportation=list(repo.list_transportation(project_id=project_id)),
            misc_expenses=list(repo.list_misc_expenses(project_id=project_id)),
            fund_transfers=list(repo.list_fund_transfers(project_id=project_id)),
            project_transfers=list(repo.list_project_transfers(project_id=project_id)),
            worker_transfers=list(repo.list_worker_transfers(project_id=project_id)),
        )


class InMemoryLedgerSource:
    """List-backed LedgerSourceRepository for callers that already hold the rows."""

    def __init__(
        self,
        *,
        workers: list[RawRow] | None = None,
        sources: RawLedgerSources | None = None,
    ) -> None:
        self._workers = {_row_value(w, "id", "workerId", "worker_id"): w for w in workers or []}
        self._sources = sources or RawLedgerSources()

    @staticmethod
    def _by_project(rows: list[RawRow], project_id: str | None) -> list[RawRow]:
        if project_id is None:
            return list(rows)
        return [r for r in rows if _row_value(r, "projectId", "project_id") == str(project_id)]

    def get_worker(self, worker_id: str) -> RawRow | None:
        return self._workers.get(str(worker_id))

    def list_attendance(self, *, project_id: str | None = None, worker_id: str | None = None) -> list[RawRow]:
        rows = self._by_project(self._sources.attendance, project_id)
        if worker_id is not None:
            rows = [r for r in rows if _row_value(r, "workerId", "worker_id") == str(worker_id)]
        return rows

    def list_material_purchases(self, *, project_id: str | None = None) -> list[RawRow]:
        return self._by_project(self._sources.material_purchases, project_id)

    def list_transportation(self, *, project_id: str | None = None) -> list[RawRow]:
        return self._by_project(self._sources.transportation, project_id)

    def list_misc_expenses(self, *, project_id: str | None = None) -> list[RawRow]:
        return self._by_project(self._sources.misc_expenses, project_id)

    def list_fund_transfers(self, *, project_id: str | None = None) -> list[RawRow]:
        return self._by_project(self._sources.fund_transfers, project_id)

    def list_project_transfers(self, *, project_id: str | None = None) -> list[RawRow]:
        if project_id is None:
            return list(self._sources.project_transfers)
        key = str(project_id)
        return [
            r
            for r in self._sources.project_transfers
            if key in (
                _row_value(r, "fromProjectId", "from_project_id"),
                _row_value(r, "toProjectId", "to_project_id"),
            )
        ]

    def list_worker_transfers(self, *, project_id: str | None = None, worker_id: str | None = None) -> list[RawRow]:
        rows = self._by_project(self._sources.worker_transfers, project_id)
        if worker_id is not None:
            rows = [r for r in rows if _row_value(r, "workerId", "worker_id") == str(worker_id)]
        return rows


__all__ = [
    "RawRow",
    "LedgerSourceRepository",
    "RawLedgerSources",
    "InMemoryLedgerSource",
]
