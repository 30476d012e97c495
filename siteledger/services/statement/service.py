from __future__ import annotations

from datetime import date

from infra.config import LedgerSettings, get_settings
from siteledger.exceptions import NotFoundError
from siteledger.interfaces import LedgerSourceRepository
from siteledger.services.ledger.helpers import validate_range
from siteledger.services.statement.builder import build_statement
from siteledger.services.statement.models import WorkerInfo, WorkerStatement


class StatementService:
    def __init__(
        self,
        *,
        source_repo: LedgerSourceRepository,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._source_repo: LedgerSourceRepository = source_repo
        self._settings = settings or get_settings()

    def get_worker(self, worker_id: str) -> WorkerInfo:
        row = self._source_repo.get_worker(worker_id)
        if row is None:
            raise NotFoundError("Worker not found.", code="WORKER_NOT_FOUND")
        return WorkerInfo.from_row(row)

    def get_worker_statement(
        self,
        worker_id: str,
        range_start: date,
        range_end: date,
        *,
        project_id: str | None = None,
    ) -> WorkerStatement:
        validate_range(range_start, range_end)
        worker = self.get_worker(worker_id)
        return build_statement(
            worker,
            self._source_repo.list_attendance(project_id=project_id, worker_id=worker.id),
            self._source_repo.list_worker_transfers(worker_id=worker.id),
            range_start,
            range_end,
            project_id=project_id,
            settings=self._settings,
        )


__all__ = ["StatementService"]
