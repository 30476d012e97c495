from __future__ import annotations

from datetime import date

import pytest

from siteledger.exceptions import NotFoundError, ValidationError
from siteledger.interfaces import InMemoryLedgerSource, RawLedgerSources
from siteledger.models import EntryKind, LedgerCategory
from siteledger.services.ledger.service import LedgerService
from siteledger.services.statement.service import StatementService


def test_project_ledger_from_source_repository(source_repo, august):
    summary = LedgerService(source_repo=source_repo).get_project_ledger("p1", *august)

    assert summary.project_id == "p1"
    assert summary.carried_forward == 2950.0
    assert summary.total_income == 12000.0
    assert summary.total_expenses == 2250.0
    assert summary.total_deferred == 5000.0
    assert summary.remaining_balance == 12700.0
    assert summary.entries_count == 9
    assert summary.diagnostics.skipped_transfers == 1


def test_outgoing_transfer_seen_from_both_projects(source_repo, august):
    service = LedgerService(source_repo=source_repo)

    sender = service.get_project_ledger("p1", *august)
    receiver = service.get_project_ledger("p3", *august)

    outgoing = [line.entry for line in sender.entries if line.entry.category == LedgerCategory.INTER_PROJECT_TRANSFER]
    assert {(e.kind, e.amount) for e in outgoing} == {(EntryKind.TRANSFER_IN, 2000.0), (EntryKind.EXPENSE, 500.0)}
    assert receiver.total_income == 500.0
    assert receiver.remaining_balance == 500.0


def test_ledger_service_rejects_reversed_range(source_repo):
    with pytest.raises(ValidationError) as exc:
        LedgerService(source_repo=source_repo).get_project_ledger("p1", date(2025, 9, 1), date(2025, 8, 1))
    assert exc.value.code == "INVALID_DATE_RANGE"


def test_worker_statement_from_source_repository(source_repo, august):
    statement = StatementService(source_repo=source_repo).get_worker_statement("w1", *august, project_id="p1")

    assert statement.worker.name == "أحمد علي"
    assert statement.worker.beneficiaries == ("محمد علي",)
    assert statement.total_work_days == 2
    assert statement.total_wages_earned == 400.0
    assert statement.total_paid_amount == 300.0
    assert statement.total_transfers == 300.0


def test_unknown_worker_raises_not_found(source_repo, august):
    with pytest.raises(NotFoundError) as exc:
        StatementService(source_repo=source_repo).get_worker_statement("nobody", *august)
    assert exc.value.code == "WORKER_NOT_FOUND"


def test_in_memory_source_filters_by_project(rows):
    repo = InMemoryLedgerSource(
        sources=RawLedgerSources(
            transportation=[rows.expense(id="1", projectId="p1"), rows.expense(id="2", projectId="p2")],
            project_transfers=[rows.project_transfer(id="x", fromProjectId="p2", toProjectId="p3")],
        )
    )

    assert [r["id"] for r in repo.list_transportation(project_id="p2")] == ["2"]
    assert len(repo.list_transportation()) == 2
    assert [r["id"] for r in repo.list_project_transfers(project_id="p3")] == ["x"]
    assert repo.list_project_transfers(project_id="p1") == []
    assert repo.get_worker("w1") is None
