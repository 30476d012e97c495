# tests/conftest.py
from datetime import date
from types import SimpleNamespace

import pytest

from infra.config import get_settings
from infra.operational_support import OperationalSupport, set_operational_support
from siteledger.interfaces import InMemoryLedgerSource, RawLedgerSources
from siteledger.services.statement.models import WorkerInfo


@pytest.fixture(autouse=True)
def support(tmp_path, monkeypatch):
    # keep events and env-driven settings out of the real user profile
    for name in (
        "SITELEDGER_CURRENCY_SUFFIX",
        "SITELEDGER_COMPANY_NAME",
        "SITELEDGER_DATE_FORMAT",
        "SITELEDGER_EXPORT_DIR",
        "SITELEDGER_PDF_FONT",
        "SITELEDGER_APP_VERSION",
    ):
        monkeypatch.delenv(name, raising=False)
    recorder = OperationalSupport(events_path=tmp_path / "support" / "support-events.jsonl")
    set_operational_support(recorder)
    try:
        yield recorder
    finally:
        set_operational_support(None)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def worker():
    return WorkerInfo(id="w1", name="أحمد علي", trade="معلم", daily_wage=200.0, beneficiaries=("محمد علي",))


def attendance_row(**overrides):
    row = {
        "id": "a1",
        "workerId": "w1",
        "workerName": "أحمد علي",
        "projectId": "p1",
        "date": "2025-08-01",
        "status": "present",
        "paidAmount": 200,
    }
    row.update(overrides)
    return row


def purchase_row(**overrides):
    row = {
        "id": "m1",
        "projectId": "p1",
        "purchaseDate": "2025-08-01",
        "materialName": "أسمنت",
        "quantity": 10,
        "unitPrice": 500,
        "totalAmount": 5000,
        "paymentType": "نقد",
    }
    row.update(overrides)
    return row


def expense_row(**overrides):
    row = {"id": "t1", "projectId": "p1", "date": "2025-08-01", "description": "نقل حديد", "amount": 150}
    row.update(overrides)
    return row


def fund_row(**overrides):
    row = {"id": "f1", "projectId": "p1", "transferDate": "2025-08-01", "senderName": "الإدارة", "amount": 10000}
    row.update(overrides)
    return row


def project_transfer_row(**overrides):
    row = {
        "id": "pt1",
        "fromProjectId": "p2",
        "toProjectId": "p1",
        "transferDate": "2025-08-02",
        "amount": 2000,
        "status": "completed",
    }
    row.update(overrides)
    return row


def worker_transfer_row(**overrides):
    row = {
        "id": "wt1",
        "workerId": "w1",
        "projectId": "p1",
        "transferDate": "2025-08-02",
        "amount": 300,
        "recipientName": "محمد علي",
        "transferMethod": "hawaleh",
    }
    row.update(overrides)
    return row


@pytest.fixture
def rows():
    return SimpleNamespace(
        attendance=attendance_row,
        purchase=purchase_row,
        expense=expense_row,
        fund=fund_row,
        project_transfer=project_transfer_row,
        worker_transfer=worker_transfer_row,
    )


@pytest.fixture
def project_sources():
    return RawLedgerSources(
        attendance=[
            attendance_row(id="a1", date="2025-08-01", paidAmount=200),
            attendance_row(id="a2", date="2025-08-02", paidAmount=100),
        ],
        material_purchases=[
            purchase_row(id="m1", purchaseDate="2025-08-01", totalAmount=1000, paymentType="نقد"),
            purchase_row(id="m2", purchaseDate="2025-08-02", totalAmount=5000, paymentType="آجل"),
        ],
        transportation=[expense_row(id="t1", date="2025-08-02", amount=150)],
        misc_expenses=[expense_row(id="x1", date="2025-07-30", description="ماء", amount=50)],
        fund_transfers=[
            fund_row(id="f0", transferDate="2025-07-28", amount=3000),
            fund_row(id="f1", transferDate="2025-08-01", amount=10000),
        ],
        project_transfers=[
            project_transfer_row(id="pt1"),
            project_transfer_row(id="pt2", fromProjectId="p1", toProjectId="p3", amount=500),
            project_transfer_row(id="pt3", status="pending", amount=9999),
        ],
        worker_transfers=[worker_transfer_row()],
    )


@pytest.fixture
def source_repo(project_sources):
    return InMemoryLedgerSource(
        workers=[
            {"id": "w1", "name": "أحمد علي", "type": "معلم", "dailyWage": 200, "beneficiaries": ["محمد علي"]},
            {"id": "w2", "name": "سالم", "type": "عامل", "dailyWage": 120},
        ],
        sources=project_sources,
    )


@pytest.fixture
def august():
    return date(2025, 8, 1), date(2025, 8, 31)
