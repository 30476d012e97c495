from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from infra.config import LedgerSettings
from infra.version import generator_label
from siteledger.models import (
    ATTENDANCE_LABELS,
    CATEGORY_LABELS,
    INFLOW_KINDS,
    KIND_LABELS,
    PAYMENT_STATUS_LABELS,
    EntryKind,
    ReportKind,
)
from siteledger.reporting.formatting import fmt_date, fmt_money
from siteledger.services.ledger.models import ProjectLedgerSummary
from siteledger.services.statement.models import WorkerStatement

TEXT = "text"
MONEY = "money"
DATE = "date"
NUMBER = "number"
PERCENT = "percent"


@dataclass
class ReportColumn:
    title: str
    kind: str = TEXT
    width: float = 15


@dataclass
class ReportTable:
    columns: List[ReportColumn]
    rows: List[list]
    totals: list
    title: str = ""


@dataclass
class SummaryItem:
    label: str
    value: object
    kind: str = MONEY


@dataclass
class ReportExportContext:
    kind: ReportKind
    report_type: str
    entity_name: str
    title: str
    company_name: str
    range_start: date
    range_end: date
    header_lines: List[Tuple[str, str]]
    table: ReportTable
    summary: List[SummaryItem]
    currency_suffix: str
    money_number_format: str
    date_format: str
    is_empty: bool
    balance_points: List[Tuple[date, float]] = field(default_factory=list)
    # Titled tables rendered after the main table, in order.
    sections: List[ReportTable] = field(default_factory=list)
    generator: str = ""

    @property
    def period_label(self) -> str:
        return f"من {fmt_date(self.range_start, self.date_format)} إلى {fmt_date(self.range_end, self.date_format)}"


@dataclass
class ExcelReportContext(ReportExportContext):
    pass


@dataclass
class PdfReportContext(ReportExportContext):
    chart_png_path: str = ""
    font_path: Optional[str] = None


def _base_fields(settings: LedgerSettings) -> dict:
    return {
        "company_name": settings.company_name,
        "currency_suffix": settings.currency_suffix,
        "money_number_format": settings.money_number_format,
        "date_format": settings.report_date_format,
        "generator": generator_label(),
    }


def _daily_section(summary: ProjectLedgerSummary) -> ReportTable:
    columns = [
        ReportColumn("التاريخ", DATE),
        ReportColumn("رصيد مرحل", MONEY),
        ReportColumn("وارد", MONEY),
        ReportColumn("منصرف", MONEY),
        ReportColumn("آجل", MONEY),
        ReportColumn("رصيد الإقفال", MONEY),
    ]
    rows = [
        [row.day, row.carried_forward, row.income, row.expenses, row.deferred, row.closing_balance]
        for row in summary.daily
    ]
    totals = [
        "الإجمالي",
        summary.carried_forward,
        summary.total_income,
        summary.total_expenses,
        summary.total_deferred,
        summary.remaining_balance,
    ]
    return ReportTable(columns=columns, rows=rows, totals=totals, title="الملخص اليومي")


def _transfer_section(statement: WorkerStatement) -> ReportTable:
    columns = [
        ReportColumn("التاريخ", DATE),
        ReportColumn("المبلغ", MONEY),
        ReportColumn("المستلم", TEXT),
        ReportColumn("طريقة التحويل", TEXT),
        ReportColumn("محتسب", TEXT),
        ReportColumn("ملاحظات", TEXT),
    ]
    rows = [
        [
            transfer.date,
            transfer.amount,
            transfer.recipient or statement.worker.name,
            transfer.method,
            "نعم" if transfer.counted else "لا",
            transfer.notes,
        ]
        for transfer in statement.transfers
    ]
    # Only counted transfers make up the total.
    totals = ["الإجمالي", statement.total_transfers, f"{len(statement.transfers)} تحويل", "", "", ""]
    return ReportTable(columns=columns, rows=rows, totals=totals, title="التحويلات المالية")


def build_daily_expenses_context(
    summary: ProjectLedgerSummary,
    settings: LedgerSettings,
    *,
    project_name: Optional[str] = None,
    context_cls: type = ReportExportContext,
    **extra,
) -> ReportExportContext:
    """Lay out a project summary; every figure is read from the summary as computed."""
    project_name = project_name or summary.project_id
    columns = [
        ReportColumn("التاريخ", DATE, 14),
        ReportColumn("البند", TEXT, 18),
        ReportColumn("النوع", TEXT, 12),
        ReportColumn("البيان", TEXT, 36),
        ReportColumn("وارد", MONEY, 16),
        ReportColumn("منصرف", MONEY, 16),
        ReportColumn("آجل", MONEY, 16),
        ReportColumn("الرصيد", MONEY, 18),
    ]
    rows: List[list] = [[summary.range_start, "رصيد مرحل", "", "الرصيد المرحل من الفترة السابقة", None, None, None, summary.carried_forward]]
    for line in summary.entries:
        entry = line.entry
        rows.append(
            [
                entry.date,
                CATEGORY_LABELS.get(entry.category, entry.category.value),
                KIND_LABELS.get(entry.kind, entry.kind.value),
                entry.description,
                entry.amount if entry.kind in INFLOW_KINDS else None,
                entry.amount if entry.kind == EntryKind.EXPENSE else None,
                entry.amount if entry.kind == EntryKind.DEFERRED else None,
                line.running_balance,
            ]
        )
    totals = [
        "الإجمالي",
        "",
        "",
        f"{len(summary.entries)} حركة",
        summary.total_income,
        summary.total_expenses,
        summary.total_deferred,
        summary.remaining_balance,
    ]

    summary_items = [
        SummaryItem("إجمالي الدخل", summary.total_income),
        SummaryItem("إجمالي المصروفات", summary.total_expenses),
        SummaryItem("المشتريات الآجلة", summary.total_deferred),
        SummaryItem("الرصيد المرحل", summary.carried_forward),
        SummaryItem("الرصيد النهائي", summary.remaining_balance),
    ]
    for row in summary.by_category:
        label = f"{CATEGORY_LABELS.get(row.category, row.category.value)} ({KIND_LABELS.get(row.kind, row.kind.value)})"
        summary_items.append(SummaryItem(label, row.total))

    return context_cls(
        kind=ReportKind.DAILY_EXPENSES,
        report_type="daily_expenses",
        entity_name=project_name,
        title="كشف المصروفات اليومية",
        range_start=summary.range_start,
        range_end=summary.range_end,
        header_lines=[("المشروع", project_name)],
        table=ReportTable(columns=columns, rows=rows, totals=totals),
        summary=summary_items,
        is_empty=not summary.entries,
        balance_points=[(line.entry.date, line.running_balance) for line in summary.entries],
        sections=[_daily_section(summary)] if summary.daily else [],
        **_base_fields(settings),
        **extra,
    )


def build_worker_statement_context(
    statement: WorkerStatement,
    settings: LedgerSettings,
    *,
    context_cls: type = ReportExportContext,
    **extra,
) -> ReportExportContext:
    worker = statement.worker
    columns = [
        ReportColumn("التاريخ", DATE, 14),
        ReportColumn("المشروع", TEXT, 16),
        ReportColumn("الحالة", TEXT, 12),
        ReportColumn("الأجر اليومي", MONEY, 16),
        ReportColumn("الأجر المستحق", MONEY, 16),
        ReportColumn("المدفوع", MONEY, 16),
        ReportColumn("المتبقي", MONEY, 16),
        ReportColumn("حالة الدفع", TEXT, 16),
        ReportColumn("ملاحظات", TEXT, 28),
    ]
    rows = [
        [
            record.date,
            record.project_id,
            ATTENDANCE_LABELS.get(record.status, record.status.value),
            record.day_wage,
            record.due,
            record.paid,
            record.remaining,
            PAYMENT_STATUS_LABELS.get(record.payment_status, record.payment_status.value),
            record.notes,
        ]
        for record in statement.records
    ]
    totals = [
        "الإجمالي",
        "",
        f"{statement.total_work_days} يوم",
        None,
        statement.total_wages_earned,
        statement.total_paid_amount,
        statement.remaining_balance,
        "",
        "",
    ]

    header_lines = [("العامل", worker.name)]
    if worker.trade:
        header_lines.append(("المهنة", worker.trade))
    header_lines.append(("الأجر اليومي", fmt_money(worker.daily_wage, settings.currency_suffix)))
    if statement.project_id:
        header_lines.append(("المشروع", statement.project_id))

    return context_cls(
        kind=ReportKind.WORKER_STATEMENT,
        report_type="worker_statement",
        entity_name=worker.name,
        title="كشف حساب عامل",
        range_start=statement.range_start,
        range_end=statement.range_end,
        header_lines=header_lines,
        table=ReportTable(columns=columns, rows=rows, totals=totals),
        summary=[
            SummaryItem("إجمالي أيام العمل", statement.total_work_days, NUMBER),
            SummaryItem("إجمالي الأجور المستحقة", statement.total_wages_earned),
            SummaryItem("إجمالي المدفوع", statement.total_paid_amount),
            SummaryItem("إجمالي التحويلات", statement.total_transfers),
            SummaryItem("الرصيد المتبقي", statement.remaining_balance),
            SummaryItem("نسبة المدفوع", statement.paid_ratio, PERCENT),
        ],
        is_empty=not statement.records,
        sections=[_transfer_section(statement)] if statement.transfers else [],
        **_base_fields(settings),
        **extra,
    )
