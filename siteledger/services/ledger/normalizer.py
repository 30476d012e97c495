from __future__ import annotations

import hashlib
import logging
from typing import Any, Iterable, Mapping

from infra.config import LedgerSettings, get_settings
from siteledger.interfaces import RawLedgerSources
from siteledger.models import EntryKind, LedgerCategory, SourceKind
from siteledger.services.ledger.helpers import parse_amount, parse_date, pick, text_or
from siteledger.services.ledger.models import LedgerDiagnostics, LedgerEntry

logger = logging.getLogger(__name__)

_SOURCE_PREFIX = {
    SourceKind.ATTENDANCE: "wage",
    SourceKind.MATERIAL_PURCHASE: "material",
    SourceKind.TRANSPORTATION: "transport",
    SourceKind.MISC_EXPENSE: "misc",
    SourceKind.FUND_TRANSFER: "fund",
    SourceKind.PROJECT_TRANSFER: "project-transfer",
    SourceKind.WORKER_TRANSFER: "worker-transfer",
}

_DATE_KEYS = {
    SourceKind.ATTENDANCE: ("date", "attendanceDate", "attendance_date"),
    SourceKind.MATERIAL_PURCHASE: ("purchaseDate", "purchase_date", "date"),
    SourceKind.TRANSPORTATION: ("expenseDate", "expense_date", "date"),
    SourceKind.MISC_EXPENSE: ("expenseDate", "expense_date", "date"),
    SourceKind.FUND_TRANSFER: ("transferDate", "transfer_date", "date"),
    SourceKind.PROJECT_TRANSFER: ("transferDate", "transfer_date", "date"),
    SourceKind.WORKER_TRANSFER: ("transferDate", "transfer_date", "date"),
}


def _coerce_source_kind(source_kind: SourceKind | str) -> SourceKind | None:
    if isinstance(source_kind, SourceKind):
        return source_kind
    token = str(source_kind or "").strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return SourceKind(token)
    except ValueError:
        return None


def _source_id(raw: Mapping[str, Any], prefix: str) -> str:
    raw_id = pick(raw, "id", "sourceId", "source_id")
    if raw_id is not None:
        return f"{prefix}-{raw_id}"
    # No id from the data layer: derive a stable one from the row content
    digest = hashlib.sha1(repr(sorted((str(k), str(v)) for k, v in raw.items())).encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:12]}"


def is_completed_transfer(raw: Mapping[str, Any], settings: LedgerSettings | None = None) -> bool:
    settings = settings or get_settings()
    status = str(pick(raw, "status", default="") or "").strip().lower()
    return status == settings.completed_transfer_status.lower()


def _classify(
    raw: Mapping[str, Any],
    source_kind: SourceKind,
    project_id: str | None,
    settings: LedgerSettings,
) -> tuple[EntryKind, LedgerCategory, str, str]:
    """Kind, category, owning project and description for one raw row."""
    row_project = str(pick(raw, "projectId", "project_id", default="") or "")

    if source_kind == SourceKind.ATTENDANCE:
        worker = text_or(pick(raw, "workerName", "worker_name"), "غير محدد")
        return EntryKind.EXPENSE, LedgerCategory.WORKER_WAGES, row_project, f"عامل: {worker}"

    if source_kind == SourceKind.MATERIAL_PURCHASE:
        material = text_or(pick(raw, "materialName", "material_name"), "غير محدد")
        payment_type = text_or(pick(raw, "paymentType", "payment_type", "purchaseType", "purchase_type"), "")
        kind = EntryKind.DEFERRED if settings.is_deferred_payment(payment_type) else EntryKind.EXPENSE
        label = f"مادة: {material}" + (f" ({payment_type})" if payment_type else "")
        return kind, LedgerCategory.MATERIALS, row_project, label

    if source_kind == SourceKind.TRANSPORTATION:
        return (
            EntryKind.EXPENSE,
            LedgerCategory.TRANSPORTATION,
            row_project,
            text_or(pick(raw, "description"), "مصروف نقل"),
        )

    if source_kind == SourceKind.MISC_EXPENSE:
        return (
            EntryKind.EXPENSE,
            LedgerCategory.MISCELLANEOUS,
            row_project,
            text_or(pick(raw, "description"), "مصروف متنوع"),
        )

    if source_kind == SourceKind.FUND_TRANSFER:
        sender = text_or(pick(raw, "senderName", "sender_name"), "غير محدد")
        return EntryKind.INCOME, LedgerCategory.FUND_TRANSFER, row_project, f"من: {sender}"

    if source_kind == SourceKind.WORKER_TRANSFER:
        recipient = text_or(pick(raw, "recipientName", "recipient_name"), "العامل")
        return EntryKind.EXPENSE, LedgerCategory.WORKER_TRANSFERS, row_project, f"حوالة إلى: {recipient}"

    # Inter-project transfer, seen from project_id (default: the receiving project)
    from_project = str(pick(raw, "fromProjectId", "from_project_id", default="") or "")
    to_project = str(pick(raw, "toProjectId", "to_project_id", default="") or "")
    if project_id is not None and project_id == from_project and project_id != to_project:
        return EntryKind.EXPENSE, LedgerCategory.INTER_PROJECT_TRANSFER, from_project, "ترحيل صادر إلى مشروع آخر"
    return EntryKind.TRANSFER_IN, LedgerCategory.INTER_PROJECT_TRANSFER, to_project, "ترحيل وارد من مشروع آخر"


def normalize(
    raw: Mapping[str, Any],
    source_kind: SourceKind | str,
    *,
    project_id: str | None = None,
    settings: LedgerSettings | None = None,
    diagnostics: LedgerDiagnostics | None = None,
) -> LedgerEntry:
    """
    Convert one raw source row into a LedgerEntry.

    Never raises for row content: bad amounts become 0, bad dates become None,
    an unrecognised source kind yields an UNKNOWN-category expense. Problems are
    tallied on `diagnostics` when given.
    """
    settings = settings or get_settings()
    diagnostics = diagnostics if diagnostics is not None else LedgerDiagnostics()
    raw = raw or {}

    kind_enum = _coerce_source_kind(source_kind)
    if kind_enum is None:
        diagnostics.unknown_categories += 1
        source_id = _source_id(raw, "unknown")
        if diagnostics.warn(f"Unknown source kind {source_kind!r} for row {source_id}"):
            logger.warning("Unknown source kind %r for row %s; booked as UNKNOWN", source_kind, source_id)
        entry_kind, category = EntryKind.EXPENSE, LedgerCategory.UNKNOWN
        row_project = str(pick(raw, "projectId", "project_id", default="") or "")
        description = text_or(pick(raw, "description"), "غير محدد")
        date_keys: tuple[str, ...] = ("date",)
        amount_keys: tuple[str, ...] = ("amount", "totalAmount")
    else:
        source_id = _source_id(raw, _SOURCE_PREFIX[kind_enum])
        entry_kind, category, row_project, description = _classify(raw, kind_enum, project_id, settings)
        date_keys = _DATE_KEYS[kind_enum]
        if kind_enum == SourceKind.ATTENDANCE:
            amount_keys = ("paidAmount", "paid_amount")
        elif kind_enum == SourceKind.MATERIAL_PURCHASE:
            amount_keys = ("totalAmount", "total_amount", "amount")
        else:
            amount_keys = ("amount",)

    raw_amount = pick(raw, *amount_keys)
    amount = parse_amount(raw_amount)
    if amount is None:
        # A missing paid amount on attendance simply means nothing was paid
        if not (kind_enum == SourceKind.ATTENDANCE and raw_amount is None):
            diagnostics.invalid_amounts += 1
            if diagnostics.warn(f"Unreadable amount {raw_amount!r} in row {source_id}"):
                logger.warning("Unreadable amount %r in row %s; using 0", raw_amount, source_id)
        amount = 0.0
    amount = abs(amount)

    raw_date = pick(raw, *date_keys)
    entry_date = parse_date(raw_date, settings.date_formats)
    if entry_date is None:
        diagnostics.invalid_dates += 1
        if diagnostics.warn(f"Unparseable date {raw_date!r} in row {source_id}"):
            logger.warning("Unparseable date %r in row %s; row left out of date ranges", raw_date, source_id)

    return LedgerEntry(
        project_id=row_project,
        date=entry_date,
        kind=entry_kind,
        category=category,
        amount=amount,
        description=description,
        source_id=source_id,
        source_kind=kind_enum if kind_enum is not None else SourceKind.MISC_EXPENSE,
    )


def normalize_many(
    rows: Iterable[Mapping[str, Any]],
    source_kind: SourceKind | str,
    *,
    project_id: str | None = None,
    settings: LedgerSettings | None = None,
    diagnostics: LedgerDiagnostics | None = None,
) -> list[LedgerEntry]:
    """
    Normalize a batch from one source.

    Inter-project transfers that are not completed are left out and counted in
    `skipped_transfers`; when `project_id` is given, transfers that neither
    leave nor enter that project are left out too.
    """
    settings = settings or get_settings()
    diagnostics = diagnostics if diagnostics is not None else LedgerDiagnostics()
    kind_enum = _coerce_source_kind(source_kind)

    out: list[LedgerEntry] = []
    for raw in rows or []:
        if kind_enum == SourceKind.PROJECT_TRANSFER:
            if not is_completed_transfer(raw, settings):
                diagnostics.skipped_transfers += 1
                continue
            if project_id is not None:
                ends = {
                    str(pick(raw, "fromProjectId", "from_project_id", default="") or ""),
                    str(pick(raw, "toProjectId", "to_project_id", default="") or ""),
                }
                if project_id not in ends:
                    continue
        out.append(
            normalize(
                raw,
                source_kind,
                project_id=project_id,
                settings=settings,
                diagnostics=diagnostics,
            )
        )
    return out


def normalize_sources(
    sources: RawLedgerSources,
    project_id: str,
    *,
    settings: LedgerSettings | None = None,
) -> tuple[list[LedgerEntry], LedgerDiagnostics]:
    settings = settings or get_settings()
    diagnostics = LedgerDiagnostics()
    entries: list[LedgerEntry] = []
    for source_kind, rows in sources.iter_sources():
        entries.extend(
            normalize_many(
                rows,
                source_kind,
                project_id=project_id,
                settings=settings,
                diagnostics=diagnostics,
            )
        )
    return entries, diagnostics


__all__ = ["normalize", "normalize_many", "normalize_sources", "is_completed_transfer"]
