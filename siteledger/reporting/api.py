"""Reporting API wrappers around renderer classes."""

import logging
import os
import threading
import uuid
from contextlib import contextmanager, suppress
from pathlib import Path

from infra.config import LedgerSettings, get_settings
from infra.operational_support import bind_trace_id, get_operational_support
from siteledger.exceptions import BusinessRuleError, DomainError, ExportError, ValidationError
from siteledger.models import ReportKind
from siteledger.reporting.contexts import (
    ExcelReportContext,
    PdfReportContext,
    ReportExportContext,
    build_daily_expenses_context,
    build_worker_statement_context,
)
from siteledger.reporting.formatting import report_filename
from siteledger.reporting.renderers.balance import BalanceChartRenderer
from siteledger.reporting.renderers.excel import ExcelReportRenderer
from siteledger.reporting.renderers.pdf import PdfReportRenderer
from siteledger.services.ledger.models import ProjectLedgerSummary
from siteledger.services.statement.models import WorkerStatement

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("xlsx", "pdf")


class ReportExportGuard:
    """Allows one in-flight export per report key; a concurrent second request is refused."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: set[str] = set()

    @contextmanager
    def hold(self, key: str):
        with self._lock:
            if key in self._active:
                raise BusinessRuleError(
                    "This report is already being exported. Wait for it to finish.",
                    code="EXPORT_IN_PROGRESS",
                )
            self._active.add(key)
        try:
            yield key
        finally:
            with self._lock:
                self._active.discard(key)


_DEFAULT_GUARD = ReportExportGuard()


def _ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _cleanup_temp_artifact(
    path: Path | None,
    temp_dir: Path | None = None,
    *,
    remove_empty_dir: bool = True,
) -> None:
    if path:
        with suppress(FileNotFoundError, PermissionError, OSError):
            path.unlink()
    if not remove_empty_dir:
        return

    parent = temp_dir if temp_dir is not None else (path.parent if path else None)
    if parent is None:
        return
    if parent.exists():
        with suppress(FileNotFoundError, PermissionError, OSError):
            if not any(parent.iterdir()):
                parent.rmdir()


def coerce_report_kind(kind) -> ReportKind:
    if isinstance(kind, ReportKind):
        return kind
    token = str(kind or "").strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return ReportKind(token)
    except ValueError:
        raise ValidationError(f"Unknown report kind: {kind!r}.", code="UNKNOWN_REPORT_KIND") from None


def _coerce_format(fmt: str) -> str:
    token = str(fmt or "").strip().lower().lstrip(".")
    if token not in SUPPORTED_FORMATS:
        raise ValidationError(f"Unsupported export format: {fmt!r}.", code="UNSUPPORTED_FORMAT")
    return token


def build_report_context(
    kind,
    payload,
    settings: LedgerSettings,
    *,
    entity_name: str | None = None,
    context_cls: type = ReportExportContext,
    **extra,
) -> ReportExportContext:
    report_kind = coerce_report_kind(kind)
    if report_kind == ReportKind.DAILY_EXPENSES:
        if not isinstance(payload, ProjectLedgerSummary):
            raise ValidationError("Daily expenses report needs a project ledger summary.", code="INVALID_REPORT_PAYLOAD")
        return build_daily_expenses_context(
            payload, settings, project_name=entity_name, context_cls=context_cls, **extra
        )
    if not isinstance(payload, WorkerStatement):
        raise ValidationError("Worker statement report needs a worker statement.", code="INVALID_REPORT_PAYLOAD")
    ctx = build_worker_statement_context(payload, settings, context_cls=context_cls, **extra)
    if entity_name:
        ctx.entity_name = entity_name
    return ctx


def generate_balance_png(ctx: ReportExportContext, output_path: str | Path) -> Path:
    dated = [(day, balance) for day, balance in ctx.balance_points if day is not None]
    return BalanceChartRenderer().render(dated, _ensure_parent(Path(output_path)))


def generate_excel_report(
    kind,
    payload,
    output_path: str | Path,
    *,
    settings: LedgerSettings | None = None,
    entity_name: str | None = None,
) -> Path:
    settings = settings or get_settings()
    ctx = build_report_context(kind, payload, settings, entity_name=entity_name, context_cls=ExcelReportContext)
    return ExcelReportRenderer().render(ctx, _ensure_parent(Path(output_path)))


def generate_pdf_report(
    kind,
    payload,
    output_path: str | Path,
    temp_dir: str | Path | None = None,
    *,
    settings: LedgerSettings | None = None,
    entity_name: str | None = None,
) -> Path:
    settings = settings or get_settings()
    output_path = _ensure_parent(Path(output_path))
    ctx = build_report_context(
        kind,
        payload,
        settings,
        entity_name=entity_name,
        context_cls=PdfReportContext,
        font_path=(str(settings.pdf_font_path) if settings.pdf_font_path else None),
    )

    temp_dir = Path(temp_dir) if temp_dir is not None else output_path.parent / ".siteledger_charts"
    chart_path: Path | None = None
    if ctx.kind == ReportKind.DAILY_EXPENSES and len(ctx.balance_points) >= 2:
        temp_dir.mkdir(parents=True, exist_ok=True)
        chart_path = temp_dir / f"balance_{uuid.uuid4().hex[:8]}.png"
        try:
            generate_balance_png(ctx, chart_path)
            ctx.chart_png_path = str(chart_path)
        except Exception as exc:
            logger.warning("Balance chart skipped for %s: %s", ctx.entity_name, exc)
            ctx.chart_png_path = ""
    try:
        return PdfReportRenderer().render(ctx, output_path)
    finally:
        if chart_path is not None:
            _cleanup_temp_artifact(chart_path, temp_dir=temp_dir)


def export_report(
    kind,
    payload,
    output_dir: str | Path | None = None,
    fmt: str = "xlsx",
    *,
    entity_name: str | None = None,
    settings: LedgerSettings | None = None,
    guard: ReportExportGuard | None = None,
) -> Path:
    """
    Render a project or worker statement to <report-type>_<entity>_<start>_<end>.<ext>.

    The file is written under a temporary name and moved into place only
    once rendering succeeded. Raises ValidationError for an unknown kind,
    format or payload, ExportError(EMPTY_REPORT) before touching the disk
    when there is nothing to report, ExportError(RENDER_FAILED) when the
    renderer or the filesystem fails, and BusinessRuleError(EXPORT_IN_PROGRESS)
    when the same report is already being written.
    """
    settings = settings or get_settings()
    report_kind = coerce_report_kind(kind)
    fmt = _coerce_format(fmt)
    ctx = build_report_context(report_kind, payload, settings, entity_name=entity_name)
    support = get_operational_support()
    output_dir = Path(output_dir) if output_dir is not None else settings.resolved_export_dir()
    target = output_dir / report_filename(ctx.report_type, ctx.entity_name, ctx.range_start, ctx.range_end, fmt)
    event_data = {
        "report_kind": report_kind.value,
        "format": fmt,
        "entity": ctx.entity_name,
        "range_start": ctx.range_start,
        "range_end": ctx.range_end,
    }

    with bind_trace_id() as trace_id:
        if ctx.is_empty:
            logger.warning("Export refused, nothing to report: %s", target.name)
            support.emit_event(
                event_type="report.export.failed",
                level="WARNING",
                trace_id=trace_id,
                message=f"Empty report {target.name}",
                data={**event_data, "code": "EMPTY_REPORT"},
            )
            raise ExportError("There are no entries in the selected period to export.", code="EMPTY_REPORT")

        with (guard or _DEFAULT_GUARD).hold(str(target.resolve())):
            temp_path = target.with_name(f".{target.stem}.{uuid.uuid4().hex[:8]}.partial.{fmt}")
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
                if fmt == "xlsx":
                    generate_excel_report(report_kind, payload, temp_path, settings=settings, entity_name=entity_name)
                else:
                    generate_pdf_report(report_kind, payload, temp_path, settings=settings, entity_name=entity_name)
                os.replace(temp_path, target)
            except DomainError:
                _cleanup_temp_artifact(temp_path, remove_empty_dir=False)
                raise
            except Exception as exc:
                _cleanup_temp_artifact(temp_path, remove_empty_dir=False)
                logger.exception("Report export failed: %s", target.name)
                support.emit_event(
                    event_type="report.export.failed",
                    level="ERROR",
                    trace_id=trace_id,
                    message=f"Report export failed: {exc}",
                    data={**event_data, "code": "RENDER_FAILED", "exception_type": type(exc).__name__},
                )
                raise ExportError(f"Could not write report {target.name}: {exc}", code="RENDER_FAILED") from exc

        logger.info("Report exported to %s", target)
        support.emit_event(
            event_type="report.export.completed",
            trace_id=trace_id,
            message=f"Report exported: {target.name}",
            data={**event_data, "path": target},
        )
    return target


__all__ = [
    "ReportExportGuard",
    "SUPPORTED_FORMATS",
    "build_report_context",
    "coerce_report_kind",
    "export_report",
    "generate_balance_png",
    "generate_excel_report",
    "generate_pdf_report",
]
