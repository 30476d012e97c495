from datetime import date
from pathlib import Path

import arabic_reshaper
import matplotlib
from bidi import get_display
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from siteledger.exceptions import ExportError
from siteledger.reporting.contexts import DATE, MONEY, NUMBER, PERCENT, PdfReportContext, ReportTable
from siteledger.reporting.formatting import fmt_date, fmt_money, fmt_percent


def bundled_font_files() -> tuple[Path, Path]:
    """DejaVu Sans ships with matplotlib and carries the Arabic presentation forms."""
    font_dir = Path(matplotlib.get_data_path()) / "fonts" / "ttf"
    return font_dir / "DejaVuSans.ttf", font_dir / "DejaVuSans-Bold.ttf"


def resolve_font_files(font_path: str | None) -> tuple[Path, Path]:
    if not font_path:
        return bundled_font_files()
    path = Path(font_path)
    if not path.is_file():
        raise ExportError(f"PDF font file not found: {path}", code="PDF_FONT_MISSING")
    return path, path


def _register(path: Path) -> str:
    name = f"SiteLedger-{path.stem}"
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, str(path)))
    return name


def shape_text(value: str) -> str:
    """Join Arabic letters and put the string in visual order for a left-to-right canvas."""
    if not value:
        return value
    return get_display(arabic_reshaper.reshape(value))


def _rtl(row: list) -> list:
    return list(reversed(row))


class PdfReportRenderer:
    def render(self, ctx: PdfReportContext, output_path: Path) -> Path:
        regular_path, bold_path = resolve_font_files(ctx.font_path)
        font = _register(regular_path)
        bold_font = _register(bold_path)
        doc = SimpleDocTemplate(
            str(output_path),
            pagesize=landscape(A4),
            leftMargin=40,
            rightMargin=40,
            topMargin=40,
            bottomMargin=40,
            title=ctx.title,
            author=ctx.company_name,
            creator=ctx.generator,
        )

        styles = getSampleStyleSheet()
        for name in ("Title", "Heading2", "Normal"):
            styles[name].fontName = bold_font if name != "Normal" else font
            styles[name].alignment = TA_CENTER if name == "Title" else TA_RIGHT
        story = []

        def para(text: str, style: str) -> Paragraph:
            return Paragraph(shape_text(text), styles[style])

        def fmt(value, kind: str) -> str:
            if value is None:
                return ""
            if kind == DATE and isinstance(value, date):
                return fmt_date(value, ctx.date_format)
            if kind == MONEY and isinstance(value, (int, float)):
                return shape_text(fmt_money(value, ctx.currency_suffix))
            if kind == PERCENT and isinstance(value, (int, float)):
                return fmt_percent(value)
            if kind == NUMBER and isinstance(value, (int, float)):
                return f"{value:,}"
            return shape_text(str(value))

        def build_table(table: ReportTable, widths: list[float]) -> Table:
            # Columns run right to left, so the first column sits at the right edge.
            data = [_rtl([shape_text(column.title) for column in table.columns])]
            for values in table.rows:
                data.append(_rtl([fmt(value, column.kind) for column, value in zip(table.columns, values)]))
            data.append(_rtl([fmt(value, column.kind) for column, value in zip(table.columns, table.totals)]))

            out = Table(data, colWidths=_rtl(widths), repeatRows=1)
            out.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1F4E78")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, -1), font),
                ("FONTNAME", (0, 0), (-1, 0), bold_font),
                ("FONTNAME", (0, -1), (-1, -1), bold_font),
                ("BACKGROUND", (0, -1), (-1, -1), colors.HexColor("#FFE699")),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]))
            return out

        def proportional_widths(table: ReportTable) -> list[float]:
            total_units = sum(column.width for column in table.columns) or 1
            return [doc.width * column.width / total_units for column in table.columns]

        # ---------------- Header ----------------
        story.append(para(ctx.company_name, "Title"))
        story.append(para(ctx.title, "Heading2"))
        story.append(para(ctx.period_label, "Normal"))
        for label, value in ctx.header_lines:
            story.append(para(f"{label}: {value}", "Normal"))
        story.append(Spacer(1, 12))

        # ---------------- Data table ----------------
        story.append(build_table(ctx.table, proportional_widths(ctx.table)))
        story.append(Spacer(1, 16))

        # ---------------- Sections ----------------
        for section in ctx.sections:
            story.append(para(section.title, "Heading2"))
            story.append(build_table(section, proportional_widths(section)))
            story.append(Spacer(1, 16))

        # ---------------- Summary ----------------
        story.append(para("الملخص", "Heading2"))
        summary_data = [[fmt(item.value, item.kind), shape_text(item.label)] for item in ctx.summary]
        summary_table = Table(summary_data, colWidths=[160, 220], hAlign="RIGHT")
        summary_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, -1), font),
            ("FONTNAME", (1, 0), (1, -1), bold_font),
            ("BACKGROUND", (1, 0), (1, -1), colors.HexColor("#DDEBF7")),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
        ]))
        story.append(summary_table)

        # ---------------- Balance chart ----------------
        if ctx.chart_png_path:
            story.append(Spacer(1, 16))
            story.append(para("تطور الرصيد", "Heading2"))
            img = Image(ctx.chart_png_path)
            img._restrictSize(720, 260)
            story.append(img)

        doc.build(story)
        return output_path
