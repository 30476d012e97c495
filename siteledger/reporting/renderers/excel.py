from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from siteledger.reporting.contexts import DATE, MONEY, NUMBER, PERCENT, ExcelReportContext, ReportTable
from siteledger.reporting.formatting import fmt_date


class ExcelReportRenderer:
    def render(self, ctx: ExcelReportContext, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb = Workbook()
        if ctx.generator:
            wb.properties.creator = ctx.generator

        header_font = Font(bold=True, color="FFFFFF")
        title_font = Font(bold=True, size=16)
        subtitle_font = Font(bold=True, size=13)
        bold = Font(bold=True)
        center = Alignment(horizontal="center", vertical="center")
        thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        header_fill = PatternFill("solid", fgColor="1F4E78")
        totals_fill = PatternFill("solid", fgColor="FFE699")
        summary_fill = PatternFill("solid", fgColor="DDEBF7")

        columns = ctx.table.columns
        last_col = get_column_letter(len(columns))

        ws = wb.active
        ws.title = ctx.title[:31]
        ws.sheet_view.rightToLeft = True

        def write_cell(row_index: int, col_index: int, value, kind: str):
            cell = ws.cell(row=row_index, column=col_index)
            if kind == DATE and isinstance(value, date):
                cell.value = fmt_date(value, ctx.date_format)
            elif kind == MONEY and isinstance(value, (int, float)):
                cell.value = float(value)
                cell.number_format = ctx.money_number_format
            elif kind == PERCENT and isinstance(value, (int, float)):
                cell.value = float(value)
                cell.number_format = "0.0%"
            else:
                cell.value = value
            cell.border = thin_border
            cell.alignment = center
            return cell

        # ---------------- Header block ----------------
        row = 1
        for text, font in (
            (ctx.company_name, title_font),
            (ctx.title, subtitle_font),
            (ctx.period_label, bold),
        ):
            ws.merge_cells(f"A{row}:{last_col}{row}")
            ws[f"A{row}"] = text
            ws[f"A{row}"].font = font
            ws[f"A{row}"].alignment = center
            row += 1

        for label, value in ctx.header_lines:
            ws[f"A{row}"] = label
            ws[f"A{row}"].font = bold
            ws[f"B{row}"] = value
            row += 1
        row += 1

        def write_table(row: int, table: ReportTable) -> int:
            for col_index, column in enumerate(table.columns, start=1):
                cell = ws.cell(row=row, column=col_index, value=column.title)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = center
                cell.border = thin_border
            row += 1

            for values in table.rows:
                for col_index, (column, value) in enumerate(zip(table.columns, values), start=1):
                    write_cell(row, col_index, value, column.kind)
                row += 1

            for col_index, (column, value) in enumerate(zip(table.columns, table.totals), start=1):
                cell = write_cell(row, col_index, value, column.kind)
                cell.font = bold
                cell.fill = totals_fill
            return row + 2

        # ---------------- Data table ----------------
        row = write_table(row, ctx.table)

        # ---------------- Sections ----------------
        for section in ctx.sections:
            ws[f"A{row}"] = section.title
            ws[f"A{row}"].font = subtitle_font
            row = write_table(row + 1, section)

        # ---------------- Summary ----------------
        ws[f"A{row}"] = "الملخص"
        ws[f"A{row}"].font = subtitle_font
        row += 1
        for item in ctx.summary:
            label_cell = ws.cell(row=row, column=1, value=item.label)
            label_cell.font = bold
            label_cell.fill = summary_fill
            label_cell.border = thin_border
            value_cell = write_cell(row, 2, item.value, item.kind if item.kind != NUMBER else "")
            value_cell.font = bold
            row += 1

        for col_index, column in enumerate(columns, start=1):
            ws.column_dimensions[get_column_letter(col_index)].width = column.width
        # Summary labels sit in the first column
        ws.column_dimensions["A"].width = max(columns[0].width, 28)

        wb.save(output_path)
        return output_path
