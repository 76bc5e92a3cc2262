import io
from decimal import Decimal
from typing import Iterable, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..utils.formatting import format_percent
from . import blocks
from .view import LEDGER_TYPE_LABELS, SCOPE_ACTIVITY, SCOPE_LEDGER, ReportView

HEADER_FILL = PatternFill(start_color=blocks.HEADER_SHADING, end_color=blocks.HEADER_SHADING, fill_type="solid")
GROUP_FILL = PatternFill(start_color=blocks.GROUP_SHADING, end_color=blocks.GROUP_SHADING, fill_type="solid")
HEADER_FONT = Font(bold=True, size=11)
TITLE_FONT = Font(bold=True, size=13)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
MONEY_FORMAT = "#,##0"


def _auto_width(ws) -> None:
    """Size columns to their content, capped at 60 characters."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                max_len = max(max_len, min(len(str(cell.value)), 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 10)


def _write_pairs(ws, row: int, pairs: Iterable[Tuple[str, object]], title: str = "") -> int:
    if title:
        ws.cell(row=row, column=1, value=title).font = TITLE_FONT
        row += 2
    for label, value in pairs:
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        cell = ws.cell(row=row, column=2, value=value)
        if isinstance(value, Decimal):
            cell.number_format = MONEY_FORMAT
        row += 1
    return row + 1


def _write_table(ws, row: int, spec: blocks.TableSpec, with_title: bool = True) -> int:
    """Write ``spec`` starting at ``row``; return the first free row after it."""
    if with_title:
        ws.cell(row=row, column=1, value=spec.title).font = TITLE_FONT
        row += 1
    for col, header in enumerate(spec.headers, 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    row += 1
    for table_row in spec.rows:
        for col, value in enumerate(table_row.cells, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = THIN_BORDER
            if (col - 1) in spec.money_columns and isinstance(value, Decimal):
                cell.number_format = MONEY_FORMAT
                cell.alignment = Alignment(horizontal="right")
            elif (col - 1) in spec.centered_columns:
                cell.alignment = Alignment(horizontal="center")
            if spec.link_column is not None and (col - 1) == spec.link_column and value:
                cell.hyperlink = str(value)
                cell.font = Font(color="0563C1", underline="single")
            if table_row.kind == blocks.ROW_TOTAL:
                cell.fill = HEADER_FILL
                cell.font = Font(bold=True)
            elif table_row.kind == blocks.ROW_GROUP:
                cell.fill = GROUP_FILL
                cell.font = Font(bold=True)
        row += 1
    return row + 1


def _ledger_sheets(wb: Workbook, view: ReportView) -> None:
    ws = wb.create_sheet("Informasi Desa")
    _write_pairs(ws, 1, blocks.village_info_pairs(view), title="INFORMASI DESA")
    _auto_width(ws)

    for title, spec in (
        ("Pendapatan", blocks.income_table(view)),
        ("Belanja", blocks.expense_table(view)),
        ("Pembiayaan", blocks.financing_table(view)),
    ):
        ws = wb.create_sheet(title)
        _write_table(ws, 1, spec)
        ws.freeze_panes = "A3"
        _auto_width(ws)


def _ledger_type_workbook(wb: Workbook, view: ReportView) -> None:
    report = blocks.ledger_report(view)
    ws = wb.create_sheet(report.label)
    ws.cell(row=1, column=1, value=report.title).font = TITLE_FONT
    ws.cell(row=2, column=1, value=report.subtitle)
    row = _write_pairs(ws, 4, report.info)
    row = _write_table(ws, row, report.table)
    _write_pairs(ws, row, [(f"Terbilang Total {report.label}", report.words)])
    _auto_width(ws)
    _manifest_sheet(wb, view)


def _year_summary(ws, row: int, view: ReportView) -> int:
    row = _write_table(ws, row, blocks.year_summary_table(view))
    return _write_pairs(
        ws,
        row,
        [
            ("Terbilang Pendapatan", view.words["income"]),
            ("Terbilang Belanja", view.words["expense"]),
            ("Terbilang SiLPA", view.words["balance"]),
        ],
    )


def _manifest_sheet(wb: Workbook, view: ReportView, title: str = "Daftar Lampiran") -> None:
    spec = blocks.manifest_table(view)
    if spec is None:
        return
    ws = wb.create_sheet(title)
    _write_table(ws, 1, spec)
    _auto_width(ws)


def _activity_workbook(wb: Workbook, view: ReportView) -> None:
    line = view.lines[0]
    ws = wb.create_sheet("LPJ Kegiatan")
    ws.cell(row=1, column=1, value="LAPORAN PERTANGGUNGJAWABAN KEGIATAN").font = TITLE_FONT
    ws.cell(row=2, column=1, value=f"Tahun Anggaran {view.year_label}")
    row = _write_pairs(ws, 4, blocks.activity_info_pairs(line, view))
    row = _write_table(ws, row, blocks.activity_budget_table(line), with_title=False)
    row = _write_pairs(
        ws,
        row,
        [
            ("Terbilang Anggaran", view.words["budget"]),
            ("Terbilang Realisasi", view.words["realized"]),
        ],
    )
    _write_pairs(ws, row, blocks.village_info_pairs(view), title="INFORMASI DESA")
    _auto_width(ws)
    _manifest_sheet(wb, view, title="Lampiran Bukti")


def _level_workbook(wb: Workbook, view: ReportView) -> None:
    total = view.activity_rollup
    ws = wb.create_sheet("Ringkasan")
    ws.cell(row=1, column=1, value=f"LAPORAN PERTANGGUNGJAWABAN {view.scope_label.upper()}").font = TITLE_FONT
    ws.cell(row=2, column=1, value=f"Desa {view.village_name} - Tahun Anggaran {view.year_label}")
    row = _write_pairs(
        ws,
        4,
        [
            ("Total Kegiatan", total.count),
            ("Total Anggaran", total.total_budget),
            ("Total Realisasi", total.total_realized),
            ("Sisa Anggaran", total.remaining),
            ("Penyerapan", format_percent(total.percent_realized)),
            ("Terbilang Realisasi", view.words["realized"]),
        ],
    )
    if len(view.field_sections) > 1:
        row = _write_table(ws, row, blocks.field_summary_table(view))
    _write_table(ws, row, blocks.sub_field_summary_table(view))
    _auto_width(ws)

    ws = wb.create_sheet("Kegiatan")
    _write_table(ws, 1, blocks.activity_table(view))
    _auto_width(ws)
    _manifest_sheet(wb, view)


def _year_workbook(wb: Workbook, view: ReportView) -> None:
    _ledger_sheets(wb, view)

    ws = wb.create_sheet("Kegiatan")
    _write_table(ws, 1, blocks.activity_table(view))
    ws.freeze_panes = "A3"
    _auto_width(ws)

    ws = wb.create_sheet("Laporan Realisasi")
    ws.cell(row=1, column=1, value=f"LAPORAN REALISASI APBDESA {view.village_name.upper()}").font = TITLE_FONT
    ws.cell(row=2, column=1, value=f"Tahun Anggaran {view.year_label}")
    row = _write_table(ws, 4, blocks.field_summary_table(view))
    row = _write_pairs(ws, row, [("Terbilang Realisasi", view.words["realized"])])
    _year_summary(ws, row, view)
    _auto_width(ws)

    _manifest_sheet(wb, view)


def render_workbook(view: ReportView) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    wb.properties.creator = "Sistem LPJ Desa"
    wb.properties.title = f"LPJ {view.village_name} {view.year_label}"
    if view.scope.kind == SCOPE_ACTIVITY:
        _activity_workbook(wb, view)
    elif view.scope.is_level:
        _level_workbook(wb, view)
    elif view.scope.kind in LEDGER_TYPE_LABELS:
        _ledger_type_workbook(wb, view)
    elif view.scope.kind == SCOPE_LEDGER:
        _ledger_sheets(wb, view)
        ws = wb.create_sheet("Ringkasan Keuangan")
        _year_summary(ws, 1, view)
        _auto_width(ws)
        _manifest_sheet(wb, view)
    else:
        _year_workbook(wb, view)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
