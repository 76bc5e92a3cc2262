"""Printable PDF rendering of a :class:`ReportView` with reportlab platypus."""

import io
from typing import List, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..utils.formatting import format_percent, format_rupiah
from . import blocks
from .view import LEDGER_TYPE_LABELS, SCOPE_ACTIVITY, SCOPE_LEDGER, ReportView

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 2 * cm
LETTERHEAD_HEIGHT = 3.2 * cm
USABLE_WIDTH = PAGE_WIDTH - 2 * MARGIN
HEADER_COLOR = colors.HexColor(f"#{blocks.HEADER_SHADING}")
GROUP_COLOR = colors.HexColor(f"#{blocks.GROUP_SHADING}")

_styles = getSampleStyleSheet()
TITLE_STYLE = ParagraphStyle(
    "LpjTitle",
    parent=_styles["Heading1"],
    fontSize=15,
    leading=19,
    alignment=TA_CENTER,
    spaceAfter=6,
)
COVER_STYLE = ParagraphStyle("LpjCover", parent=TITLE_STYLE, fontSize=17, leading=24, spaceAfter=2)
COVER_PLAIN_STYLE = ParagraphStyle(
    "LpjCoverPlain", parent=COVER_STYLE, fontName="Helvetica", fontSize=13, leading=18
)
SECTION_STYLE = ParagraphStyle(
    "LpjSection",
    parent=_styles["Heading2"],
    fontSize=12,
    leading=15,
    spaceBefore=10,
    spaceAfter=6,
)
BODY_STYLE = ParagraphStyle("LpjBody", parent=_styles["Normal"], fontSize=10, leading=14, alignment=TA_JUSTIFY)
WORDS_STYLE = ParagraphStyle("LpjWords", parent=BODY_STYLE, fontName="Helvetica-Oblique", spaceBefore=4)
CELL_STYLE = ParagraphStyle("LpjCell", parent=_styles["Normal"], fontSize=8, leading=10)
CELL_BOLD_STYLE = ParagraphStyle("LpjCellBold", parent=CELL_STYLE, fontName="Helvetica-Bold")
CELL_RIGHT_STYLE = ParagraphStyle("LpjCellRight", parent=CELL_STYLE, alignment=TA_RIGHT)
CELL_CENTER_STYLE = ParagraphStyle("LpjCellCenter", parent=CELL_STYLE, alignment=TA_CENTER)
CELL_BOLD_RIGHT_STYLE = ParagraphStyle("LpjCellBoldRight", parent=CELL_BOLD_STYLE, alignment=TA_RIGHT)
SIGN_STYLE = ParagraphStyle("LpjSign", parent=_styles["Normal"], fontSize=10, leading=14, alignment=TA_CENTER)
PLACE_STYLE = ParagraphStyle("LpjPlace", parent=BODY_STYLE, alignment=TA_RIGHT)


def _text(value) -> str:
    return escape(str(value)) if value is not None else ""


def _letterhead_painter(view: ReportView, skip_first: bool = False):
    lines = blocks.letterhead_lines(view)

    def paint(canvas, doc) -> None:
        canvas.saveState()
        page = canvas.getPageNumber()
        if not (skip_first and page == 1):
            y = PAGE_HEIGHT - MARGIN
            for line in lines[:-1]:
                canvas.setFont("Helvetica-Bold", 12)
                canvas.drawCentredString(PAGE_WIDTH / 2, y, line)
                y -= 15
            canvas.setFont("Helvetica", 8)
            canvas.drawCentredString(PAGE_WIDTH / 2, y, lines[-1])
            y -= 6
            canvas.setLineWidth(1.5)
            canvas.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
        canvas.setFont("Helvetica", 8)
        canvas.drawRightString(PAGE_WIDTH - MARGIN, MARGIN / 2, f"Halaman {page}")
        canvas.restoreState()

    return paint


def _paragraphs(texts: Sequence[str], style=BODY_STYLE) -> List:
    return [Paragraph(_text(text), style) for text in texts]


def _words(words: str) -> Paragraph:
    return Paragraph(_text(blocks.words_line(words)), WORDS_STYLE)


def _pairs(pairs: Sequence[Tuple[str, object]]) -> Table:
    data = [
        [
            Paragraph(_text(label), CELL_BOLD_STYLE),
            ":",
            Paragraph(_text(blocks.cell_text(value, money=True)), CELL_STYLE),
        ]
        for label, value in pairs
    ]
    table = Table(data, colWidths=[4.5 * cm, 0.5 * cm, USABLE_WIDTH - 5 * cm], hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
                ("TOPPADDING", (0, 0), (-1, -1), 2),
            ]
        )
    )
    return table


def _cell(value, index: int, spec: blocks.TableSpec, emphasised: bool) -> Paragraph:
    money = index in spec.money_columns
    text = _text(blocks.cell_text(value, money=money))
    if spec.link_column == index and value:
        return Paragraph(f'<link href="{escape(str(value))}" color="#0563C1">{text}</link>', CELL_STYLE)
    if emphasised:
        style = CELL_BOLD_RIGHT_STYLE if money else CELL_BOLD_STYLE
    elif money:
        style = CELL_RIGHT_STYLE
    elif index in spec.centered_columns:
        style = CELL_CENTER_STYLE
    else:
        style = CELL_STYLE
    return Paragraph(text, style)


def _table(spec: blocks.TableSpec) -> Table:
    scale = USABLE_WIDTH / sum(spec.widths)
    data = [[Paragraph(_text(header), CELL_BOLD_STYLE) for header in spec.headers]]
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]
    for position, row in enumerate(spec.rows, start=1):
        emphasised = row.kind != blocks.ROW_DATA
        data.append([_cell(value, index, spec, emphasised) for index, value in enumerate(row.cells)])
        if row.kind == blocks.ROW_TOTAL:
            commands.append(("BACKGROUND", (0, position), (-1, position), HEADER_COLOR))
        elif row.kind == blocks.ROW_GROUP:
            commands.append(("BACKGROUND", (0, position), (-1, position), GROUP_COLOR))
            commands.append(("SPAN", (1, position), (-1, position)))
    table = Table(data, colWidths=[width * scale for width in spec.widths], repeatRows=1)
    table.setStyle(TableStyle(commands))
    return table


def _section(title: str, spec: blocks.TableSpec) -> List:
    return [Paragraph(_text(title), SECTION_STYLE), _table(spec)]


def _signing(signing: blocks.SigningBlock) -> List:
    elements: List = [Spacer(1, 0.5 * cm)]
    if signing.place_date:
        elements.append(Paragraph(_text(signing.place_date), PLACE_STYLE))
        elements.append(Spacer(1, 0.2 * cm))
    cells = []
    for column in signing.columns:
        lines = [_text(column.title), _text(column.role), "<br/><br/><br/>", f"<b><u>{_text(column.name)}</u></b>"]
        cells.append(Paragraph("<br/>".join(lines), SIGN_STYLE))
    width = USABLE_WIDTH / len(cells)
    elements.append(Table([cells], colWidths=[width] * len(cells)))
    return elements


def _manifest(view: ReportView, title: str = "DAFTAR LAMPIRAN") -> List:
    spec = blocks.manifest_table(view)
    if spec is None:
        return []
    return [Paragraph(_text(title), SECTION_STYLE), _table(spec)]


def _cover(view: ReportView) -> List:
    elements: List = [Spacer(1, 5 * cm)]
    for text, emphasised in blocks.cover_lines(view, blocks.MAIN_TITLE):
        if not text:
            elements.append(Spacer(1, 0.6 * cm))
            continue
        elements.append(Paragraph(_text(text), COVER_STYLE if emphasised else COVER_PLAIN_STYLE))
    elements.append(PageBreak())
    return elements


def _year_pages(view: ReportView) -> List:
    totals = view.totals
    elements = _cover(view)
    elements.append(Paragraph("LAPORAN REALISASI PELAKSANAAN APBDESA", TITLE_STYLE))
    elements.append(Paragraph(f"TAHUN ANGGARAN {_text(view.year_label)}", SIGN_STYLE))
    elements.append(Spacer(1, 0.4 * cm))
    elements.append(_pairs(blocks.village_info_pairs(view)))

    elements += _section("PENDAPATAN DESA", blocks.income_table(view))
    elements.append(_words(view.words["income"]))
    elements.append(PageBreak())
    elements += _section("BELANJA DESA", blocks.expense_table(view))
    elements.append(_words(view.words["expense"]))
    elements.append(PageBreak())
    elements += _section("PEMBIAYAAN DESA", blocks.financing_table(view))

    elements.append(PageBreak())
    elements += _section("PELAKSANAAN KEGIATAN", blocks.activity_table(view))
    elements.append(_words(view.words["realized"]))
    elements += _section("REALISASI PER BIDANG", blocks.field_summary_table(view))
    elements += _manifest(view)

    elements.append(PageBreak())
    elements.append(Paragraph("PENUTUP", SECTION_STYLE))
    elements.append(_table(blocks.year_summary_table(view)))
    elements.append(_words(view.words["balance"]))
    elements.append(Spacer(1, 0.3 * cm))
    elements.append(
        Paragraph(
            _text(
                f"Total Pendapatan {format_rupiah(totals.income)}, Total Belanja {format_rupiah(totals.expense)}, "
                f"Sisa Lebih Pembiayaan Anggaran {format_rupiah(totals.remaining_balance)}."
            ),
            BODY_STYLE,
        )
    )
    elements += _paragraphs(view.narrative.closing)
    elements += _signing(blocks.closing_signing(view))
    return elements


def _activity_pages(view: ReportView) -> List:
    line = view.lines[0]
    elements: List = [
        Paragraph("LAPORAN PERTANGGUNGJAWABAN KEGIATAN", TITLE_STYLE),
        Paragraph(f"TAHUN ANGGARAN {_text(view.year_label)}", SIGN_STYLE),
        Spacer(1, 0.4 * cm),
        _pairs(blocks.activity_info_pairs(line, view)),
    ]
    elements += _section("RINCIAN ANGGARAN", blocks.activity_budget_table(line))
    elements.append(Paragraph(_text(f"Terbilang Anggaran : # {view.words['budget']} #"), WORDS_STYLE))
    elements.append(Paragraph(_text(f"Terbilang Realisasi : # {view.words['realized']} #"), WORDS_STYLE))
    elements += _manifest(view, title="LAMPIRAN BUKTI")
    elements += _signing(blocks.activity_signing(view, line))
    return elements


def _level_pages(view: ReportView) -> List:
    total = view.activity_rollup
    elements: List = [
        Paragraph(f"LAPORAN PERTANGGUNGJAWABAN {_text(view.scope_label.upper())}", TITLE_STYLE),
        Paragraph(f"TAHUN ANGGARAN {_text(view.year_label)}", SIGN_STYLE),
        Spacer(1, 0.4 * cm),
        _pairs(
            [
                ("Total Kegiatan", str(total.count)),
                ("Total Anggaran", total.total_budget),
                ("Total Realisasi", total.total_realized),
                ("Sisa Anggaran", total.remaining),
                ("Penyerapan", format_percent(total.percent_realized)),
            ]
        ),
    ]
    if len(view.field_sections) > 1:
        elements += _section("REALISASI PER BIDANG", blocks.field_summary_table(view))
    elements += _section("RINCIAN PER SUB BIDANG", blocks.sub_field_summary_table(view))
    elements += _section("PELAKSANAAN KEGIATAN", blocks.activity_table(view))
    elements.append(_words(view.words["realized"]))
    elements += _manifest(view)
    elements += _signing(blocks.closing_signing(view))
    return elements


def _ledger_pages(view: ReportView) -> List:
    elements: List = [
        Paragraph("LAPORAN REALISASI KEUANGAN DESA", TITLE_STYLE),
        Paragraph(f"TAHUN ANGGARAN {_text(view.year_label)}", SIGN_STYLE),
        Spacer(1, 0.4 * cm),
        _pairs(blocks.village_info_pairs(view)),
    ]
    elements += _section("PENDAPATAN DESA", blocks.income_table(view))
    elements.append(_words(view.words["income"]))
    elements += _section("BELANJA DESA", blocks.expense_table(view))
    elements.append(_words(view.words["expense"]))
    elements += _section("PEMBIAYAAN DESA", blocks.financing_table(view))
    elements += _section("RINGKASAN", blocks.year_summary_table(view))
    elements.append(_words(view.words["balance"]))
    elements += _manifest(view)
    elements += _signing(blocks.closing_signing(view))
    return elements


def _ledger_type_pages(view: ReportView) -> List:
    report = blocks.ledger_report(view)
    elements: List = [
        Paragraph(_text(report.title), TITLE_STYLE),
        Paragraph(_text(report.subtitle), SIGN_STYLE),
        Spacer(1, 0.4 * cm),
        _pairs(report.info),
    ]
    elements += _section(report.table.title, report.table)
    elements.append(_words(report.words))
    elements += _manifest(view)
    elements += _signing(report.signing)
    return elements


def render_pdf(view: ReportView) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN + LETTERHEAD_HEIGHT,
        bottomMargin=MARGIN,
        title=f"LPJ {view.village_name} {view.year_label}",
        author="Sistem LPJ Desa",
    )
    if view.scope.kind == SCOPE_ACTIVITY:
        elements, skip_first = _activity_pages(view), False
    elif view.scope.is_level:
        elements, skip_first = _level_pages(view), False
    elif view.scope.kind in LEDGER_TYPE_LABELS:
        elements, skip_first = _ledger_type_pages(view), False
    elif view.scope.kind == SCOPE_LEDGER:
        elements, skip_first = _ledger_pages(view), False
    else:
        elements, skip_first = _year_pages(view), True

    painter = _letterhead_painter(view, skip_first=skip_first)
    doc.build(elements, onFirstPage=painter, onLaterPages=painter)
    return buffer.getvalue()
