"""Word (.docx) rendering of a :class:`ReportView` with python-docx."""

import io
from typing import Iterable, Sequence, Tuple

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt

from ..core.errors import DomainValidationError
from ..utils.formatting import format_percent, format_rupiah
from . import blocks, bundles
from .narratives import conclusion_items, numbered
from .view import LEDGER_TYPE_LABELS, SCOPE_ACTIVITY, SCOPE_LEDGER, ReportView

BODY_FONT = "Times New Roman"
USABLE_WIDTH_CM = 16.0

TABLE_OF_CONTENTS = (
    ("KATA PENGANTAR", 0),
    ("DAFTAR ISI", 0),
    ("BAB I PENDAHULUAN", 0),
    ("1.1 Latar Belakang", 1),
    ("1.2 Maksud dan Tujuan", 1),
    ("1.3 Dasar Hukum", 1),
    ("BAB II REALISASI PELAKSANAAN APBDESA", 0),
    ("2.1 Realisasi Pelaksanaan Fisik Kegiatan", 1),
    ("2.2 Realisasi Keuangan", 1),
    ("BAB III PENUTUP", 0),
    ("3.1 Kesimpulan", 1),
    ("3.2 Kendala", 1),
    ("3.3 Saran", 1),
    ("LAMPIRAN", 0),
)


def _new_document():
    doc = Document()
    section = doc.sections[0]
    section.page_width = Cm(21)
    section.page_height = Cm(29.7)
    section.left_margin = section.right_margin = Cm(2.5)
    section.top_margin = section.bottom_margin = Cm(2)
    style = doc.styles["Normal"]
    style.font.name = BODY_FONT
    style.font.size = Pt(12)
    return doc


def _save(doc) -> bytes:
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _paragraph(doc, text: str, bold: bool = False, size: float = 12, align=None, italic: bool = False, indent=None):
    paragraph = doc.add_paragraph()
    if align is not None:
        paragraph.alignment = align
    if indent is not None:
        paragraph.paragraph_format.left_indent = Cm(indent)
    run = paragraph.add_run(text)
    run.bold = bold
    run.italic = italic
    run.font.size = Pt(size)
    return paragraph


def _centered(doc, text: str, bold: bool = True, size: float = 12):
    return _paragraph(doc, text, bold=bold, size=size, align=WD_ALIGN_PARAGRAPH.CENTER)


def _body(doc, paragraphs: Iterable[str]) -> None:
    for text in paragraphs:
        _paragraph(doc, text, align=WD_ALIGN_PARAGRAPH.JUSTIFY)


def _heading(doc, text: str, size: float = 12) -> None:
    _paragraph(doc, text, bold=True, size=size)


def _shade(cell, fill: str) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), fill)
    tc_pr.append(shading)


def _set_cell(cell, text: str, bold: bool = False, size: float = 10, align=None) -> None:
    cell.text = ""
    paragraph = cell.paragraphs[0]
    if align is not None:
        paragraph.alignment = align
    run = paragraph.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)


def _letterhead(doc, view: ReportView) -> None:
    lines = blocks.letterhead_lines(view)
    for line in lines[:-1]:
        _centered(doc, line, size=14)
    _centered(doc, lines[-1], bold=False, size=10)
    _paragraph(doc, "_" * 78, align=WD_ALIGN_PARAGRAPH.CENTER, size=8)


def _cover(doc, view: ReportView, title_lines: Sequence[str]) -> None:
    for _ in range(4):
        doc.add_paragraph()
    for text, emphasised in blocks.cover_lines(view, title_lines):
        if not text:
            doc.add_paragraph()
            continue
        _centered(doc, text, bold=emphasised, size=16 if emphasised else 13)
    doc.add_page_break()


def _pairs(doc, pairs: Sequence[Tuple[str, str]]) -> None:
    table = doc.add_table(rows=0, cols=3)
    for label, value in pairs:
        cells = table.add_row().cells
        _set_cell(cells[0], label, size=11)
        _set_cell(cells[1], ":", size=11)
        _set_cell(cells[2], blocks.cell_text(value, money=True), size=11)
        cells[0].width = Cm(5)
        cells[1].width = Cm(0.5)
        cells[2].width = Cm(10.5)
    doc.add_paragraph()


def _table(doc, spec: blocks.TableSpec, with_title: bool = False) -> None:
    if with_title:
        _heading(doc, spec.title)
    scale = USABLE_WIDTH_CM / sum(spec.widths)
    table = doc.add_table(rows=1, cols=len(spec.headers))
    table.style = "Table Grid"
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    for index, header in enumerate(spec.headers):
        cell = table.rows[0].cells[index]
        _set_cell(cell, header, bold=True, align=WD_ALIGN_PARAGRAPH.CENTER)
        _shade(cell, blocks.HEADER_SHADING)
        cell.width = Cm(spec.widths[index] * scale)

    for row in spec.rows:
        cells = table.add_row().cells
        emphasised = row.kind != blocks.ROW_DATA
        for index, value in enumerate(row.cells):
            money = index in spec.money_columns
            if money:
                align = WD_ALIGN_PARAGRAPH.RIGHT
            elif index in spec.centered_columns:
                align = WD_ALIGN_PARAGRAPH.CENTER
            else:
                align = None
            _set_cell(cells[index], blocks.cell_text(value, money=money), bold=emphasised, align=align)
            cells[index].width = Cm(spec.widths[index] * scale)
            if row.kind == blocks.ROW_TOTAL:
                _shade(cells[index], blocks.HEADER_SHADING)
            elif row.kind == blocks.ROW_GROUP:
                _shade(cells[index], blocks.GROUP_SHADING)
    doc.add_paragraph()


def _signing(doc, signing: blocks.SigningBlock) -> None:
    if signing.place_date:
        _paragraph(doc, signing.place_date, align=WD_ALIGN_PARAGRAPH.RIGHT)
    table = doc.add_table(rows=1, cols=len(signing.columns))
    for cell, column in zip(table.rows[0].cells, signing.columns):
        cell.text = ""
        lines = [column.title, column.role, "", "", "", column.name]
        for position, text in enumerate(lines):
            paragraph = cell.paragraphs[0] if position == 0 else cell.add_paragraph()
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = paragraph.add_run(text)
            run.font.size = Pt(11)
            if position == len(lines) - 1:
                run.bold = True
                run.underline = True


def _words(doc, words: str) -> None:
    _paragraph(doc, blocks.words_line(words), italic=True, size=11)


def _manifest(doc, view: ReportView, title: str = "LAMPIRAN") -> None:
    spec = blocks.manifest_table(view)
    if spec is None:
        return
    _heading(doc, title)
    _table(doc, spec)


# --- Main report ---


def _foreword(doc, view: ReportView) -> None:
    _letterhead(doc, view)
    _centered(doc, "KATA PENGANTAR", size=14)
    _body(doc, view.narrative.foreword)
    _paragraph(doc, blocks.place_date(view), align=WD_ALIGN_PARAGRAPH.RIGHT)
    _paragraph(doc, f"KEPALA DESA {view.village_name.upper()}", align=WD_ALIGN_PARAGRAPH.RIGHT)
    for _ in range(3):
        doc.add_paragraph()
    _paragraph(doc, view.signers.village_head, bold=True, align=WD_ALIGN_PARAGRAPH.RIGHT)
    doc.add_page_break()

    _centered(doc, "DAFTAR ISI", size=14)
    for text, level in TABLE_OF_CONTENTS:
        _paragraph(doc, text, bold=level == 0, indent=level * 1.0 if level else None)
    doc.add_page_break()


def _chapter_one(doc, view: ReportView) -> None:
    _centered(doc, "BAB I", size=14)
    _centered(doc, "PENDAHULUAN", size=14)
    _heading(doc, "1.1 Latar Belakang")
    _body(doc, view.narrative.background)
    _heading(doc, "1.2 Maksud dan Tujuan")
    _body(doc, view.narrative.objectives)
    _heading(doc, "1.3 Dasar Hukum")
    _body(doc, view.narrative.legal_basis)
    doc.add_page_break()


def _chapter_two(doc, view: ReportView) -> None:
    _centered(doc, "BAB II", size=14)
    _centered(doc, "REALISASI PELAKSANAAN APBDESA", size=14)
    _heading(doc, "2.1 Realisasi Pelaksanaan Fisik Kegiatan")
    _body(doc, view.narrative.physical)
    _table(doc, blocks.activity_table(view))
    _words(doc, view.words["realized"])

    _heading(doc, "2.2 Realisasi Keuangan")
    _body(doc, view.narrative.financial)
    _heading(doc, "A. Pendapatan Desa")
    _table(doc, blocks.income_table(view))
    _words(doc, view.words["income"])
    _heading(doc, "B. Belanja Desa")
    _table(doc, blocks.expense_table(view))
    _words(doc, view.words["expense"])
    _heading(doc, "C. Pembiayaan Desa")
    _table(doc, blocks.financing_table(view))
    _heading(doc, "D. Ringkasan Realisasi Keuangan")
    _table(doc, blocks.year_summary_table(view))
    _words(doc, view.words["balance"])
    doc.add_page_break()


def _chapter_three(doc, view: ReportView) -> None:
    totals = view.totals
    surplus_label = "Surplus" if totals.surplus >= 0 else "Defisit"
    _centered(doc, "BAB III", size=14)
    _centered(doc, "PENUTUP", size=14)
    _heading(doc, "3.1 Kesimpulan")
    _paragraph(doc, "Berdasarkan uraian di atas, dapat disimpulkan bahwa:")
    items = conclusion_items(
        format_rupiah(totals.income),
        format_rupiah(totals.expense),
        surplus_label,
        format_rupiah(abs(totals.surplus)),
    )
    _body(doc, numbered(items))
    _heading(doc, "3.2 Kendala")
    _body(doc, view.narrative.obstacles)
    _heading(doc, "3.3 Saran")
    _body(doc, view.narrative.suggestions)
    _body(doc, view.narrative.closing)
    doc.add_paragraph()
    _signing(doc, blocks.closing_signing(view))


def _main_report(doc, view: ReportView) -> None:
    _cover(doc, view, blocks.MAIN_TITLE)
    _foreword(doc, view)
    _chapter_one(doc, view)
    _chapter_two(doc, view)
    _chapter_three(doc, view)
    if blocks.manifest_table(view) is not None:
        doc.add_page_break()
        _centered(doc, "LAMPIRAN", size=14)
        _manifest(doc, view, title="Daftar Bukti Pendukung")


# --- Scoped reports ---


def _activity_report(doc, view: ReportView) -> None:
    line = view.lines[0]
    _letterhead(doc, view)
    _centered(doc, "LAPORAN PERTANGGUNGJAWABAN KEGIATAN", size=14)
    _centered(doc, f"TAHUN ANGGARAN {view.year_label}", bold=False)
    doc.add_paragraph()
    _pairs(doc, blocks.activity_info_pairs(line, view))
    _table(doc, blocks.activity_budget_table(line), with_title=True)
    _paragraph(doc, f"Terbilang Anggaran : # {view.words['budget']} #", italic=True, size=11)
    _paragraph(doc, f"Terbilang Realisasi : # {view.words['realized']} #", italic=True, size=11)
    doc.add_paragraph()
    _manifest(doc, view, title="Lampiran Bukti")
    _signing(doc, blocks.activity_signing(view, line))


def _level_report(doc, view: ReportView) -> None:
    total = view.activity_rollup
    _letterhead(doc, view)
    _centered(doc, f"LAPORAN PERTANGGUNGJAWABAN {view.scope_label.upper()}", size=14)
    _centered(doc, f"TAHUN ANGGARAN {view.year_label}", bold=False)
    doc.add_paragraph()
    _pairs(
        doc,
        [
            ("Total Kegiatan", str(total.count)),
            ("Total Anggaran", format_rupiah(total.total_budget)),
            ("Total Realisasi", format_rupiah(total.total_realized)),
            ("Sisa Anggaran", format_rupiah(total.remaining)),
            ("Penyerapan", format_percent(total.percent_realized)),
        ],
    )
    if len(view.field_sections) > 1:
        _table(doc, blocks.field_summary_table(view), with_title=True)
    _table(doc, blocks.sub_field_summary_table(view), with_title=True)
    _table(doc, blocks.activity_table(view), with_title=True)
    _words(doc, view.words["realized"])
    _manifest(doc, view, title="Daftar Lampiran")
    _signing(doc, blocks.closing_signing(view))


def _ledger_report(doc, view: ReportView) -> None:
    _letterhead(doc, view)
    _centered(doc, "LAPORAN REALISASI KEUANGAN DESA", size=14)
    _centered(doc, f"TAHUN ANGGARAN {view.year_label}", bold=False)
    doc.add_paragraph()
    _pairs(doc, blocks.village_info_pairs(view))
    _table(doc, blocks.income_table(view), with_title=True)
    _words(doc, view.words["income"])
    _table(doc, blocks.expense_table(view), with_title=True)
    _words(doc, view.words["expense"])
    _table(doc, blocks.financing_table(view), with_title=True)
    _table(doc, blocks.year_summary_table(view), with_title=True)
    _words(doc, view.words["balance"])
    _manifest(doc, view, title="Daftar Lampiran")
    _signing(doc, blocks.closing_signing(view))


def _ledger_type_report(doc, view: ReportView) -> None:
    report = blocks.ledger_report(view)
    _letterhead(doc, view)
    _centered(doc, report.title, size=14)
    _centered(doc, report.subtitle, bold=False)
    doc.add_paragraph()
    _pairs(doc, report.info)
    _table(doc, report.table)
    _words(doc, report.words)
    _manifest(doc, view, title="Daftar Lampiran")
    _signing(doc, report.signing)


def render_document(view: ReportView) -> bytes:
    doc = _new_document()
    doc.core_properties.title = f"LPJ {view.village_name} {view.year_label}"
    doc.core_properties.author = "Sistem LPJ Desa"
    if view.scope.kind == SCOPE_ACTIVITY:
        _activity_report(doc, view)
    elif view.scope.is_level:
        _level_report(doc, view)
    elif view.scope.kind in LEDGER_TYPE_LABELS:
        _ledger_type_report(doc, view)
    elif view.scope.kind == SCOPE_LEDGER:
        _ledger_report(doc, view)
    else:
        _main_report(doc, view)
    return _save(doc)


# --- Supporting documents ---


def render_receipts(view: ReportView) -> bytes:
    """One receipt voucher (kuitansi) per page."""
    vouchers = blocks.receipt_vouchers(view)
    if not vouchers:
        raise DomainValidationError("Tidak ada data kuitansi untuk di-export", field="item_type")
    doc = _new_document()
    for position, voucher in enumerate(vouchers):
        if position:
            doc.add_page_break()
        _letterhead(doc, view)
        _centered(doc, "KUITANSI", size=16)
        _centered(doc, f"No. {voucher.number}", bold=False, size=11)
        doc.add_paragraph()
        _pairs(
            doc,
            [
                ("Sudah terima dari", f"Bendahara Desa {view.village_name}"),
                ("Uang sejumlah", format_rupiah(voucher.total)),
                ("Terbilang", voucher.words),
                ("Untuk pembayaran", voucher.description),
                ("Penerima", voucher.paid_to),
                ("Tanggal", voucher.date_text),
            ],
        )
        _table(doc, voucher.table, with_title=True)
        _words(doc, voucher.words)
        _signing(doc, voucher.signing)
    return _save(doc)


def render_worker_days(view: ReportView) -> bytes:
    """Worker-day (HOK) payment lists, one activity per page."""
    lists = blocks.worker_day_lists(view)
    if not lists:
        raise DomainValidationError("Tidak ada data HOK untuk di-export", field="item_type")
    doc = _new_document()
    for position, worker_days in enumerate(lists):
        if position:
            doc.add_page_break()
        _letterhead(doc, view)
        _centered(doc, "DAFTAR PEMBAYARAN UPAH PEKERJA (HOK)", size=14)
        _centered(doc, f"TAHUN ANGGARAN {view.year_label}", bold=False)
        doc.add_paragraph()
        _pairs(
            doc,
            [
                ("Kegiatan", worker_days.activity_name),
                ("Sub Bidang", worker_days.sub_field_name),
                ("Pelaksana", worker_days.executor),
                ("Waktu Pelaksanaan", worker_days.period),
            ],
        )
        _table(doc, worker_days.table)
        _words(doc, worker_days.words)
        _signing(doc, worker_days.signing)
    return _save(doc)


# --- Activity letter bundles ---


def _team_header(doc, view: ReportView) -> None:
    lines = bundles.team_header_lines(view)
    _centered(doc, lines[0], size=14)
    _centered(doc, lines[1], size=11)
    _centered(doc, lines[2], bold=False, size=10)
    _paragraph(doc, "_" * 78, align=WD_ALIGN_PARAGRAPH.CENTER, size=8)


def _bundle_letter(doc, view: ReportView, letter: bundles.BundleLetter) -> None:
    if letter.head == bundles.HEAD_VILLAGE:
        _letterhead(doc, view)
    elif letter.head == bundles.HEAD_TEAM:
        _team_header(doc, view)
    for position, text in enumerate(letter.title):
        _centered(doc, text, size=14 if position == 0 else 12)
    if letter.number:
        _centered(doc, f"Nomor : {letter.number}", bold=False)
    if letter.title or letter.number:
        doc.add_paragraph()
    for part in letter.parts:
        if isinstance(part, bundles.Heading):
            align = WD_ALIGN_PARAGRAPH.CENTER if part.centered else None
            _paragraph(doc, part.text, bold=True, align=align)
        elif isinstance(part, bundles.InfoPairs):
            _pairs(doc, part.pairs)
        elif isinstance(part, blocks.TableSpec):
            _table(doc, part)
        elif isinstance(part, blocks.SigningBlock):
            _signing(doc, part)
        else:
            _paragraph(doc, part, align=WD_ALIGN_PARAGRAPH.JUSTIFY)


def render_activity_bundle(view: ReportView) -> bytes:
    """Every letter of the activity's LPJ file, one letter per page."""
    bundle = bundles.activity_bundle(view)
    doc = _new_document()
    doc.core_properties.title = f"{bundle.title} - {view.scope_label}"
    doc.core_properties.author = "Sistem LPJ Desa"
    for position, letter in enumerate(bundle.letters):
        if position:
            doc.add_page_break()
        _bundle_letter(doc, view, letter)
    return _save(doc)
