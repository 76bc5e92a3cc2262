import io
from datetime import date
from decimal import Decimal

import pdfplumber
import pytest
from docx import Document
from openpyxl import load_workbook

from lpjdesa.core.errors import DomainValidationError, ExportBlockedError, NotFoundError
from lpjdesa.documents import blocks, bundles
from lpjdesa.documents.view import UNCLASSIFIED_FIELD, ReportScope, build_report_view
from lpjdesa.schemas.schemas import AttachmentCreate, ExpenseItemCreate, SubFieldRead
from lpjdesa.services import documents, ledger
from lpjdesa.services.attachments import attach_link

TODAY = date(2026, 12, 20)


def _xlsx_values(content: bytes) -> list:
    workbook = load_workbook(io.BytesIO(content))
    return [
        str(cell.value)
        for sheet in workbook.worksheets
        for row in sheet.iter_rows()
        for cell in row
        if cell.value is not None
    ]


def _docx_text(content: bytes) -> str:
    document = Document(io.BytesIO(content))
    parts = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            parts.extend(cell.text for cell in row.cells)
    return "\n".join(parts)


def _pdf_text(content: bytes) -> str:
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


@pytest.fixture
def reportable(records, workspace, profile, create_activity, sub_field_id):
    """One activity at 60% realization plus a small ledger."""
    activity = create_activity(
        name="Jalan Desa",
        budget="10000000",
        realized="6000000",
        account_code="2.1.01",
        sub_field=sub_field_id("Pembangunan Desa", "Pekerjaan Umum & Penataan Ruang"),
        start_date=date(2026, 4, 1),
        end_date=date(2026, 4, 30),
    )
    ledger.create_entry(workspace, records, "incomes", {"account_code": "4.2.1", "source": "Dana Desa", "amount": "9000000"})
    expense = ledger.create_entry(
        workspace,
        records,
        "expenses",
        {"account_code": "5.3.1", "description": "Belanja Material", "amount": "6000000", "recipient": "TB Maju"},
    )
    return activity, expense


def _export(workspace, records, fmt, **kwargs):
    return documents.export_document(workspace, records, fmt, locale="en", today=TODAY, **kwargs)


def test_three_formats_agree_on_figures_and_words(records, workspace, reportable):
    xlsx = _export(workspace, records, "xlsx")
    docx = _export(workspace, records, "docx")
    pdf = _export(workspace, records, "pdf")

    assert xlsx.filename == "LPJ_Sukamaju_2026.xlsx"
    assert docx.filename == "LPJ_Sukamaju_2026.docx"
    assert pdf.filename == "LPJ_APBDesa_Sukamaju_2026.pdf"
    assert pdf.content.startswith(b"%PDF")

    xlsx_values = _xlsx_values(xlsx.content)
    docx_text = _docx_text(docx.content)
    pdf_text = _pdf_text(pdf.content)

    assert "60.0%" in xlsx_values
    assert "Six Million Rupiah" in xlsx_values
    assert "Jalan Desa" in xlsx_values

    assert "60.0%" in docx_text
    assert "Terbilang : # Six Million Rupiah #" in docx_text
    assert "Jalan Desa" in docx_text

    assert "60.0%" in pdf_text
    assert "Six Million Rupiah" in pdf_text
    assert "Jalan Desa" in pdf_text


def test_indonesian_words_by_default(records, workspace, reportable):
    view = documents.prepare_view(workspace, records, today=TODAY)
    assert view.locale == "id"
    assert view.words["realized"] == "Enam Juta Rupiah"
    assert view.words["income"] == "Sembilan Juta Rupiah"
    assert view.totals.surplus == Decimal("3000000.00")


def test_export_blocked_without_activities(records, workspace, profile):
    with pytest.raises(ExportBlockedError):
        _export(workspace, records, "xlsx")
    # The ledger book only needs the village name.
    ledger_book = _export(workspace, records, "pdf", scope=ReportScope(kind="ledger"))
    assert ledger_book.filename == "LPJ_Buku_Kas_Sukamaju_2026.pdf"


def test_unknown_format_rejected(records, workspace, reportable):
    with pytest.raises(DomainValidationError):
        _export(workspace, records, "odt")


def test_activity_and_level_scopes(records, workspace, reportable):
    activity, _ = reportable

    single = _export(workspace, records, "docx", scope=ReportScope(kind="activity", activity_id=activity.id))
    assert single.filename == "LPJ_Kegiatan_Jalan_Desa_2026.docx"
    text = _docx_text(single.content)
    assert "LAPORAN PERTANGGUNGJAWABAN KEGIATAN" in text
    assert "29 Hari Kalender" in text

    by_field = _export(workspace, records, "xlsx", scope=ReportScope(kind="field", field_name="Pembangunan Desa"))
    assert by_field.filename == "LPJ_Pembangunan_Desa_Sukamaju_2026.xlsx"
    assert "60.0%" in _xlsx_values(by_field.content)

    with pytest.raises(DomainValidationError):
        _export(workspace, records, "pdf", scope=ReportScope(kind="activity"))


def test_manifest_links_render_in_every_format(records, workspace, reportable):
    activity, _ = reportable
    attach_link(
        workspace,
        records,
        AttachmentCreate(
            entity_type="activity",
            entity_id=activity.id,
            file_name="foto_0persen.jpg",
            file_url="https://files.example.org/foto_0persen.jpg",
        ),
    )
    workbook = load_workbook(io.BytesIO(_export(workspace, records, "xlsx").content))
    sheet = workbook["Daftar Lampiran"]
    link_cells = [cell for row in sheet.iter_rows() for cell in row if cell.hyperlink is not None]
    assert [cell.hyperlink.target for cell in link_cells] == ["https://files.example.org/foto_0persen.jpg"]

    assert "foto_0persen.jpg" in _docx_text(_export(workspace, records, "docx").content)
    assert "foto_0persen.jpg" in _pdf_text(_export(workspace, records, "pdf").content)


def test_receipts_are_numbered_per_expense(records, workspace, reportable):
    _, expense = reportable
    second = ledger.create_entry(workspace, records, "expenses", {"description": "Belanja ATK", "amount": "250000"})
    ledger.add_expense_item(
        workspace,
        records,
        expense.id,
        ExpenseItemCreate(
            description="Semen", quantity=Decimal("80"), unit="sak", unit_price=Decimal("75000"), item_date=date(2026, 4, 3)
        ),
    )
    ledger.add_expense_item(
        workspace,
        records,
        second.id,
        ExpenseItemCreate(description="Kertas", unit="rim", unit_price=Decimal("250000"), item_date=date(2026, 5, 9)),
    )

    bundle = documents.export_receipts(workspace, records, locale="en", today=TODAY)

    assert bundle.filename == "Kuitansi_SPJ_Sukamaju_2026.docx"
    text = _docx_text(bundle.content)
    assert "No. KWT/0001/IV/2026" in text
    assert "No. KWT/0002/V/2026" in text
    assert "Terbilang : # Six Million Rupiah #" in text
    assert "Terbilang : # Two Hundred Fifty Thousand Rupiah #" in text


def test_supporting_bundles_need_items(records, workspace, reportable):
    with pytest.raises(DomainValidationError):
        documents.export_receipts(workspace, records)
    with pytest.raises(DomainValidationError):
        documents.export_worker_days(workspace, records)


def test_worker_days_grouped_by_activity(records, workspace, reportable):
    activity, expense = reportable
    for worker in ("Asep", "Dedi"):
        ledger.add_expense_item(
            workspace,
            records,
            expense.id,
            ExpenseItemCreate(
                item_type="worker_day",
                activity_id=activity.id,
                paid_to=worker,
                national_id="3201000000000001",
                quantity=Decimal("5"),
                unit_price=Decimal("100000"),
            ),
        )

    view = documents.prepare_view(workspace, records, locale="en", today=TODAY)
    lists = blocks.worker_day_lists(view)
    assert len(lists) == 1
    assert lists[0].activity_name == "Jalan Desa"
    assert lists[0].total == Decimal("1000000.00")
    assert lists[0].words == "One Million Rupiah"

    bundle = documents.export_worker_days(workspace, records, today=TODAY)
    assert bundle.filename == "Daftar_HOK_Sukamaju_2026.docx"
    text = _docx_text(bundle.content)
    assert "Asep" in text and "Dedi" in text
    assert "Terbilang : # Satu Juta Rupiah #" in text


def test_write_document(tmp_path, records, workspace, reportable):
    document = _export(workspace, records, "xlsx")
    path = documents.write_document(document, str(tmp_path))
    assert path.name == document.filename
    assert path.read_bytes() == document.content


def test_view_orders_lines_by_account_code(records, workspace, profile, create_activity):
    create_activity(name="Ketiga", account_code="2.1.10", realized="1")
    create_activity(name="Pertama", account_code="2.1.2", realized="1")
    create_activity(name="Kedua", account_code="2.1.3", realized="1")
    view = build_report_view(workspace.snapshot(), profile, today=TODAY)
    assert [line.activity.name for line in view.lines] == ["Pertama", "Kedua", "Ketiga"]
    table = blocks.activity_table(view)
    assert [row.cells[2] for row in table.rows if row.kind == blocks.ROW_DATA] == ["Pertama", "Kedua", "Ketiga"]


def test_activities_outside_the_catalog_get_their_own_group(records, workspace, profile, create_activity):
    base = create_activity(name="Sekolah", budget="4000000", realized="1000000")
    store = workspace.snapshot()
    legacy = SubFieldRead(id=9001, fiscal_year=2026, field_name="Bidang Lama", name="Sisa Program Lama")
    store = store.replace(
        tree=store.tree.with_sub_field(legacy),
        activities=store.activities
        + (
            base.model_copy(update={"id": 9101, "name": "Program Lama", "sub_field_id": legacy.id}),
            base.model_copy(update={"id": 9102, "name": "Yatim", "sub_field_id": 424242}),
        ),
    )

    view = build_report_view(store, profile, today=TODAY)

    assert view.activity_rollup.total_budget == Decimal("12000000.00")
    assert sum(section.rollup.total_budget for section in view.field_sections) == view.activity_rollup.total_budget
    unclassified = view.field_sections[-1]
    assert unclassified.field.name == UNCLASSIFIED_FIELD.name
    assert [sub.sub_field.name for sub in unclassified.sub_sections] == ["Sisa Program Lama", "Sub bidang #424242"]
    assert {line.activity.name for line in unclassified.lines} == {"Program Lama", "Yatim"}


def _pdf_pages(content: bytes) -> list:
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        return [page.extract_text() or "" for page in pdf.pages]


def _page_of(pages: list, text: str) -> int:
    return next(index for index, page in enumerate(pages) if text in page)


def test_year_book_has_letterhead_and_one_page_per_ledger(records, workspace, reportable):
    ledger.create_entry(
        workspace,
        records,
        "financings",
        {"description": "SiLPA Tahun Lalu", "category": "Penerimaan Pembiayaan", "amount": "500000"},
    )
    docx_text = _docx_text(_export(workspace, records, "docx").content)
    assert "PEMERINTAH KABUPATEN BOGOR" in docx_text
    assert docx_text.index("PEMERINTAH KABUPATEN BOGOR") < docx_text.index("KATA PENGANTAR")

    pages = _pdf_pages(_export(workspace, records, "pdf").content)
    income_page = _page_of(pages, "TOTAL PENDAPATAN")
    expense_page = _page_of(pages, "TOTAL BELANJA")
    financing_page = _page_of(pages, "NETTO PEMBIAYAAN")
    assert income_page < expense_page < financing_page


@pytest.fixture
def income_book(records, workspace, profile):
    """Ledger entries only, no activities."""
    ledger.create_entry(
        workspace,
        records,
        "incomes",
        {"account_code": "4.2.1", "source": "Dana Desa", "amount": "9000000", "received_on": date(2026, 3, 2)},
    )
    ledger.create_entry(
        workspace,
        records,
        "incomes",
        {"account_code": "4.1.1", "source": "Hasil Usaha Desa", "amount": "1000000", "description": "BUMDes"},
    )
    ledger.create_entry(
        workspace,
        records,
        "expenses",
        {"account_code": "5.3.1", "description": "Belanja Material", "amount": "6000000", "recipient": "TB Maju"},
    )


def test_single_ledger_reports_in_every_format(records, workspace, income_book):
    scope = ReportScope(kind="income")
    xlsx = _export(workspace, records, "xlsx", scope=scope)
    docx = _export(workspace, records, "docx", scope=scope)
    pdf = _export(workspace, records, "pdf", scope=scope)

    assert xlsx.filename == "Laporan_Pendapatan_Sukamaju_2026.xlsx"
    assert docx.filename == "Laporan_Pendapatan_Sukamaju_2026.docx"
    assert pdf.filename == "Laporan_Pendapatan_Sukamaju_2026.pdf"

    assert "Ten Million Rupiah" in _xlsx_values(xlsx.content)
    assert "Pendapatan" in load_workbook(io.BytesIO(xlsx.content)).sheetnames

    text = _docx_text(docx.content)
    assert "LAPORAN PENDAPATAN DESA" in text
    assert "BENDAHARA DESA" in text
    assert text.index("Hasil Usaha Desa") < text.index("Dana Desa")
    assert "Belanja Material" not in text

    pdf_text = _pdf_text(pdf.content)
    assert "LAPORAN PENDAPATAN DESA" in pdf_text
    assert "Ten Million Rupiah" in pdf_text


def test_expense_report_lists_recipients(records, workspace, income_book):
    docx = _export(workspace, records, "docx", scope=ReportScope(kind="expense"))
    assert docx.filename == "Laporan_Belanja_Sukamaju_2026.docx"
    text = _docx_text(docx.content)
    assert "DAFTAR BELANJA" in text
    assert "TB Maju" in text
    assert "Dana Desa" not in text


def test_financing_report_total_and_net(records, workspace, profile):
    for description, category, amount in (
        ("SiLPA Tahun Lalu", "Penerimaan Pembiayaan", "3000000"),
        ("Penyertaan Modal BUMDes", "Pengeluaran Pembiayaan", "1000000"),
    ):
        ledger.create_entry(
            workspace, records, "financings", {"description": description, "category": category, "amount": amount}
        )
    view = documents.prepare_view(workspace, records, scope=ReportScope(kind="financing"), today=TODAY)
    report = blocks.ledger_report(view)
    assert report.title == "LAPORAN PEMBIAYAAN DESA"
    assert report.total == Decimal("4000000.00")
    assert report.table.rows[-1].kind == blocks.ROW_TOTAL
    assert dict(report.info)["Netto Pembiayaan"] == Decimal("2000000.00")
    assert [row.cells[1] for row in report.table.rows[:-1]] == ["SiLPA Tahun Lalu", "Penyertaan Modal BUMDes"]


def test_physical_activity_bundle(records, workspace, reportable):
    activity, _ = reportable
    document = documents.export_activity_bundle(workspace, records, activity.id, today=TODAY)
    assert document.filename == "LPJ_Fisik_Jalan_Desa.docx"
    text = _docx_text(document.content)
    assert "PEMBENTUKAN TIM PELAKSANA KEGIATAN (TPK)" in text
    assert "BERITA ACARA SERAH TERIMA HASIL PEKERJAAN" in text
    assert f"045/{activity.id:04d}/SK-TPK/SUK/IV/2026" in text
    assert "TIM PELAKSANA KEGIATAN" in text
    assert "PEMERINTAH KABUPATEN BOGOR" in text

    view = documents.prepare_view(
        workspace, records, scope=ReportScope(kind="activity", activity_id=activity.id), today=TODAY
    )
    bundle = bundles.activity_bundle(view)
    assert bundle.variant == bundles.VARIANT_PHYSICAL
    assert len(bundle.letters) == len(bundles.PHYSICAL_LETTERS) + 1


def test_non_physical_bundle_with_evidence_list(records, workspace, profile, create_activity):
    activity = create_activity(name="Pengadaan Laptop", budget="15000000", report_type="non_physical")
    attach_link(
        workspace,
        records,
        AttachmentCreate(
            entity_type="activity",
            entity_id=activity.id,
            file_name="kwitansi_laptop.pdf",
            file_url="https://files.example.org/kwitansi_laptop.pdf",
        ),
    )
    document = documents.export_activity_bundle(workspace, records, activity.id, today=TODAY)
    assert document.filename == "LPJ_NonFisik_Pengadaan_Laptop.docx"
    text = _docx_text(document.content)
    assert "KERANGKA ACUAN KERJA (KAK)" in text
    assert "HARGA PERKIRAAN SENDIRI (HPS)" in text
    assert "DAFTAR BUKTI LAMPIRAN" in text
    assert "kwitansi_laptop.pdf" in text
    assert "PEMBENTUKAN TIM PELAKSANA KEGIATAN (TPK)" not in text

    view = documents.prepare_view(
        workspace, records, scope=ReportScope(kind="activity", activity_id=activity.id), today=TODAY
    )
    bundle = bundles.activity_bundle(view)
    assert bundle.variant == bundles.VARIANT_NON_PHYSICAL
    assert len(bundle.letters) == len(bundles.NON_PHYSICAL_LETTERS) + 2


def test_bundle_needs_a_single_activity(records, workspace, reportable):
    view = documents.prepare_view(workspace, records, today=TODAY)
    with pytest.raises(DomainValidationError):
        bundles.activity_bundle(view)
    with pytest.raises(NotFoundError):
        documents.export_activity_bundle(workspace, records, 424242, today=TODAY)
