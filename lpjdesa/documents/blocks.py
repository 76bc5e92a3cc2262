"""Format-neutral building blocks shared by the spreadsheet, word and print renderers.

Every table, info block and signing block is described here once, as plain
data. A renderer turns a :class:`TableSpec` into cells of its own format and
must not compute any figure itself.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from ..constants import (
    DOTTED,
    ENTITY_ACTIVITY,
    ENTITY_EXPENSE,
    ITEM_RECEIPT,
    ITEM_WORKER_DAY,
    REPORT_TYPE_LABELS,
    ROMAN_MONTHS,
    SIGNER_PLACEHOLDER,
    STATUS_LABELS,
)
from ..schemas.schemas import ExpenseItemRead
from ..services.aggregation import sum_amounts
from ..utils.formatting import format_date, format_number, format_percent, format_rupiah, safe_file_stem
from .narratives import cover_period
from .view import (
    LEDGER_TYPE_LABELS,
    SCOPE_ACTIVITY,
    SCOPE_EXPENSE,
    SCOPE_FINANCING,
    SCOPE_INCOME,
    ActivityLine,
    ReportView,
)

HEADER_SHADING = "D9E2F3"
GROUP_SHADING = "F2F2F2"

ROW_DATA = "data"
ROW_GROUP = "group"
ROW_TOTAL = "total"

Cell = Union[str, int, Decimal, None]


@dataclass(frozen=True)
class TableRow:
    cells: Tuple[Cell, ...]
    kind: str = ROW_DATA


@dataclass(frozen=True)
class TableSpec:
    title: str
    headers: Tuple[str, ...]
    rows: Tuple[TableRow, ...]
    widths: Tuple[float, ...]
    money_columns: FrozenSet[int] = frozenset()
    centered_columns: FrozenSet[int] = frozenset()
    link_column: Optional[int] = None

    @property
    def totals(self) -> Optional[TableRow]:
        for row in reversed(self.rows):
            if row.kind == ROW_TOTAL:
                return row
        return None


@dataclass(frozen=True)
class SigningColumn:
    title: str
    role: str
    name: str


@dataclass(frozen=True)
class SigningBlock:
    place_date: Optional[str]
    columns: Tuple[SigningColumn, ...]


@dataclass(frozen=True)
class ReceiptVoucher:
    number: str
    date_text: str
    paid_to: str
    description: str
    table: TableSpec
    total: Decimal
    words: str
    signing: SigningBlock


@dataclass(frozen=True)
class WorkerDayList:
    activity_name: str
    sub_field_name: str
    executor: str
    period: str
    table: TableSpec
    total: Decimal
    words: str
    signing: SigningBlock


def _or(value: Optional[str], fallback: str = "-") -> str:
    return value.strip() if value and str(value).strip() else fallback


def status_label(status: Optional[str]) -> str:
    return STATUS_LABELS.get(status or "planned", status or "-")


def report_type_label(report_type: Optional[str]) -> str:
    if report_type == "non_physical":
        return f"{REPORT_TYPE_LABELS['non_physical']} (Program/Pelayanan)"
    return f"{REPORT_TYPE_LABELS['physical']} (Infrastruktur)"


def words_line(words: str) -> str:
    return f"Terbilang : # {words} #"


# --- Letterhead, cover and info blocks ---


def letterhead_lines(view: ReportView) -> List[str]:
    profile = view.profile
    return [
        f"PEMERINTAH KABUPATEN {(profile.district or '').upper()}".rstrip(),
        f"KECAMATAN {(profile.sub_district or '').upper()}".rstrip(),
        f"DESA {(profile.name or '').upper()}".rstrip(),
        f"Alamat : {_or(profile.address)} Kode Pos {_or(profile.postal_code)}",
    ]


def cover_lines(view: ReportView, title_lines: Sequence[str]) -> List[Tuple[str, bool]]:
    """(text, emphasised) pairs for a cover page."""
    profile = view.profile
    period = cover_period(profile)
    lines = [(line, True) for line in title_lines]
    lines += [
        ("", False),
        (period, True),
        ("", False),
        (f"DESA {_or(profile.name, DOTTED).upper()}", True),
        (f"KECAMATAN {_or(profile.sub_district, DOTTED).upper()}", False),
        (f"KABUPATEN {_or(profile.district, DOTTED).upper()}", False),
        (f"PROVINSI {_or(profile.province, DOTTED).upper()}", False),
        ("", False),
        (f"TAHUN ANGGARAN {view.year_label}", True),
    ]
    return lines


MAIN_TITLE = (
    "LAPORAN PERTANGGUNGJAWABAN",
    "REALISASI PELAKSANAAN",
    "ANGGARAN PENDAPATAN DAN BELANJA DESA",
)


def village_info_pairs(view: ReportView) -> List[Tuple[str, str]]:
    profile = view.profile
    return [
        ("Nama Desa", _or(profile.name, DOTTED)),
        ("Kode Desa", _or(profile.code)),
        ("Kecamatan", _or(profile.sub_district, DOTTED)),
        ("Kabupaten", _or(profile.district, DOTTED)),
        ("Provinsi", _or(profile.province, DOTTED)),
        ("Alamat", _or(profile.address)),
        ("Kepala Desa", view.signers.village_head),
        ("Sekretaris Desa", view.signers.secretary),
        ("Bendahara", view.signers.treasurer),
        ("Tahun Anggaran", view.year_label),
        ("Periode", _or(profile.reporting_period, DOTTED)),
    ]


def duration_text(line: ActivityLine) -> str:
    activity = line.activity
    if activity.start_date and activity.end_date:
        days = max(1, (activity.end_date - activity.start_date).days)
        return f"{days} Hari Kalender"
    return _or(activity.duration_text, f"{DOTTED} Hari Kalender")


def activity_location(line: ActivityLine, view: ReportView) -> str:
    fallback = f"Desa {_or(view.profile.name, DOTTED)}, Kec. {_or(view.profile.sub_district, DOTTED)}"
    return _or(line.activity.location, fallback)


def activity_info_pairs(line: ActivityLine, view: ReportView) -> List[Tuple[str, str]]:
    activity = line.activity
    return [
        ("Kode Rekening", _or(line.account_code)),
        ("Nama Kegiatan", activity.name),
        ("Bidang", line.field_name),
        ("Sub Bidang", line.sub_field_name),
        ("Jenis LPJ", report_type_label(activity.report_type)),
        ("Status", status_label(activity.status)),
        ("Progres", f"{activity.progress}%"),
        ("Pelaksana", _or(activity.executor, DOTTED)),
        ("Lokasi", activity_location(line, view)),
        ("Waktu Pelaksanaan", duration_text(line)),
        ("Tanggal Mulai", format_date(activity.start_date)),
        ("Tanggal Selesai", format_date(activity.end_date)),
    ]


def activity_budget_table(line: ActivityLine) -> TableSpec:
    activity = line.activity
    return TableSpec(
        title="Rincian Anggaran",
        headers=("Uraian", "Jumlah (Rp)"),
        rows=(
            TableRow(("Anggaran", activity.budget_amount)),
            TableRow(("Realisasi", activity.realized_amount)),
            TableRow(("Sisa Anggaran", line.remaining)),
            TableRow(("Persentase Realisasi", format_percent(line.percent)), kind=ROW_TOTAL),
        ),
        widths=(3, 2),
        money_columns=frozenset({1}),
    )


# --- Ledger tables ---


def _ledger_table(title, headers, rows, total_label, total, widths) -> TableSpec:
    body = [TableRow(cells) for cells in rows]
    body.append(TableRow(("", "", total_label, total), kind=ROW_TOTAL))
    return TableSpec(
        title=title,
        headers=headers,
        rows=tuple(body),
        widths=widths,
        money_columns=frozenset({3}),
        centered_columns=frozenset({0}),
    )


def income_table(view: ReportView) -> TableSpec:
    return _ledger_table(
        "PENDAPATAN DESA",
        ("Kode Rek", "Sumber Pendapatan", "Kategori", "Jumlah (Rp)"),
        [(_or(i.account_code), i.source, _or(i.category), i.amount) for i in view.incomes],
        "TOTAL PENDAPATAN",
        view.totals.income,
        (1, 3, 2.2, 2),
    )


def expense_table(view: ReportView) -> TableSpec:
    return _ledger_table(
        "BELANJA DESA",
        ("Kode Rek", "Uraian Belanja", "Kategori", "Jumlah (Rp)"),
        [(_or(e.account_code), e.description, _or(e.category), e.amount) for e in view.expenses],
        "TOTAL BELANJA",
        view.totals.expense,
        (1, 3, 2.2, 2),
    )


def financing_table(view: ReportView) -> TableSpec:
    return _ledger_table(
        "PEMBIAYAAN DESA",
        ("Kode Rek", "Uraian", "Kategori", "Jumlah (Rp)"),
        [(_or(f.account_code), f.description, f.category, f.amount) for f in view.financings],
        "NETTO PEMBIAYAAN",
        view.totals.financing_net,
        (1, 3, 2.2, 2),
    )


def year_summary_table(view: ReportView) -> TableSpec:
    totals = view.totals
    return TableSpec(
        title="Ringkasan Realisasi Keuangan",
        headers=("Uraian", "Jumlah (Rp)"),
        rows=(
            TableRow(("Total Pendapatan", totals.income)),
            TableRow(("Total Belanja", totals.expense)),
            TableRow(("Surplus / (Defisit)", totals.surplus)),
            TableRow(("Pembiayaan Netto", totals.financing_net)),
            TableRow(("Sisa Lebih Pembiayaan Anggaran (SiLPA)", totals.remaining_balance), kind=ROW_TOTAL),
        ),
        widths=(5, 2.4),
        money_columns=frozenset({1}),
    )


# --- Single-ledger reports ---


@dataclass(frozen=True)
class LedgerReport:
    label: str
    title: str
    subtitle: str
    info: Tuple[Tuple[str, Cell], ...]
    table: TableSpec
    total: Decimal
    words: str
    signing: SigningBlock


def _income_rows(view: ReportView) -> List[Tuple[Cell, ...]]:
    return [
        (_or(i.account_code), i.source, _or(i.category), i.amount, format_date(i.received_on), _or(i.description))
        for i in view.incomes
    ]


def _expense_rows(view: ReportView) -> List[Tuple[Cell, ...]]:
    return [
        (_or(e.account_code), e.description, _or(e.category), e.amount, format_date(e.spent_on), _or(e.recipient))
        for e in view.expenses
    ]


def _financing_rows(view: ReportView) -> List[Tuple[Cell, ...]]:
    return [
        (_or(f.account_code), f.description, f.category, f.amount, format_date(f.transacted_on), "-")
        for f in view.financings
    ]


# scope kind -> (headers, rows, rows attribute on the view)
_LEDGER_COLUMNS = {
    SCOPE_INCOME: (
        ("Kode Rek", "Sumber Pendapatan", "Kategori", "Jumlah (Rp)", "Tanggal", "Keterangan"),
        _income_rows,
        "incomes",
    ),
    SCOPE_EXPENSE: (
        ("Kode Rek", "Uraian Belanja", "Kategori", "Jumlah (Rp)", "Tanggal", "Penerima"),
        _expense_rows,
        "expenses",
    ),
    SCOPE_FINANCING: (
        ("Kode Rek", "Uraian", "Kategori", "Jumlah (Rp)", "Tanggal", "Keterangan"),
        _financing_rows,
        "financings",
    ),
}


def ledger_report(view: ReportView) -> LedgerReport:
    """One ledger type sorted by account code, closed by a TOTAL row of its amounts."""
    headers, build_rows, attribute = _LEDGER_COLUMNS[view.scope.kind]
    label = LEDGER_TYPE_LABELS[view.scope.kind]
    entries = getattr(view, attribute)
    total = sum_amounts(entries)
    rows = [TableRow(cells) for cells in build_rows(view)]
    rows.append(TableRow(("", "TOTAL", "", total, "", ""), kind=ROW_TOTAL))
    profile = view.profile
    info: List[Tuple[str, Cell]] = [
        ("Desa", _or(profile.name, DOTTED)),
        ("Kecamatan", _or(profile.sub_district, DOTTED)),
        ("Kabupaten", _or(profile.district, DOTTED)),
        ("Total Item", str(len(entries))),
        (f"Total {label}", total),
    ]
    if view.scope.kind == SCOPE_FINANCING:
        info.append(("Netto Pembiayaan", view.totals.financing_net))
    return LedgerReport(
        label=label,
        title=f"LAPORAN {label.upper()} DESA",
        subtitle=f"{view.village_name} - Tahun Anggaran {view.year_label}",
        info=tuple(info),
        table=TableSpec(
            title=f"DAFTAR {label.upper()}",
            headers=headers,
            rows=tuple(rows),
            widths=(1, 3, 2, 1.8, 1.4, 2),
            money_columns=frozenset({3}),
            centered_columns=frozenset({0, 4}),
        ),
        total=total,
        words=view.words_for(total),
        signing=SigningBlock(
            place_date=place_date(view),
            columns=(
                SigningColumn(
                    "Mengetahui,", f"KEPALA DESA {_or(profile.name, DOTTED).upper()}", view.signers.village_head
                ),
                SigningColumn("Dibuat Oleh,", "BENDAHARA DESA", view.signers.treasurer),
            ),
        ),
    )


# --- Activity tables ---


def activity_table(view: ReportView) -> TableSpec:
    """Activities grouped by field, numbered across groups, with a grand total row."""
    rows: List[TableRow] = []
    number = 0
    for section in view.field_sections:
        lines = section.lines
        if not lines:
            continue
        rows.append(TableRow(("", section.field.name, "", "", "", "", "", ""), kind=ROW_GROUP))
        for line in lines:
            number += 1
            activity = line.activity
            rows.append(
                TableRow(
                    (
                        number,
                        _or(line.account_code),
                        activity.name,
                        line.sub_field_name,
                        activity.budget_amount,
                        activity.realized_amount,
                        format_percent(line.percent),
                        status_label(activity.status),
                    )
                )
            )
    total = view.activity_rollup
    rows.append(
        TableRow(
            (
                "",
                "",
                "JUMLAH TOTAL",
                "",
                total.total_budget,
                total.total_realized,
                format_percent(total.percent_realized),
                "",
            ),
            kind=ROW_TOTAL,
        )
    )
    return TableSpec(
        title="PELAKSANAAN KEGIATAN",
        headers=("No", "Kode Rek", "Kegiatan", "Sub Bidang", "Anggaran (Rp)", "Realisasi (Rp)", "%", "Status"),
        rows=tuple(rows),
        widths=(0.5, 0.9, 2.6, 1.8, 1.5, 1.5, 0.7, 1.1),
        money_columns=frozenset({4, 5}),
        centered_columns=frozenset({0, 1, 6, 7}),
    )


def field_summary_table(view: ReportView) -> TableSpec:
    rows: List[TableRow] = []
    for index, section in enumerate(view.field_sections, start=1):
        summary = section.rollup
        rows.append(
            TableRow(
                (
                    index,
                    section.field.name,
                    summary.count,
                    summary.total_budget,
                    summary.total_realized,
                    summary.remaining,
                    format_percent(summary.percent_realized),
                )
            )
        )
    total = view.activity_rollup
    rows.append(
        TableRow(
            (
                "",
                "TOTAL",
                total.count,
                total.total_budget,
                total.total_realized,
                total.remaining,
                format_percent(total.percent_realized),
            ),
            kind=ROW_TOTAL,
        )
    )
    return TableSpec(
        title="LAPORAN REALISASI PER BIDANG",
        headers=("NO", "BIDANG", "JUMLAH KEGIATAN", "ANGGARAN (Rp)", "REALISASI (Rp)", "SISA (Rp)", "PENYERAPAN (%)"),
        rows=tuple(rows),
        widths=(0.5, 3, 1.2, 1.6, 1.6, 1.6, 1.2),
        money_columns=frozenset({3, 4, 5}),
        centered_columns=frozenset({0, 2, 6}),
    )


def sub_field_summary_table(view: ReportView) -> TableSpec:
    rows: List[TableRow] = []
    for section in view.field_sections:
        rows.append(TableRow(("", section.field.name, "", "", "", "", ""), kind=ROW_GROUP))
        for sub_section in section.sub_sections:
            summary = sub_section.rollup
            rows.append(
                TableRow(
                    (
                        _or(sub_section.sub_field.account_code),
                        sub_section.sub_field.name,
                        summary.count,
                        summary.total_budget,
                        summary.total_realized,
                        summary.remaining,
                        format_percent(summary.percent_realized),
                    )
                )
            )
    total = view.activity_rollup
    rows.append(
        TableRow(
            (
                "",
                "TOTAL",
                total.count,
                total.total_budget,
                total.total_realized,
                total.remaining,
                format_percent(total.percent_realized),
            ),
            kind=ROW_TOTAL,
        )
    )
    return TableSpec(
        title="RINCIAN PER SUB BIDANG",
        headers=("Kode", "Sub Bidang", "Jumlah Kegiatan", "Anggaran (Rp)", "Realisasi (Rp)", "Sisa (Rp)", "%"),
        rows=tuple(rows),
        widths=(0.8, 3, 1.2, 1.6, 1.6, 1.6, 0.8),
        money_columns=frozenset({3, 4, 5}),
        centered_columns=frozenset({0, 2, 6}),
    )


# --- Attachment manifest ---


def manifest_table(view: ReportView) -> Optional[TableSpec]:
    """The attachment list, activities first then expenses; ``None`` when there is nothing to list."""
    related: List[Tuple[str, str, list]] = []
    if not view.scope.is_ledger:
        entries = view.manifest.get(ENTITY_ACTIVITY, {})
        related += [("Kegiatan", line.activity.name, entries.get(line.activity.id, [])) for line in view.lines]
    if view.scope.kind not in (SCOPE_ACTIVITY, SCOPE_INCOME, SCOPE_FINANCING):
        entries = view.manifest.get(ENTITY_EXPENSE, {})
        related += [("Belanja", expense.description, entries.get(expense.id, [])) for expense in view.expenses]

    rows: List[TableRow] = []
    for kind, owner, owned in related:
        for entry in owned:
            rows.append(TableRow((len(rows) + 1, kind, owner, entry.file_name, _or(entry.caption), entry.url or "")))
    if not rows:
        return None
    return TableSpec(
        title="DAFTAR LAMPIRAN",
        headers=("No", "Jenis", "Terkait", "Nama File", "Keterangan", "Link File"),
        rows=tuple(rows),
        widths=(0.5, 1, 2.4, 2, 2, 2.6),
        centered_columns=frozenset({0}),
        link_column=5,
    )


# --- Signing blocks ---


def place_date(view: ReportView) -> str:
    return f"{_or(view.profile.name, DOTTED)}, ........................ {view.year_label}"


def closing_signing(view: ReportView) -> SigningBlock:
    return SigningBlock(
        place_date=place_date(view),
        columns=(
            SigningColumn("Mengetahui,", "BENDAHARA DESA", view.signers.treasurer),
            SigningColumn("", f"KEPALA DESA {_or(view.profile.name, DOTTED).upper()}", view.signers.village_head),
        ),
    )


def activity_signing(view: ReportView, line: ActivityLine) -> SigningBlock:
    return SigningBlock(
        place_date=place_date(view),
        columns=(
            SigningColumn(
                "Menyetujui,", f"KEPALA DESA {_or(view.profile.name, DOTTED).upper()}", view.signers.village_head
            ),
            SigningColumn("Dibuat Oleh,", "PELAKSANA KEGIATAN ANGGARAN", _or(line.activity.executor, DOTTED)),
        ),
    )


def three_party_signing(view: ReportView, first_title: str, first_name: Optional[str]) -> SigningBlock:
    return SigningBlock(
        place_date=None,
        columns=(
            SigningColumn(first_title, "", _or(first_name, SIGNER_PLACEHOLDER)),
            SigningColumn("Bendahara Desa,", "", view.signers.treasurer),
            SigningColumn("Mengetahui,", "Kepala Desa", view.signers.village_head),
        ),
    )


# --- Receipts (kuitansi) and worker-day lists (HOK) ---


def receipt_number(index: int, when: date, year: Optional[str] = None) -> str:
    return f"KWT/{index:04d}/{ROMAN_MONTHS[when.month - 1]}/{year or when.year}"


def _group(items: Sequence[ExpenseItemRead], key) -> Dict:
    groups: Dict = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def receipt_vouchers(view: ReportView) -> List[ReceiptVoucher]:
    """One numbered voucher per expense that has receipt items, in item order."""
    receipts = [item for item in view.expense_items if item.item_type == ITEM_RECEIPT]
    vouchers = []
    for index, (expense_id, items) in enumerate(_group(receipts, lambda item: item.expense_id).items(), start=1):
        expense = view.expense(expense_id)
        total = sum_amounts(items)
        paid_to = items[0].paid_to or (expense.recipient if expense else None)
        if len(items) == 1:
            description = items[0].description or (expense.description if expense else None)
        else:
            description = (expense.description if expense else None) or items[0].description
        when = items[0].item_date or (expense.spent_on if expense else None)
        rows = [
            TableRow(
                (
                    position,
                    _or(item.description),
                    format_number(item.quantity),
                    _or(item.unit),
                    item.unit_price,
                    item.amount,
                )
            )
            for position, item in enumerate(items, start=1)
        ]
        rows.append(TableRow(("", "JUMLAH", "", "", "", total), kind=ROW_TOTAL))
        vouchers.append(
            ReceiptVoucher(
                number=receipt_number(index, when or view.generated_on, view.year_label),
                date_text=format_date(when),
                paid_to=_or(paid_to),
                description=_or(description),
                table=TableSpec(
                    title="TANDA BUKTI PENGELUARAN UANG",
                    headers=("No", "Uraian", "Volume", "Satuan", "Harga Satuan (Rp)", "Jumlah (Rp)"),
                    rows=tuple(rows),
                    widths=(0.5, 3, 0.8, 0.8, 1.7, 1.7),
                    money_columns=frozenset({4, 5}),
                    centered_columns=frozenset({0, 2}),
                ),
                total=total,
                words=view.words_for(total),
                signing=three_party_signing(view, "Penerima,", paid_to),
            )
        )
    return vouchers


def worker_day_lists(view: ReportView) -> List[WorkerDayList]:
    """Worker-day payments grouped by activity, or by expense when no activity is linked."""
    worker_days = [item for item in view.expense_items if item.item_type == ITEM_WORKER_DAY]
    groups = _group(
        worker_days,
        lambda item: (ENTITY_ACTIVITY, item.activity_id) if item.activity_id else (ENTITY_EXPENSE, item.expense_id),
    )
    lists = []
    for (entity_type, entity_id), items in groups.items():
        line = view.line(entity_id) if entity_type == ENTITY_ACTIVITY else None
        expense = view.expense(entity_id) if entity_type == ENTITY_EXPENSE else None
        if line is not None:
            name = line.activity.name
            sub_field_name = line.sub_field_name
            executor = _or(line.activity.executor)
            period = f"{format_date(line.activity.start_date)} s/d {format_date(line.activity.end_date)}"
        else:
            name = expense.description if expense else "Kegiatan Tidak Diketahui"
            sub_field_name = "-"
            executor = "-"
            period = "-"
        total = sum_amounts(items)
        rows = [
            TableRow(
                (
                    position,
                    _or(item.paid_to),
                    _or(item.national_id),
                    format_number(item.quantity),
                    item.unit_price,
                    item.amount,
                )
            )
            for position, item in enumerate(items, start=1)
        ]
        rows.append(TableRow(("", "JUMLAH TOTAL", "", "", "", total), kind=ROW_TOTAL))
        lists.append(
            WorkerDayList(
                activity_name=name,
                sub_field_name=sub_field_name,
                executor=executor,
                period=period,
                table=TableSpec(
                    title="PEMBAYARAN UPAH PEKERJA (HOK)",
                    headers=("No", "Nama Pekerja", "NIK", "Hari Kerja", "Upah/Hari (Rp)", "Jumlah (Rp)"),
                    rows=tuple(rows),
                    widths=(0.5, 2.5, 1.8, 0.8, 1.5, 1.5),
                    money_columns=frozenset({4, 5}),
                    centered_columns=frozenset({0, 3}),
                ),
                total=total,
                words=view.words_for(total),
                signing=three_party_signing(view, "Pelaksana Kegiatan,", None if executor == "-" else executor),
            )
        )
    return lists


# --- File names ---


def document_filename(view: ReportView, extension: str, kind: str = "main") -> str:
    stem = view.file_stem
    year = view.year
    if kind == "receipts":
        return f"Kuitansi_SPJ_{stem}_{year}.{extension}"
    if kind == "worker_days":
        return f"Daftar_HOK_{stem}_{year}.{extension}"
    if kind == "bundle":
        variant = "NonFisik" if view.lines[0].activity.report_type == "non_physical" else "Fisik"
        activity = safe_file_stem(view.scope_label, fallback="Kegiatan", max_length=30)
        return f"LPJ_{variant}_{activity}.{extension}"
    if view.scope.kind in LEDGER_TYPE_LABELS:
        return f"Laporan_{LEDGER_TYPE_LABELS[view.scope.kind]}_{stem}_{year}.{extension}"
    if view.scope.kind == SCOPE_ACTIVITY:
        activity = safe_file_stem(view.scope_label, fallback="Kegiatan", max_length=30)
        return f"LPJ_Kegiatan_{activity}_{year}.{extension}"
    if view.scope.kind != "year":
        scope = safe_file_stem(view.scope_label, fallback="Bidang", max_length=30)
        return f"LPJ_{scope}_{stem}_{year}.{extension}"
    if extension == "pdf":
        return f"LPJ_APBDesa_{stem}_{year}.{extension}"
    return f"LPJ_{stem}_{year}.{extension}"


def cell_text(value: Cell, money: bool = False) -> str:
    """Text form of a table cell for renderers without native number cells."""
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format_rupiah(value) if money else format_number(value)
    return str(value)
