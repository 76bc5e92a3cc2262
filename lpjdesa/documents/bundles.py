"""Per-activity letter bundles.

A physical activity (swakelola) gets the fifteen letters of a self-managed
works file, from the TPK decree to the hand-over to the village head. A
non-physical activity (procured through a provider) gets the seven letters of
a procurement file. Each letter is plain data in the manner of :mod:`blocks`:
a header kind and an ordered run of parts that the Word renderer lays out on
its own page.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

from ..constants import DOTTED, ROMAN_MONTHS, SIGNER_PLACEHOLDER
from ..core.errors import DomainValidationError
from ..utils.formatting import format_date, format_rupiah
from .blocks import (
    ROW_GROUP,
    ROW_TOTAL,
    SigningBlock,
    SigningColumn,
    TableRow,
    TableSpec,
    activity_location,
    activity_signing,
    duration_text,
    manifest_table,
    place_date,
)
from .view import SCOPE_ACTIVITY, ActivityLine, ReportView

HEAD_NONE = "none"
HEAD_VILLAGE = "village"
HEAD_TEAM = "team"

VARIANT_PHYSICAL = "physical"
VARIANT_NON_PHYSICAL = "non_physical"

BLANK = ".............................."
SHORT_BLANK = "...................."
VOLUME = "1 Paket"


@dataclass(frozen=True)
class Heading:
    text: str
    centered: bool = False


@dataclass(frozen=True)
class InfoPairs:
    pairs: Tuple[Tuple[str, str], ...]


Part = Union[str, Heading, InfoPairs, TableSpec, SigningBlock]


@dataclass(frozen=True)
class BundleLetter:
    head: str
    title: Tuple[str, ...]
    parts: Tuple[Part, ...]
    number: Optional[str] = None


@dataclass(frozen=True)
class ActivityBundle:
    variant: str
    title: str
    letters: Tuple[BundleLetter, ...]


def letter_number(kind: str, line: ActivityLine, view: ReportView) -> str:
    """``045/<id>/<kind>/<village>/<roman month>/<year>``, dated by the activity start."""
    activity = line.activity
    village = (view.profile.name or "DSA")[:3].upper()
    when = activity.start_date or view.generated_on
    return f"045/{activity.id % 10000:04d}/{kind}/{village}/{ROMAN_MONTHS[when.month - 1]}/{view.year_label}"


def team_header_lines(view: ReportView) -> List[str]:
    profile = view.profile
    return [
        "TIM PELAKSANA KEGIATAN",
        f"DESA {(profile.name or '').upper()} KECAMATAN {(profile.sub_district or '').upper()} "
        f"KABUPATEN {(profile.district or '').upper()}",
        f"Alamat : {profile.address or '-'} Kp: {profile.postal_code or '-'}",
    ]


def _village(view: ReportView) -> str:
    return view.profile.name or DOTTED


def _region_pairs(view: ReportView) -> List[Tuple[str, str]]:
    profile = view.profile
    return [
        ("Desa", profile.name or DOTTED),
        ("Kecamatan", profile.sub_district or DOTTED),
        ("Kabupaten", profile.district or DOTTED),
    ]


def _officer(title: str, role: str = "", name: str = SIGNER_PLACEHOLDER) -> SigningColumn:
    return SigningColumn(title, role, name)


def _signing(view: ReportView, *columns: SigningColumn) -> SigningBlock:
    return SigningBlock(place_date=place_date(view), columns=columns)


def _single(view: ReportView, title: str, role: str = "", name: str = SIGNER_PLACEHOLDER) -> SigningBlock:
    return _signing(view, _officer("", "", ""), _officer(title, role, name))


def _head_column(view: ReportView, title: str) -> SigningColumn:
    return _officer(title, f"KEPALA DESA {_village(view).upper()}", view.signers.village_head)


def _grid(
    title: str,
    headers: Sequence[str],
    rows: Sequence[Union[TableRow, Tuple]],
    widths: Sequence[float],
    money: Sequence[int] = (),
    centered: Sequence[int] = (0,),
) -> TableSpec:
    return TableSpec(
        title=title,
        headers=tuple(headers),
        rows=tuple(row if isinstance(row, TableRow) else TableRow(tuple(row)) for row in rows),
        widths=tuple(widths),
        money_columns=frozenset(money),
        centered_columns=frozenset(centered),
    )


def _group(label: str, heading: str, width: int) -> TableRow:
    return TableRow((label, heading) + ("",) * (width - 2), kind=ROW_GROUP)


def team_table() -> TableSpec:
    return _grid(
        "SUSUNAN TIM PELAKSANA KEGIATAN",
        ("No", "N A M A", "Jabatan Dalam Tim", "Tanda Tangan"),
        [(number, BLANK, role, "") for number, role in enumerate(("Ketua", "Sekretaris", "Anggota"), start=1)],
        (0.6, 3, 2.4, 2.4),
    )


def _on_this_day(view: ReportView) -> str:
    return (
        f"Pada hari ini {SHORT_BLANK} tanggal {SHORT_BLANK} bulan {SHORT_BLANK} "
        f"tahun {view.year_label}"
    )


# --- Physical (swakelola) letters ---


def _team_decree(line: ActivityLine, view: ReportView) -> BundleLetter:
    village = _village(view)
    year = view.year_label
    return BundleLetter(
        head=HEAD_NONE,
        title=("KEPUTUSAN KEPALA DESA", village.upper()),
        number=letter_number("SK-TPK", line, view),
        parts=(
            Heading("TENTANG", centered=True),
            Heading("PEMBENTUKAN TIM PELAKSANA KEGIATAN (TPK)", centered=True),
            Heading(f"{line.activity.name.upper()} DI DESA {village.upper()}", centered=True),
            Heading(f"TAHUN ANGGARAN {year}", centered=True),
            Heading(f"KEPALA DESA {village.upper()},", centered=True),
            Heading("Menimbang :"),
            "a. bahwa untuk melaksanakan kegiatan pembangunan Desa yang bersumber dari Anggaran Pendapatan "
            f"dan Belanja Desa (APBDesa) Tahun Anggaran {year}, perlu dibentuk Tim Pelaksana Kegiatan (TPK);",
            "b. bahwa berdasarkan pertimbangan sebagaimana dimaksud dalam huruf a, perlu menetapkan Keputusan "
            "Kepala Desa tentang Pembentukan Tim Pelaksana Kegiatan (TPK).",
            Heading("Mengingat :"),
            "1. Undang-Undang Nomor 6 Tahun 2014 tentang Desa;",
            "2. Peraturan Pemerintah Nomor 43 Tahun 2014 tentang Peraturan Pelaksanaan Undang-Undang Nomor 6 "
            "Tahun 2014 tentang Desa;",
            "3. Peraturan Menteri Dalam Negeri Nomor 20 Tahun 2018 tentang Pengelolaan Keuangan Desa;",
            "4. Peraturan Lembaga Kebijakan Pengadaan Barang/Jasa Pemerintah Nomor 12 Tahun 2019;",
            Heading("MEMUTUSKAN :", centered=True),
            f"KESATU : Membentuk Tim Pelaksana Kegiatan (TPK) Pengadaan Barang/Jasa Desa {village} Tahun "
            f"Anggaran {year} dengan susunan keanggotaan sebagaimana tercantum dalam Lampiran Keputusan ini.",
            "KEDUA : TPK mempunyai tugas: (1) Melaksanakan Pengadaan Barang/Jasa secara Swakelola; "
            "(2) Memeriksa dan melaporkan hasil Pengadaan kepada Kasi/Kaur.",
            "KETIGA : Segala biaya yang timbul akibat ditetapkannya Keputusan ini dibebankan pada APBDesa.",
            "KEEMPAT : Keputusan ini mulai berlaku pada tanggal ditetapkan.",
            _signing(
                view,
                _officer("", "", ""),
                _officer(f"Ditetapkan di : {village}", f"KEPALA DESA {village.upper()},", view.signers.village_head),
            ),
            Heading("LAMPIRAN SK TPK", centered=True),
            team_table(),
        ),
    )


def _preparation_letter(line: ActivityLine, view: ReportView) -> BundleLetter:
    village = _village(view)
    name = line.activity.name
    return BundleLetter(
        head=HEAD_VILLAGE,
        title=(),
        parts=(
            InfoPairs(
                (
                    ("Nomor", letter_number("SP-DOK", line, view)),
                    ("Sifat", "Penting"),
                    ("Lampiran", "1 (Satu) Bundel"),
                    ("Perihal", "Penyampaian Dokumen Persiapan Pengadaan Secara Swakelola"),
                )
            ),
            place_date(view),
            "Yth. Tim Pelaksana Kegiatan (TPK)",
            f"Kegiatan {name} Desa {village}",
            "di - TEMPAT",
            Heading("Dengan hormat,"),
            f"Menindaklanjuti Keputusan Kepala Desa {village} tentang Penetapan Tim Pelaksana Kegiatan (TPK) dan "
            f"Dokumen Pelaksanaan Anggaran (DPA) Tahun Anggaran {view.year_label}, bersama ini kami sampaikan "
            "Dokumen Persiapan Pengadaan Secara Swakelola untuk kegiatan:",
            Heading(f'"{name}"', centered=True),
            "Adapun dokumen persiapan yang kami lampirkan terdiri dari:",
            "1. Jadwal Pelaksanaan Kegiatan;",
            "2. Rencana Penggunaan Tenaga Kerja, Kebutuhan Bahan, dan Peralatan;",
            "3. Gambar Rencana Kerja;",
            "4. Spesifikasi Teknis; dan",
            "5. Rencana Anggaran Biaya (RAB) Pengadaan.",
            "Demikian surat penyampaian ini kami buat untuk dilaksanakan sebagaimana mestinya.",
            _single(view, "PELAKSANA KEGIATAN ANGGARAN"),
        ),
    )


def _prepared_by(view: ReportView) -> SigningBlock:
    return _single(view, "Dibuat Oleh,", "PELAKSANA KEGIATAN ANGGARAN")


def _schedule(line: ActivityLine, view: ReportView) -> BundleLetter:
    stages = (
        "PERSIAPAN (Pembersihan lahan, Pasang Bowplank)",
        "BELANJA MATERIAL (Semen, Pasir, Batu, dll)",
        "PENGERJAAN FISIK UTAMA (Galian, Pondasi, Pasangan)",
        "FINISHING & PELAPORAN (Plesteran akhir, Bersih-bersih, Laporan)",
    )
    return BundleLetter(
        head=HEAD_NONE,
        title=("JADWAL PELAKSANAAN KEGIATAN SWAKELOLA",),
        parts=(
            InfoPairs(
                tuple(_region_pairs(view))
                + (
                    ("Jenis Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Volume", VOLUME),
                    ("Waktu Pelaksanaan", duration_text(line)),
                )
            ),
            _grid(
                "JADWAL",
                ("NO", "URAIAN PEKERJAAN", "BULAN KE-1", "BULAN KE-2"),
                [
                    (number, stage, "v" if number <= 2 else "-", "v" if number > 2 else "-")
                    for number, stage in enumerate(stages, start=1)
                ],
                (0.6, 3.6, 1.8, 1.8),
                centered=(0, 2, 3),
            ),
            _prepared_by(view),
        ),
    )


def _resource_plan(line: ActivityLine, view: ReportView) -> BundleLetter:
    rows: List[TableRow] = [_group("I.", "TENAGA KERJA", 5)]
    for number, name in enumerate(("Kepala Tukang", "Tukang Batu", "Pekerja / Kuli"), start=1):
        rows.append(TableRow((number, name, "...", "OH", "(Org x Hari)" if number == 1 else "")))
    rows.append(_group("II.", "BAHAN / MATERIAL", 5))
    materials = (
        ("Semen (PC 40kg)", "Zak"),
        ("Pasir Pasang", "m³"),
        ("Batu Belah 15/20", "m³"),
        ("Benang Nilon", "Roll"),
        ("Paku (Campur)", "Kg"),
    )
    for number, (name, unit) in enumerate(materials, start=1):
        rows.append(TableRow((number, name, "...", unit, "")))
    rows.append(_group("III.", "PERALATAN", 5))
    tools = (("Papan Nama Proyek", "Bh", "Cetak Banner"), ("Ember Cor", "Bh", "Beli"), ("Sewa Molen", "Hari", "Sewa"))
    for number, (name, unit, note) in enumerate(tools, start=1):
        rows.append(TableRow((number, name, "...", unit, note)))
    return BundleLetter(
        head=HEAD_NONE,
        title=("RENCANA PENGGUNAAN TENAGA KERJA,", "KEBUTUHAN BAHAN DAN PERALATAN"),
        parts=(
            InfoPairs(
                (
                    ("Jenis Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Volume", VOLUME),
                )
            ),
            _grid(
                "RENCANA PENGGUNAAN",
                ("NO", "URAIAN", "VOLUME", "SATUAN", "KETERANGAN"),
                rows,
                (0.6, 3, 1.2, 1.2, 2.4),
                centered=(0, 2, 3),
            ),
            _prepared_by(view),
        ),
    )


def _technical_spec(line: ActivityLine, view: ReportView) -> BundleLetter:
    rows: List[TableRow] = [_group("I", "SPESIFIKASI BAHAN (MATERIAL)", 3)]
    materials = (
        ("Semen", "Tipe PCC, Kemasan 40kg, Ber-SNI, Tidak menggumpal."),
        ("Pasir Pasang", "Butiran tajam/kasar, bersih dari lumpur, warna hitam/abu."),
        ("Batu Belah", "Batu kali/gunung yang keras, tidak keropos, ukuran 15-20 cm."),
    )
    rows += [TableRow((number, name, spec)) for number, (name, spec) in enumerate(materials, start=1)]
    rows.append(_group("II", "SPESIFIKASI CARA PENGERJAAN", 3))
    methods = (
        ("Galian Tanah", "Galian harus mencapai tanah keras. Dasar galian diratakan."),
        ("Campuran Adukan", "Perbandingan 1 Semen : 4 Pasir. Air secukupnya."),
        ("Pemasangan Batu", "Batu harus dibasahi dulu. Rongga antar batu wajib terisi penuh adukan."),
    )
    rows += [TableRow((number, name, spec)) for number, (name, spec) in enumerate(methods, start=1)]
    return BundleLetter(
        head=HEAD_NONE,
        title=("SPESIFIKASI TEKNIS KEGIATAN SWAKELOLA",),
        parts=(
            InfoPairs(
                (
                    ("Desa", _village(view)),
                    ("Jenis Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                )
            ),
            _grid(
                "SPESIFIKASI TEKNIS",
                ("NO", "URAIAN PEKERJAAN / BAHAN", "SPESIFIKASI & SYARAT TEKNIS"),
                rows,
                (0.6, 3.6, 4.2),
            ),
            _prepared_by(view),
        ),
    )


def _self_managed_budget(line: ActivityLine, view: ReportView) -> BundleLetter:
    categories = (
        "I. BELANJA BAHAN BAKU / MATERIAL",
        "II. BELANJA PERALATAN",
        "III. UPAH TENAGA KERJA (HOK)",
        "IV. BIAYA OPERASIONAL (Jika Ada)",
    )
    rows = [_group("", category, 6) for category in categories]
    rows.append(TableRow(("", "TOTAL BIAYA (I + II + III + IV)", "", "", "", line.activity.budget_amount), ROW_TOTAL))
    return BundleLetter(
        head=HEAD_NONE,
        title=("RENCANA ANGGARAN BIAYA (RAB)", "PELAKSANAAN SWAKELOLA"),
        parts=(
            InfoPairs(
                (
                    ("Bidang", line.field_name),
                    ("Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Volume", VOLUME),
                    ("Waktu", duration_text(line)),
                    ("Tahun Anggaran", view.year_label),
                )
            ),
            _grid(
                "RAB SWAKELOLA",
                ("NO", "URAIAN PEKERJAAN", "VOLUME", "SATUAN", "HARGA SATUAN (Rp)", "JUMLAH TOTAL (Rp)"),
                rows,
                (0.5, 2.6, 0.9, 0.9, 1.5, 1.5),
                money=(5,),
            ),
            activity_signing(view, line),
        ),
    )


def _quotation_request(line: ActivityLine, view: ReportView) -> BundleLetter:
    return BundleLetter(
        head=HEAD_TEAM,
        title=(),
        parts=(
            InfoPairs(
                (
                    ("Nomor", letter_number("SPH", line, view)),
                    ("Lampiran", "Daftar Barang"),
                    ("Perihal", "Permintaan Penawaran Harga"),
                )
            ),
            "Kepada Yth.",
            f"Pimpinan Toko Bangunan {BLANK}",
            "di - TEMPAT",
            "Dengan hormat,",
            f"Sehubungan dengan akan dilaksanakannya kegiatan {line.activity.name} di Desa {_village(view)} "
            f"Tahun Anggaran {view.year_label} dengan metode Swakelola, kami selaku Tim Pelaksana Kegiatan (TPK) "
            "bermaksud melakukan pengadaan material/bahan bangunan.",
            "Untuk keperluan tersebut, kami mohon Saudara dapat menyampaikan penawaran harga untuk barang-barang "
            "sebagaimana terlampir.",
            f"Surat Penawaran dari Saudara harap kami terima paling lambat tanggal {BLANK} {view.year_label}.",
            "Demikian kami sampaikan, atas kerja samanya diucapkan terima kasih.",
            _single(view, "Ketua TPK,"),
        ),
    )


MATERIALS = ("Semen PC 40 Kg", "Pasir Pasang", "Batu Belah")


def _offer_evaluation(line: ActivityLine, view: ReportView) -> BundleLetter:
    return BundleLetter(
        head=HEAD_TEAM,
        title=("BERITA ACARA EVALUASI DAN PENETAPAN CALON PENYEDIA",),
        number=letter_number("BA-EVL", line, view),
        parts=(
            f"{_on_this_day(view)}, TPK Desa {_village(view)} telah melaksanakan evaluasi terhadap penawaran "
            "yang masuk, dengan hasil sebagai berikut:",
            Heading("1. DATA PENAWARAN YANG MASUK:"),
            _grid(
                "PENAWARAN",
                ("NO", "NAMA TOKO", "TOTAL HARGA PENAWARAN (Rp)", "KELENGKAPAN"),
                [(number, "TB. ........................", "Rp ......................", "LENGKAP") for number in (1, 2)],
                (0.5, 3, 2.8, 2),
                centered=(0, 3),
            ),
            Heading("2. HASIL PERBANDINGAN HARGA SATUAN:"),
            _grid(
                "PERBANDINGAN HARGA",
                ("NO", "JENIS BARANG", "HARGA TOKO A", "HARGA TOKO B", "LEBIH MURAH"),
                [(number, item, "...........", "...........", "TOKO ...") for number, item in enumerate(MATERIALS, 1)],
                (0.5, 2.4, 1.8, 1.8, 1.5),
                centered=(0, 4),
            ),
            Heading("3. KESIMPULAN & PENETAPAN:"),
            Heading(f"Nama Toko : {BLANK}"),
            Heading("Alasan : Harga Lebih Murah dan Spesifikasi Sesuai."),
            "Tim Pelaksana Kegiatan",
            team_table(),
        ),
    )


def _price_negotiation(line: ActivityLine, view: ReportView) -> BundleLetter:
    rows: List[Union[TableRow, Tuple]] = [
        (number, item, "...", "...........", "...........", "Sepakat") for number, item in enumerate(MATERIALS, 1)
    ]
    rows.append(TableRow(("", "TOTAL HARGA", "", "Rp ............", "Rp ............", "HEMAT"), ROW_TOTAL))
    return BundleLetter(
        head=HEAD_TEAM,
        title=("BERITA ACARA KLARIFIKASI DAN NEGOSIASI HARGA",),
        number=letter_number("BA-KLR", line, view),
        parts=(
            f"{_on_this_day(view)}, bertempat di Kantor Desa {_village(view)}, kami Tim Pelaksana Kegiatan (TPK) "
            "telah melakukan klarifikasi dan negosiasi harga kepada:",
            InfoPairs((("Nama Toko / Penyedia", BLANK), ("Alamat", BLANK))),
            "Adapun hasil negosiasi adalah sebagai berikut:",
            _grid(
                "NEGOSIASI",
                ("NO", "JENIS BARANG", "VOLUME", "HARGA TOKO (Rp)", "HARGA SETELAH DITAWAR (Rp)", "KET"),
                rows,
                (0.5, 2, 1, 1.6, 1.8, 1),
                centered=(0, 2),
            ),
            Heading(
                "KESIMPULAN: Dari hasil negosiasi tersebut, pihak Toko/Penyedia MENYETUJUI harga penawaran dari TPK."
            ),
            "Tim Pelaksana Kegiatan (TPK)",
            team_table(),
        ),
    )


def _purchase_order(line: ActivityLine, view: ReportView) -> BundleLetter:
    profile = view.profile
    return BundleLetter(
        head=HEAD_TEAM,
        title=("SURAT PESANAN (SP)",),
        number=letter_number("SP", line, view),
        parts=(
            f"Paket Pekerjaan : Pengadaan Bahan Material {line.activity.name}",
            Heading("Kepada Yth."),
            f"Pimpinan Toko / TB {BLANK}",
            "di - TEMPAT",
            "Yang bertanda tangan di bawah ini:",
            InfoPairs(
                (
                    ("Nama", BLANK),
                    ("Jabatan", "Ketua Tim Pelaksana Kegiatan (TPK)"),
                    (
                        "Alamat",
                        f"Desa {_village(view)}, Kec. {profile.sub_district or DOTTED}, "
                        f"Kab. {profile.district or DOTTED}",
                    ),
                )
            ),
            Heading("Selanjutnya disebut sebagai PEMESAN, memerintahkan kepada:"),
            InfoPairs((("Nama Toko / CV", BLANK), ("Alamat", BLANK), ("NPWP (Jika Ada)", BLANK))),
            Heading("Selanjutnya disebut sebagai PENYEDIA, untuk mengirimkan barang dengan rincian terlampir."),
            Heading("SYARAT-SYARAT PEMESANAN:"),
            f"1. Waktu Pengiriman: Barang harus dikirim paling lambat tanggal {SHORT_BLANK} ke lokasi proyek.",
            "2. Kualitas Barang: Barang yang dikirim harus baru, baik, dan sesuai spesifikasi.",
            "3. Pembayaran: Dilakukan setelah barang diterima 100% dalam keadaan baik.",
            "4. Sanksi: Jika terlambat, dikenakan denda keterlambatan sesuai aturan.",
            _signing(
                view,
                _officer("Penerima Pesanan,", "Penyedia"),
                _officer("Pemesan,", "Tim Pelaksana Kegiatan (TPK)"),
            ),
        ),
    )


def _goods_inspection(line: ActivityLine, view: ReportView) -> BundleLetter:
    return BundleLetter(
        head=HEAD_TEAM,
        title=("BERITA ACARA PEMERIKSAAN DAN PENERIMAAN BARANG",),
        number=letter_number("BA-PMR", line, view),
        parts=(
            f"{_on_this_day(view)}, bertempat di Lokasi Pembangunan, kami Tim Pelaksana Kegiatan (TPK) Desa "
            f"{_village(view)} telah melakukan pemeriksaan terhadap barang yang dikirim oleh:",
            Heading(f"Nama Toko / Penyedia : {BLANK}"),
            "Adapun hasil pemeriksaan adalah sebagai berikut:",
            _grid(
                "PEMERIKSAAN",
                ("NO", "JENIS BARANG", "VOL PESANAN", "VOL DITERIMA", "HASIL KUALITAS", "KET"),
                [(number, item, "...", "...", "BAIK / BARU", "OK") for number, item in enumerate(MATERIALS, 1)],
                (0.5, 2.2, 1.3, 1.3, 1.5, 0.8),
                centered=(0, 2, 3, 4, 5),
            ),
            Heading(
                "KESIMPULAN: TPK menyatakan bahwa barang-barang tersebut telah DITERIMA DALAM KEADAAN BAIK DAN "
                "LENGKAP sesuai dengan spesifikasi yang disyaratkan."
            ),
            _signing(
                view,
                _officer("Yang Menyerahkan,", "Penyedia"),
                _officer("Yang Memeriksa & Menerima,", "Tim Pelaksana Kegiatan (TPK)"),
            ),
        ),
    )


def _period(line: ActivityLine, view: ReportView) -> str:
    activity = line.activity
    if activity.start_date and activity.end_date:
        return f"{format_date(activity.start_date)} s/d {format_date(activity.end_date)}"
    return f"........... s/d ........... {view.year_label}"


def _weekly_progress(line: ActivityLine, view: ReportView) -> BundleLetter:
    days = ("SENIN", "SELASA", "RABU", "KAMIS", "JUMAT", "SABTU", "MINGGU")
    rest_days = ("JUMAT", "MINGGU")
    daily = [
        (f"{day} (../..)", "(LIBUR)", "-", "-", "")
        if day in rest_days
        else (f"{day} (../..)", "(Isi pekerjaan hari ini)", "Cerah", "Tk:.. Pk:..", "")
        for day in days
    ]
    return BundleLetter(
        head=HEAD_TEAM,
        title=("LAPORAN KEMAJUAN PEKERJAAN (MINGGUAN)",),
        parts=(
            InfoPairs(
                (
                    ("Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Minggu Ke-", "...... (Satu / Dua / Tiga)"),
                    ("Periode Tanggal", _period(line, view)),
                )
            ),
            Heading("Rekapitulasi Kegiatan Harian"),
            _grid(
                "HARIAN",
                ("HARI / TANGGAL", "JENIS PEKERJAAN YANG DILAKUKAN", "CUACA", "JML PEKERJA", "KET"),
                daily,
                (1.8, 3, 0.9, 1.2, 0.8),
                centered=(2, 3),
            ),
            Heading("Estimasi Capaian Progres"),
            _grid(
                "PROGRES",
                ("URAIAN", "MINGGU LALU (%)", "MINGGU INI (%)", "TOTAL (%)"),
                [("Kemajuan Fisik", "... %", "+ ... %", f"= {line.activity.progress}%")],
                (2.4, 1.8, 1.8, 1.8),
                centered=(1, 2, 3),
            ),
            Heading("CATATAN / HAMBATAN MINGGU INI:"),
            "(Isi jika ada masalah, misal: Hujan terus menerus selama 2 hari, atau pengiriman pasir terlambat)",
            _signing(
                view,
                _officer("Diperiksa Oleh,", "Pelaksana Kegiatan Anggaran"),
                _officer("Dibuat Oleh,", "Tim Pelaksana Kegiatan (TPK)"),
            ),
        ),
    )


def _executor(line: ActivityLine) -> str:
    return line.activity.executor or BLANK


def _team_handover(line: ActivityLine, view: ReportView) -> BundleLetter:
    executor = _executor(line)
    return BundleLetter(
        head=HEAD_TEAM,
        title=("BERITA ACARA SERAH TERIMA HASIL PEKERJAAN",),
        number=letter_number("BAST-TPK", line, view),
        parts=(
            f"{_on_this_day(view)}, kami yang bertanda tangan di bawah ini:",
            Heading(f"1. Nama : {executor}"),
            Heading("Jabatan : Ketua Tim Pelaksana Kegiatan (TPK)"),
            "Selanjutnya disebut PIHAK KESATU.",
            Heading(f"2. Nama : {executor}"),
            Heading("Jabatan : Pelaksana Kegiatan Anggaran (PKA)"),
            "Selanjutnya disebut PIHAK KEDUA.",
            "Menyatakan dengan sebenarnya bahwa:",
            "1. PIHAK KESATU telah menyelesaikan pelaksanaan kegiatan:",
            InfoPairs(
                (
                    ("Jenis Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Anggaran", format_rupiah(line.activity.budget_amount)),
                )
            ),
            Heading("2. Pekerjaan tersebut telah diselesaikan 100% (Seratus Persen) dengan baik."),
            "3. PIHAK KESATU menyerahkan hasil pekerjaan tersebut kepada PIHAK KEDUA.",
            "4. Dengan ditandatanganinya Berita Acara ini, maka tugas PIHAK KESATU dinyatakan selesai.",
            "Demikian Berita Acara Serah Terima ini dibuat dalam rangkap 2 (dua) untuk dipergunakan sebagaimana "
            "mestinya.",
            _signing(
                view,
                _officer("PIHAK KEDUA,", "Pelaksana Kegiatan Anggaran"),
                _officer("PIHAK KESATU,", "Tim Pelaksana Kegiatan (TPK)"),
            ),
        ),
    )


def _asset_value(line: ActivityLine) -> Decimal:
    activity = line.activity
    return activity.realized_amount or activity.budget_amount


def _head_handover(line: ActivityLine, view: ReportView) -> BundleLetter:
    village = _village(view)
    return BundleLetter(
        head=HEAD_VILLAGE,
        title=("BERITA ACARA SERAH TERIMA HASIL PEKERJAAN", "DARI PELAKSANA KEGIATAN KEPADA KEPALA DESA"),
        number=letter_number("BAST-KDS", line, view),
        parts=(
            f"{_on_this_day(view)}, kami yang bertanda tangan di bawah ini:",
            Heading(f"1. Nama : {_executor(line)}"),
            "Jabatan : Pelaksana Kegiatan Anggaran (PKA), selanjutnya disebut PIHAK KESATU.",
            Heading(f"2. Nama : {view.signers.village_head}"),
            f"Jabatan : Kepala Desa {village}, selanjutnya disebut PIHAK KEDUA.",
            "Menyatakan dengan sebenarnya bahwa:",
            "1. PIHAK KESATU telah menerima hasil pekerjaan dari TPK dan menyatakan layak fungsi.",
            "2. Selanjutnya PIHAK KESATU menyerahkan hasil pekerjaan tersebut kepada PIHAK KEDUA, dengan rincian:",
            InfoPairs(
                (
                    ("Jenis Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Nilai Aset", f"{format_rupiah(_asset_value(line))} (Sesuai Realisasi)"),
                )
            ),
            Heading(
                "3. PIHAK KEDUA menerima penyerahan hasil pekerjaan tersebut untuk selanjutnya dicatat sebagai "
                "Aset / Inventaris Desa."
            ),
            "Demikian Berita Acara Serah Terima ini dibuat untuk dipergunakan sebagaimana mestinya.",
            _signing(
                view,
                _head_column(view, "PIHAK KEDUA,"),
                _officer("PIHAK KESATU,", "PELAKSANA KEGIATAN ANGGARAN", _executor(line)),
            ),
        ),
    )


def _realization_report(line: ActivityLine, view: ReportView, variant: str) -> BundleLetter:
    activity = line.activity
    if variant == VARIANT_PHYSICAL:
        categories = (
            "I. BELANJA BAHAN BAKU",
            "II. BELANJA PERALATAN",
            "III. BELANJA UPAH (HOK)",
            "IV. BELANJA OPERASIONAL",
        )
        provider = ("Penyedia/TPK", f"Tim Pelaksana Kegiatan (TPK) - {activity.executor or DOTTED}")
        headers = ("NO", "URAIAN BELANJA", "ANGGARAN / PAGU (Rp)", "REALISASI (Rp)", "SELISIH / SISA (Rp)", "KET")
        progress = f"1. Realisasi fisik kegiatan telah mencapai {activity.progress}%."
    else:
        categories = ("I. BELANJA BARANG/JASA", "II. BIAYA KIRIM", "III. PEMASANGAN", "IV. OPERASIONAL")
        provider = ("Penyedia", activity.executor or BLANK)
        headers = ("NO", "URAIAN BELANJA", "ANGGARAN (Rp)", "REALISASI (Rp)", "SELISIH (Rp)", "KET")
        progress = f"1. Realisasi kegiatan telah mencapai {activity.progress}%."
    rows: List[TableRow] = [TableRow(("", category, "...", "...", "...", "")) for category in categories]
    rows.append(
        TableRow(
            ("", "JUMLAH TOTAL", activity.budget_amount, activity.realized_amount, line.remaining, "100%"),
            ROW_TOTAL,
        )
    )
    return BundleLetter(
        head=HEAD_VILLAGE,
        title=("LAPORAN REALISASI PELAKSANAAN KEGIATAN", f"TAHUN ANGGARAN {view.year_label}"),
        parts=(
            InfoPairs(
                (
                    ("Bidang", line.field_name),
                    ("Kegiatan", activity.name),
                    ("Lokasi", activity_location(line, view)),
                    provider,
                )
            ),
            _grid("REALISASI", headers, rows, (0.5, 2.6, 1.6, 1.6, 1.6, 0.6), money=(2, 3, 4), centered=(0, 5)),
            Heading("CATATAN PENTING:"),
            progress,
            f"2. Selisih anggaran sebesar {format_rupiah(line.remaining)} (Jika Ada) telah dikembalikan ke "
            "Rekening Kas Desa.",
            "Demikian laporan ini dibuat sebagai bentuk pertanggungjawaban pelaksanaan kegiatan.",
            activity_signing(view, line),
        ),
    )


# --- Non-physical (via provider) letters ---


def _by_budget_executor(view: ReportView) -> SigningBlock:
    return _single(view, "Pelaksana Kegiatan Anggaran")


def _terms_of_reference(line: ActivityLine, view: ReportView) -> BundleLetter:
    name = line.activity.name
    village = _village(view)
    rows = (
        (
            "Latar Belakang",
            f'Untuk mendukung pelaksanaan kegiatan "{name}" di Desa {village}, diperlukan pengadaan '
            "barang/jasa melalui penyedia.",
        ),
        (
            "Maksud dan Tujuan",
            f"a. Maksud: Melakukan pengadaan barang/jasa untuk kegiatan {name}. "
            "b. Tujuan: Tersedianya barang/jasa yang layak pakai sesuai kebutuhan.",
        ),
        ("Lokasi Kegiatan", line.activity.location or f"Desa {village}"),
        ("Sumber Dana", f"APBDesa Tahun Anggaran {view.year_label}"),
        ("Pagu Anggaran", f"{format_rupiah(line.activity.budget_amount)} (Sesuai DPA/RAB)"),
        ("Waktu Pelaksanaan", duration_text(line)),
        ("Spesifikasi Barang/Jasa", "Terlampir dalam dokumen Spesifikasi Teknis."),
        (
            "Persyaratan Penyedia",
            "1. Memiliki Izin Usaha (NIB/SIUP) 2. Memiliki NPWP yang valid 3. Memiliki tempat usaha yang jelas "
            "4. Tidak dalam pengawasan pengadilan/sanksi",
        ),
        ("Produk yang Dihasilkan", "Tersedianya barang/jasa dalam kondisi 100% baru dan berfungsi baik."),
    )
    return BundleLetter(
        head=HEAD_NONE,
        title=("KERANGKA ACUAN KERJA (KAK)", "PENGADAAN BARANG/JASA MELALUI PENYEDIA"),
        parts=(
            InfoPairs(tuple(_region_pairs(view)) + (("Kegiatan", name),)),
            _grid(
                "KAK",
                ("NO", "URAIAN", "KETERANGAN / ISI"),
                [(number, label, text) for number, (label, text) in enumerate(rows, start=1)],
                (0.5, 3, 5),
            ),
            _by_budget_executor(view),
        ),
    )


def _placeholder_items(columns: Sequence[str]) -> List[Tuple]:
    return [(number, *columns) for number in (1, 2, 3)]


def _goods_spec(line: ActivityLine, view: ReportView) -> BundleLetter:
    return BundleLetter(
        head=HEAD_NONE,
        title=("SPESIFIKASI TEKNIS BARANG/JASA",),
        parts=(
            InfoPairs(
                tuple(_region_pairs(view))
                + (
                    ("Jenis Kegiatan", line.activity.name),
                    ("Lokasi", activity_location(line, view)),
                    ("Waktu Pelaksanaan", duration_text(line)),
                )
            ),
            _grid(
                "SPESIFIKASI",
                ("No", "Nama Barang / Jasa", "Spesifikasi Teknis & Kualitas", "Volume", "Satuan", "Keterangan"),
                _placeholder_items(("[Nama Barang]", "[Isi spesifikasi detail]", "...", "Unit", "")),
                (0.5, 2.2, 2.8, 0.8, 0.8, 1.4),
                centered=(0, 3, 4),
            ),
            _by_budget_executor(view),
        ),
    )


def _owner_estimate(line: ActivityLine, view: ReportView) -> BundleLetter:
    budget = line.activity.budget_amount
    rows: List[Union[TableRow, Tuple]] = _placeholder_items(
        ("[Nama Barang]", "...", "Unit", "...", "...", "Harga Toko")
    )
    rows += [
        TableRow(("A", "JUMLAH TOTAL", "", "", "", budget, ""), ROW_TOTAL),
        TableRow(("B", "PPN 11%", "", "", "", "(Jika > Rp 2 Juta)", ""), ROW_TOTAL),
        TableRow(("C", "TOTAL HPS (A + B)", "", "", "", budget, ""), ROW_TOTAL),
    ]
    return BundleLetter(
        head=HEAD_NONE,
        title=("HARGA PERKIRAAN SENDIRI (HPS)",),
        parts=(
            InfoPairs(
                tuple(_region_pairs(view))
                + (
                    ("Jenis Kegiatan", line.activity.name),
                    ("Sumber Data", "Survei harga pasar / DPA Desa / Katalog harga daerah"),
                )
            ),
            _grid(
                "HPS",
                (
                    "No",
                    "Uraian Barang / Jasa",
                    "Volume",
                    "Satuan",
                    "Harga Satuan (Rp)",
                    "Jumlah Harga (Rp)",
                    "Sumber Harga",
                ),
                rows,
                (0.5, 2.4, 0.8, 0.8, 1.6, 1.6, 1.2),
                money=(5,),
                centered=(0, 2, 3),
            ),
            _signing(
                view,
                _head_column(view, "Ditetapkan Oleh,"),
                _officer("Disusun Oleh,", "Pelaksana Kegiatan Anggaran"),
            ),
        ),
    )


def _price_survey(line: ActivityLine, view: ReportView) -> BundleLetter:
    return BundleLetter(
        head=HEAD_NONE,
        title=("BERITA ACARA / LEMBAR HASIL SURVEI HARGA", "PENGADAAN BARANG/JASA MELALUI PENYEDIA"),
        parts=(
            InfoPairs(
                tuple(_region_pairs(view))
                + (("Jenis Kegiatan", line.activity.name), ("Tanggal Survei", BLANK))
            ),
            _grid(
                "SURVEI HARGA",
                (
                    "No",
                    "Uraian Barang / Jasa",
                    "Satuan",
                    "Harga Toko A (Rp)",
                    "Harga Toko B (Rp)",
                    "Harga Toko C (Rp)",
                    "Harga Terpilih (HPS)",
                ),
                _placeholder_items(("[Nama Barang]", "Unit", "[...]", "[...]", "[...]", "[Terendah]")),
                (0.4, 1.8, 0.7, 1.4, 1.4, 1.4, 1.4),
                centered=(0, 2),
            ),
            Heading("SUMBER DATA:"),
            Heading(f"Nama Toko A: {BLANK}"),
            Heading(f"Nama Toko B: {BLANK}"),
            Heading(f"Nama Toko C: {BLANK}"),
            _by_budget_executor(view),
        ),
    )


def _unit_price_analysis(line: ActivityLine, view: ReportView) -> BundleLetter:
    labour = (
        ("Pekerja", "L.01", "OH"),
        ("Tukang Batu", "L.02", "OH"),
        ("Kepala Tukang", "L.03", "OH"),
        ("Mandor", "L.04", "OH"),
    )
    materials = (("Batu Belah", "M.01", "m3"), ("Semen Portland", "M.02", "Kg"), ("Pasir Pasang", "M.03", "m3"))
    sections = (
        ("A.", "TENAGA KERJA", labour),
        ("B.", "BAHAN", materials),
        ("C.", "PERALATAN", (("[Misal: Sewa Molen]", "E.01", "Jam"),)),
    )
    rows: List[TableRow] = []
    for label, heading, entries in sections:
        rows.append(_group(label, heading, 7))
        for number, (name, code, unit) in enumerate(entries, start=1):
            rows.append(TableRow((number, name, code, unit, "[...]", "[...]", "[...]")))
    rows.append(
        TableRow(("D.", "TOTAL HARGA SATUAN (A + B + C)", "", "", "", "", line.activity.budget_amount), ROW_TOTAL)
    )
    return BundleLetter(
        head=HEAD_NONE,
        title=("ANALISIS HARGA SATUAN PEKERJAAN",),
        parts=(
            InfoPairs(
                (
                    ("Jenis Pekerjaan", line.activity.name),
                    ("Kode Analisa", "[Misal: SNI 2835:2008]"),
                    ("Satuan", "[m3 / m2 / m']"),
                )
            ),
            _grid(
                "ANALISIS HARGA SATUAN",
                (
                    "No.",
                    "Uraian (Tenaga/Bahan/Alat)",
                    "Kode",
                    "Satuan",
                    "Koefisien",
                    "Harga Satuan (Rp)",
                    "Jumlah Harga (Rp)",
                ),
                rows,
                (0.5, 2.6, 0.8, 0.8, 1, 1.4, 1.4),
                money=(6,),
                centered=(0, 2, 3, 4),
            ),
            _by_budget_executor(view),
        ),
    )


def _provider_budget(line: ActivityLine, view: ReportView) -> BundleLetter:
    categories = ("I. PEKERJAAN PERSIAPAN", "II. PEKERJAAN UTAMA", "III. PEKERJAAN AKHIR")
    rows = [_group("", category, 7) for category in categories]
    rows.append(TableRow(("", "TOTAL HARGA", "", "", "", "", line.activity.budget_amount), ROW_TOTAL))
    return BundleLetter(
        head=HEAD_NONE,
        title=("RENCANA ANGGARAN BIAYA (RAB)",),
        parts=(
            InfoPairs(
                tuple(_region_pairs(view))
                + (("Jenis Kegiatan", line.activity.name), ("Lokasi", activity_location(line, view)))
            ),
            _grid(
                "RAB PENYEDIA",
                (
                    "No",
                    "Uraian Kegiatan",
                    "Spesifikasi",
                    "Volume",
                    "Satuan",
                    "Harga Satuan (Rp)",
                    "Jumlah Harga (Rp)",
                ),
                rows,
                (0.5, 2.2, 1.6, 0.8, 0.8, 1.4, 1.4),
                money=(6,),
            ),
            _by_budget_executor(view),
        ),
    )


# --- Evidence list ---


def _evidence_list(line: ActivityLine, view: ReportView) -> Optional[BundleLetter]:
    spec = manifest_table(view)
    if spec is None:
        return None
    return BundleLetter(
        head=HEAD_VILLAGE,
        title=("DAFTAR BUKTI LAMPIRAN", f"Kegiatan: {line.activity.name}"),
        parts=(
            f"Berikut adalah daftar {len(spec.rows)} dokumen bukti yang telah diunggah untuk kegiatan ini:",
            spec,
        ),
    )


PHYSICAL_LETTERS = (
    _team_decree,
    _preparation_letter,
    _schedule,
    _resource_plan,
    _technical_spec,
    _self_managed_budget,
    _quotation_request,
    _offer_evaluation,
    _price_negotiation,
    _purchase_order,
    _goods_inspection,
    _weekly_progress,
    _team_handover,
    _head_handover,
)

NON_PHYSICAL_LETTERS = (
    _terms_of_reference,
    _goods_spec,
    _owner_estimate,
    _price_survey,
    _unit_price_analysis,
    _provider_budget,
)


def activity_bundle(view: ReportView) -> ActivityBundle:
    """The letters for the scoped activity, picked by its report type."""
    if view.scope.kind != SCOPE_ACTIVITY or not view.lines:
        raise DomainValidationError("Bundel LPJ hanya untuk satu kegiatan", field="activity_id")
    line = view.lines[0]
    if line.activity.report_type == VARIANT_NON_PHYSICAL:
        variant, builders = VARIANT_NON_PHYSICAL, NON_PHYSICAL_LETTERS
        title = "Laporan Pertanggungjawaban Kegiatan Non-Fisik (Pengadaan via Penyedia)"
    else:
        variant, builders = VARIANT_PHYSICAL, PHYSICAL_LETTERS
        title = "Laporan Pertanggungjawaban Kegiatan Fisik (Swakelola)"
    letters = [build(line, view) for build in builders]
    letters.append(_realization_report(line, view, variant))
    evidence = _evidence_list(line, view)
    if evidence is not None:
        letters.append(evidence)
    return ActivityBundle(variant=variant, title=title, letters=tuple(letters))
