"""Narrative sections of the main report, with template text for unauthored sections."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..constants import DOTTED, DOTTED_LINE, PERIOD_PLACEHOLDER, YEAR_PLACEHOLDER
from ..schemas.schemas import NarrativeRead, VillageProfileRead

DEFAULT_LEGAL_BASIS = (
    "Undang-Undang Nomor 6 Tahun 2014 tentang Desa;",
    "Peraturan Pemerintah Nomor 43 Tahun 2014 tentang Peraturan Pelaksanaan Undang-Undang Nomor 6 "
    "Tahun 2014 tentang Desa sebagaimana telah diubah dengan Peraturan Pemerintah Nomor 47 Tahun 2015;",
    "Peraturan Pemerintah Nomor 60 Tahun 2014 tentang Dana Desa yang bersumber dari APBN sebagaimana "
    "telah diubah dengan Peraturan Pemerintah Nomor 22 Tahun 2015;",
    "Peraturan Menteri Dalam Negeri Nomor 20 Tahun 2018 tentang Pengelolaan Keuangan Desa;",
    "Peraturan Bupati tentang Pengelolaan Keuangan Desa di Lingkungan Pemerintah Daerah setempat;",
    "Peraturan Desa tentang Anggaran Pendapatan dan Belanja Desa (APBDesa) Tahun Anggaran berjalan.",
)

DEFAULT_OBJECTIVES = (
    "Menyajikan informasi mengenai realisasi pelaksanaan APBDesa secara transparan dan akuntabel;",
    "Memberikan gambaran mengenai capaian kinerja pelaksanaan program dan kegiatan pembangunan desa;",
    "Memenuhi kewajiban pelaporan keuangan sesuai ketentuan peraturan perundang-undangan;",
    "Sebagai bahan evaluasi pelaksanaan APBDesa untuk perencanaan tahun anggaran berikutnya.",
)

Paragraphs = Tuple[str, ...]


def text_to_paragraphs(text: Optional[str]) -> Paragraphs:
    if not text:
        return (DOTTED_LINE,)
    return tuple(line.strip() for line in text.splitlines() if line.strip())


def numbered(items) -> Paragraphs:
    return tuple(f"{index}. {item}" for index, item in enumerate(items, start=1))


@dataclass(frozen=True)
class ResolvedNarrative:
    foreword: Paragraphs
    background: Paragraphs
    objectives: Paragraphs
    legal_basis: Paragraphs
    physical: Paragraphs
    financial: Paragraphs
    obstacles: Paragraphs
    suggestions: Paragraphs
    closing: Paragraphs


def _or(value: Optional[str], fallback: str) -> str:
    return value.strip() if value and value.strip() else fallback


def resolve_narrative(
    narrative: Optional[NarrativeRead],
    profile: VillageProfileRead,
    year: Optional[int] = None,
) -> ResolvedNarrative:
    """Authored text where present, template text otherwise; never empty."""
    village = _or(profile.name, DOTTED)
    period = _or(profile.reporting_period, "")
    year_label = _or(profile.fiscal_year_label, str(year) if year else YEAR_PLACEHOLDER)

    def authored(attribute: str) -> Optional[Paragraphs]:
        value = getattr(narrative, attribute, None) if narrative is not None else None
        return text_to_paragraphs(value) if value and value.strip() else None

    foreword = authored("foreword") or (
        "Puji syukur kami panjatkan kehadirat Tuhan Yang Maha Esa, atas limpahan rahmat dan karunia-Nya "
        f"sehingga Laporan Pertanggungjawaban (LPJ) Realisasi Pelaksanaan Anggaran Pendapatan dan Belanja "
        f"Desa {village} {period or 'Semester ' + DOTTED} Tahun Anggaran {year_label} dapat disusun dan "
        "diselesaikan tepat waktu.",
        "Laporan ini disusun sebagai bentuk pertanggungjawaban atas pengelolaan keuangan desa selama satu "
        "periode anggaran sesuai dengan Peraturan Menteri Dalam Negeri Nomor 20 Tahun 2018 tentang "
        "Pengelolaan Keuangan Desa.",
        "Kami menyadari bahwa dalam penyusunan laporan ini masih terdapat kekurangan. Oleh karena itu, saran "
        "dan masukan yang konstruktif sangat kami harapkan demi perbaikan di masa mendatang.",
    )
    background = authored("background") or (
        "Berdasarkan Undang-Undang Nomor 6 Tahun 2014 tentang Desa, pengelolaan keuangan desa meliputi "
        "seluruh kegiatan yang meliputi perencanaan, pelaksanaan, penatausahaan, pelaporan, dan "
        "pertanggungjawaban keuangan desa. Kepala Desa adalah pemegang kekuasaan pengelolaan keuangan desa "
        "dan mewakili pemerintah desa dalam kepemilikan kekayaan milik desa yang dipisahkan.",
        f"Desa {village}, Kecamatan {_or(profile.sub_district, DOTTED)}, Kabupaten "
        f"{_or(profile.district, DOTTED)}, Provinsi {_or(profile.province, DOTTED)} memiliki kewajiban untuk "
        "menyusun Laporan Pertanggungjawaban (LPJ) Realisasi Pelaksanaan Anggaran Pendapatan dan Belanja "
        f"Desa (APBDesa) Tahun Anggaran {year_label} sebagai bentuk akuntabilitas dan transparansi "
        "pengelolaan keuangan desa.",
    )
    objectives = authored("objectives") or (
        ("Tujuan penyusunan Laporan Pertanggungjawaban ini adalah:",) + numbered(DEFAULT_OBJECTIVES)
    )
    legal_basis = authored("legal_basis") or numbered(DEFAULT_LEGAL_BASIS)
    physical = authored("physical_narrative") or (
        f"Realisasi pelaksanaan fisik kegiatan di Desa {village} pada {period or 'periode ini'} Tahun "
        f"Anggaran {year_label} dapat dilihat pada tabel berikut:",
    )
    financial = authored("financial_narrative") or (
        f"Realisasi keuangan Desa {village} pada {period or 'periode ini'} Tahun Anggaran {year_label} "
        "terdiri atas Pendapatan, Belanja, dan Pembiayaan sebagai berikut:",
    )
    blanks = numbered([DOTTED_LINE] * 3)
    obstacles = authored("obstacles") or (
        ("Dalam pelaksanaan APBDesa, beberapa kendala yang dihadapi antara lain:",) + blanks
    )
    suggestions = authored("suggestions") or (
        ("Berdasarkan kendala tersebut, beberapa saran yang dapat disampaikan:",) + blanks
    )
    closing = (
        f"Demikian Laporan Pertanggungjawaban Realisasi Pelaksanaan APBDesa {village} {period or DOTTED} "
        f"Tahun Anggaran {year_label} ini disusun dengan sebenar-benarnya sebagai bentuk tanggung jawab "
        "dalam pengelolaan keuangan desa. Atas perhatian dan kerjasama semua pihak, kami ucapkan terima kasih.",
    )
    return ResolvedNarrative(
        foreword=foreword,
        background=background,
        objectives=objectives,
        legal_basis=legal_basis,
        physical=physical,
        financial=financial,
        obstacles=obstacles,
        suggestions=suggestions,
        closing=closing,
    )


def conclusion_items(income: str, expense: str, surplus_label: str, surplus: str) -> List[str]:
    return [
        f"Total Pendapatan Desa sebesar {income};",
        f"Total Belanja Desa sebesar {expense};",
        f"{surplus_label} anggaran sebesar {surplus};",
        "Seluruh kegiatan telah dilaksanakan sesuai dengan rencana kerja yang telah dituangkan dalam APBDesa.",
    ]


def cover_period(profile: VillageProfileRead) -> str:
    return profile.reporting_period.upper() if profile.reporting_period else PERIOD_PLACEHOLDER
