DEFAULT_BUDGET_FIELDS = [
    {
        "name": "Penyelenggaraan Pemerintahan",
        "code": "1",
        "icon": "Landmark",
        "color": "#6366f1",
        "description": "Pengelolaan administrasi dan operasional pemerintahan desa",
        "sub_fields": [
            ("1.1", "Penghasilan Tetap & Tunjangan"),
            ("1.2", "Operasional Perkantoran"),
            ("1.3", "Perencanaan & Musyawarah"),
        ],
    },
    {
        "name": "Pembangunan Desa",
        "code": "2",
        "icon": "HardHat",
        "color": "#10b981",
        "description": "Pembangunan infrastruktur, pendidikan, dan kesehatan desa",
        "sub_fields": [
            ("2.1", "Pekerjaan Umum & Penataan Ruang"),
            ("2.2", "Pendidikan"),
            ("2.3", "Kesehatan"),
        ],
    },
    {
        "name": "Pembinaan Kemasyarakatan",
        "code": "3",
        "icon": "Users",
        "color": "#f59e0b",
        "description": "Pembinaan lembaga dan kehidupan sosial kemasyarakatan",
        "sub_fields": [
            ("3.1", "Ketentraman & Ketertiban Umum"),
            ("3.2", "Lembaga Kemasyarakatan"),
            ("3.3", "Kebudayaan & Keagamaan"),
        ],
    },
    {
        "name": "Pemberdayaan Masyarakat",
        "code": "4",
        "icon": "Rocket",
        "color": "#0ea5e9",
        "description": "Peningkatan kapasitas dan kemandirian ekonomi masyarakat",
        "sub_fields": [
            ("4.1", "Peningkatan Kapasitas Masyarakat"),
            ("4.2", "Pertanian & Peternakan"),
            ("4.3", "BUMDesa"),
        ],
    },
    {
        "name": "Penanggulangan Bencana",
        "code": "5",
        "icon": "ShieldAlert",
        "color": "#f43f5e",
        "description": "Pencegahan, mitigasi, dan penanganan bencana",
        "sub_fields": [
            ("5.1", "Tanggap Darurat"),
            ("5.2", "Pencegahan & Mitigasi"),
        ],
    },
]

# Income categories with their account-code prefixes and sub-categories.
INCOME_STRUCTURE = {
    "Pendapatan Asli Desa": (
        "1",
        [
            ("1.1", "Hasil Usaha Desa"),
            ("1.2", "Hasil Aset Desa"),
            ("1.3", "Hasil Swadaya Dan Partisipasi"),
            ("1.4", "Pendapatan Lain-lain"),
        ],
    ),
    "Transfer": (
        "2",
        [
            ("2.1", "Dana Desa"),
            ("2.2", "Bagian dari Hasil Pajak dan Retribusi Daerah Kabupaten/Kota"),
            ("2.3", "Alokasi Dana Desa"),
            ("2.4", "Bantuan Keuangan Provinsi"),
            ("2.5", "Bantuan Keuangan APBD Kabupaten/Kota"),
        ],
    ),
    "Pendapatan Lain-lain": (
        "3",
        [
            ("3.1", "Penerimaan dari Hasil Kerjasama antar Desa"),
            ("3.2", "Penerimaan dari Hasil Kerjasama Desa dengan Pihak Ketiga"),
            ("3.3", "Penerimaan dari Bantuan Perusahaan yang berlokasi di Desa"),
            ("3.4", "Hibah dan sumbangan dari Pihak Ketiga"),
            ("3.5", "Koreksi kesalahan belanja tahun-tahun anggaran sebelumnya"),
            ("3.6", "Bunga Bank"),
            ("3.7", "Lain-lain pendapatan Desa yang sah"),
        ],
    ),
}

FINANCING_IN = "Penerimaan Pembiayaan"
FINANCING_OUT = "Pengeluaran Pembiayaan"
FINANCING_STRUCTURE = {
    FINANCING_IN: ("1", [("1.1", "SILPA Tahun Sebelumnya")]),
    FINANCING_OUT: ("2", [("2.1", "Pembentukan Dana Cadangan"), ("2.2", "Penyertaan Modal Desa")]),
}

ACTIVITY_STATUSES = ("planned", "ongoing", "completed")
STATUS_LABELS = {
    "planned": "Direncanakan",
    "ongoing": "Berjalan",
    "completed": "Selesai",
}

REPORT_TYPES = ("physical", "non_physical")
REPORT_TYPE_LABELS = {
    "physical": "Fisik",
    "non_physical": "Non-Fisik",
}

ENTITY_ACTIVITY = "activity"
ENTITY_EXPENSE = "expense"
ATTACHMENT_ENTITY_TYPES = (ENTITY_ACTIVITY, ENTITY_EXPENSE)

ITEM_RECEIPT = "receipt"
ITEM_WORKER_DAY = "worker_day"
EXPENSE_ITEM_TYPES = (ITEM_RECEIPT, ITEM_WORKER_DAY)

ROLE_VILLAGE_HEAD = "kepala desa"
ROLE_SECRETARY = "sekretaris desa"
ROLE_TREASURER = "bendahara desa"

DEFAULT_OFFICIALS = [
    ("Kepala Desa", ""),
    ("Sekretaris Desa", ""),
    ("Bendahara Desa", ""),
]

DOTTED = "......"
DOTTED_LINE = "..................................................................................................."
SIGNER_PLACEHOLDER = "( .................... )"
YEAR_PLACEHOLDER = "20XX"
PERIOD_PLACEHOLDER = "SEMESTER I / SEMESTER II"

ROMAN_MONTHS = ("I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X", "XI", "XII")

MONTH_NAMES = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)

SNAPSHOT_VERSION = "6.0"
