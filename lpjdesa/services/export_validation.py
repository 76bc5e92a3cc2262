from dataclasses import dataclass, field
from typing import List

from ..core.errors import ExportBlockedError
from ..schemas.schemas import ExportReadinessRead, VillageProfileRead
from .fiscal_years import YearScopedStore


@dataclass
class ExportReadiness:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def can_export(self) -> bool:
        return not self.errors

    def as_read(self) -> ExportReadinessRead:
        return ExportReadinessRead(can_export=self.can_export, errors=self.errors, warnings=self.warnings)


_RECOMMENDED = (
    ("sub_district", "Kecamatan belum diisi"),
    ("district", "Kabupaten belum diisi"),
    ("province", "Provinsi belum diisi"),
    ("fiscal_year_label", "Tahun anggaran pada profil desa belum diisi"),
    ("reporting_period", "Periode pelaporan belum diisi"),
)


def check_export_readiness(
    profile: VillageProfileRead, store: YearScopedStore, require_activities: bool = True
) -> ExportReadiness:
    readiness = ExportReadiness()
    if not (profile.name or "").strip():
        readiness.errors.append("Nama desa belum diisi")
    if require_activities and not store.activities:
        readiness.errors.append(f"Belum ada kegiatan pada tahun anggaran {store.year}")

    for attribute, message in _RECOMMENDED:
        if not (getattr(profile, attribute) or "").strip():
            readiness.warnings.append(message)
    if not any((official.name or "").strip() for official in profile.officials):
        readiness.warnings.append("Data perangkat desa belum diisi")
    return readiness


def ensure_exportable(
    profile: VillageProfileRead, store: YearScopedStore, require_activities: bool = True
) -> ExportReadiness:
    readiness = check_export_readiness(profile, store, require_activities)
    if not readiness.can_export:
        raise ExportBlockedError(readiness.errors, readiness.warnings)
    return readiness
