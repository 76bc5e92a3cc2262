import pytest

from lpjdesa.core.errors import ExportBlockedError
from lpjdesa.schemas.schemas import VillageProfileRead
from lpjdesa.services.export_validation import check_export_readiness, ensure_exportable


def test_missing_name_and_activities_block_export(workspace):
    readiness = check_export_readiness(VillageProfileRead(), workspace.snapshot())
    assert not readiness.can_export
    assert "Nama desa belum diisi" in readiness.errors
    assert "Belum ada kegiatan pada tahun anggaran 2026" in readiness.errors
    assert "Data perangkat desa belum diisi" in readiness.warnings


def test_ledger_exports_do_not_need_activities(workspace, profile):
    readiness = check_export_readiness(profile, workspace.snapshot(), require_activities=False)
    assert readiness.can_export
    assert readiness.errors == []


def test_warnings_do_not_block(workspace, create_activity):
    create_activity()
    readiness = ensure_exportable(VillageProfileRead(name="Sukamaju"), workspace.snapshot())
    assert readiness.can_export
    assert "Kecamatan belum diisi" in readiness.warnings
    assert readiness.as_read().can_export is True


def test_ensure_exportable_raises_with_payload(workspace, profile):
    with pytest.raises(ExportBlockedError) as excinfo:
        ensure_exportable(profile, workspace.snapshot())
    assert excinfo.value.status_code == 409
    assert excinfo.value.payload()["errors"] == ["Belum ada kegiatan pada tahun anggaran 2026"]
