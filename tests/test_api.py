import json
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from lpjdesa.api.dependencies import get_db, get_storage
from lpjdesa.main import app
from lpjdesa.services.fiscal_years import Workspace, YearLocks

VILLAGE = {
    "name": "Sukamaju",
    "sub_district": "Cibinong",
    "district": "Bogor",
    "province": "Jawa Barat",
    "officials": [
        {"role": "Kepala Desa", "name": "H. Ahmad"},
        {"role": "Bendahara Desa", "name": "Budi"},
    ],
}


@pytest.fixture
def client(db_session, storage):
    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_storage] = lambda: storage
    previous = app.state.workspace
    app.state.workspace = Workspace(locks=YearLocks())
    try:
        yield TestClient(app)
    finally:
        app.state.workspace = previous
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_storage, None)


def _sub_field_id(client, field_name="Pembangunan Desa"):
    tree = client.get("/sub-fields").json()
    budget_field = next(item for item in tree if item["name"] == field_name)
    return budget_field["sub_fields"][0]["id"]


def _activity(client, **overrides):
    payload = {
        "sub_field_id": _sub_field_id(client),
        "name": "Jalan Desa",
        "account_code": "2.1.01",
        "status": "ongoing",
        "budget_amount": "10000000",
        "realized_amount": "6000000",
        "executor": "TPK Desa",
    }
    payload.update(overrides)
    return client.post("/activities", json=payload)


def test_health_reports_version_and_year(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["active_year"] is None


def test_no_fiscal_year_yet(client):
    response = client.get("/activities")
    assert response.status_code == 404
    body = response.json()
    assert set(body) == {"detail", "path"}
    assert "tahun anggaran" in body["detail"]


def test_year_village_activity_flow(client):
    created = client.post("/fiscal-years", json={"year": 2026})
    assert created.status_code == 201
    assert created.json() == {"year": 2026, "active": False, "sub_field_count": 14, "activity_count": 0}

    assert client.put("/village", json=VILLAGE).json()["name"] == "Sukamaju"

    saved = _activity(client)
    assert saved.status_code == 201
    assert saved.json()["warnings"] == []
    assert saved.json()["activity"]["field_name"] == "Pembangunan Desa"

    over = _activity(client, name="Drainase", account_code="2.1.02", realized_amount="12000000")
    assert over.json()["warnings"] == ["Realisasi melebihi anggaran"]

    summary = client.get("/fiscal-years/active/summary").json()
    assert summary["fiscal_year"] == 2026
    assert summary["activities"]["count"] == 2
    assert Decimal(summary["activities"]["total_budget"]) == Decimal("20000000")
    assert Decimal(summary["activities"]["total_realized"]) == Decimal("18000000")

    years = client.get("/fiscal-years").json()
    assert years == [{"year": 2026, "active": True, "sub_field_count": 14, "activity_count": 2}]


def test_invalid_activity_is_rejected(client):
    client.post("/fiscal-years", json={"year": 2026})
    response = _activity(client, budget_amount="0")
    assert response.status_code == 422
    assert response.json()["detail"] == "Validation failed."


def test_deleting_sub_field_cascades(client):
    client.post("/fiscal-years", json={"year": 2026})
    activity = _activity(client).json()["activity"]
    expense = client.post("/ledger/expenses", json={"description": "Belanja Material", "amount": "6000000"}).json()
    item = client.post(
        f"/expenses/{expense['id']}/items",
        json={"item_type": "worker_day", "activity_id": activity["id"], "paid_to": "Asep", "unit_price": "100000"},
    )
    assert item.status_code == 201

    report = client.delete(f"/sub-fields/{activity['sub_field_id']}")
    assert report.status_code == 200
    assert report.json()["activities_removed"] == 1
    assert report.json()["items_removed"] == 1
    assert client.get("/activities").json() == []
    assert client.get(f"/activities/{activity['id']}").status_code == 404


def test_unknown_ledger_kind(client):
    client.post("/fiscal-years", json={"year": 2026})
    response = client.post("/ledger/gifts", json={"amount": "1"})
    assert response.status_code == 404
    assert "gifts" in response.json()["detail"]


def test_readiness_and_download(client):
    client.post("/fiscal-years", json={"year": 2026})
    readiness = client.get("/reports/readiness").json()
    assert readiness["can_export"] is False
    assert "Nama desa belum diisi" in readiness["errors"]

    blocked = client.get("/reports/xlsx")
    assert blocked.status_code == 409
    assert "Nama desa belum diisi" in blocked.json()["errors"]

    client.put("/village", json=VILLAGE)
    _activity(client)
    response = client.get("/reports/xlsx")
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="LPJ_Sukamaju_2026.xlsx"'
    assert response.content[:2] == b"PK"

    ledger_book = client.get("/reports/pdf", params={"scope": "ledger"})
    assert ledger_book.status_code == 200
    assert ledger_book.content.startswith(b"%PDF")

    assert client.get("/reports/receipts").status_code == 400


def test_ledger_scope_and_activity_bundle_downloads(client):
    client.post("/fiscal-years", json={"year": 2026})
    client.put("/village", json=VILLAGE)
    client.post("/ledger/incomes", json={"source": "Dana Desa", "amount": "9000000"})

    # A single ledger needs no activities.
    assert client.get("/reports/readiness", params={"scope": "income"}).json()["can_export"] is True
    income = client.get("/reports/docx", params={"scope": "income"})
    assert income.status_code == 200
    assert income.headers["content-disposition"] == 'attachment; filename="Laporan_Pendapatan_Sukamaju_2026.docx"'

    activity_id = _activity(client, report_type="non_physical").json()["activity"]["id"]
    bundle = client.get(f"/reports/activities/{activity_id}/bundle")
    assert bundle.status_code == 200
    assert bundle.headers["content-disposition"] == 'attachment; filename="LPJ_NonFisik_Jalan_Desa.docx"'
    assert bundle.content[:2] == b"PK"

    assert client.get("/reports/activities/424242/bundle").status_code == 404


def test_snapshot_round_trip(client):
    client.post("/fiscal-years", json={"year": 2026})
    client.put("/village", json=VILLAGE)
    _activity(client)

    snapshot = client.get("/backup/snapshot")
    assert snapshot.status_code == 200
    assert 'filename="Backup_LPJ_Sukamaju_2026.json"' in snapshot.headers["content-disposition"]

    files = {"file": ("backup.json", json.dumps(snapshot.json()).encode(), "application/json")}
    restored = client.post("/backup/restore", params={"year": 2027}, files=files)
    assert restored.status_code == 200
    assert restored.json()["inserted"]["activities"] == 1

    switched = client.put("/fiscal-years/active", json={"year": 2027})
    assert switched.json()["activity_count"] == 1
    assert [row["name"] for row in client.get("/activities").json()] == ["Jalan Desa"]


def test_restore_rejects_non_json(client):
    files = {"file": ("backup.json", b"not json", "application/json")}
    response = client.post("/backup/restore", files=files)
    assert response.status_code == 400
    assert response.json()["field"] == "file"
