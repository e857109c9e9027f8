from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Config
from sql_store import SqlStore
from store import MemoryStore

TOKEN = "test-secret"


@pytest.fixture(params=["memory", "sql"])
def test_store(request, tmp_path):
    """Create a fresh record store for each backend."""
    if request.param == "memory":
        store = MemoryStore()
    else:
        store = SqlStore.from_url(f"sqlite:///{tmp_path / 'test.db'}")
    yield store
    store.close()


@pytest.fixture(scope="function")
def client(test_store):
    """Create an authenticated test client over a seeded store."""
    app = create_app(Config(api_token=TOKEN), store=test_store)
    with TestClient(app) as test_client:
        test_client.headers.update({"Authorization": f"Bearer {TOKEN}"})
        yield test_client


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "TimeKiosk Sync Server Running"}


def test_time_endpoint(client):
    response = client.get("/time")
    assert response.status_code == 200
    parsed = datetime.fromisoformat(response.json()["time"])
    assert parsed.tzinfo is not None


def test_create_employee_then_get(client):
    """Create an employee and read it back."""
    response = client.post("/employees", json={"id": "EMP010", "name": "Dana", "pin": "9999"})
    assert response.status_code == 201
    created = response.json()
    assert created["id"] == "EMP010"
    assert created["name"] == "Dana"
    assert created["archived"] is False
    assert created["autoDeductLunch"] is False
    assert created["imageUrl"] is None

    response = client.get("/employees/EMP010")
    assert response.status_code == 200
    assert response.json() == created


def test_create_duplicate_id_conflicts(client):
    """Create never overwrites an existing record."""
    response = client.post("/employees", json={"id": "EMP001", "name": "Impostor", "pin": "0000"})
    assert response.status_code == 409

    response = client.get("/employees/EMP001")
    assert response.json()["name"] == "Alice Johnson"


def test_create_missing_required_fields(client):
    response = client.post("/employees", json={"id": "EMP011", "name": "No Pin"})
    assert response.status_code == 422

    response = client.post("/locations", json={"name": "No Id"})
    assert response.status_code == 422


def test_put_creates_missing_location(client):
    """Upsert on a new id creates the record."""
    response = client.put("/locations/LOC099", json={"name": "Annex"})
    assert response.status_code == 200

    response = client.get("/locations/LOC099")
    assert response.status_code == 200
    assert response.json() == {"id": "LOC099", "name": "Annex", "abbreviation": None}


def test_put_path_id_wins_over_body_id(client):
    response = client.put("/locations/LOC050", json={"id": "LOC051", "name": "Dock"})
    assert response.status_code == 200
    assert response.json()["id"] == "LOC050"

    assert client.get("/locations/LOC051").status_code == 404


def test_delete_department(client):
    """Delete a seeded department."""
    response = client.delete("/departments/DEP001")
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    response = client.get("/departments/DEP001")
    assert response.status_code == 404


def test_delete_missing_record(client):
    response = client.delete("/departments/DEP999")
    assert response.status_code == 404


def test_settings_cannot_be_deleted(client):
    response = client.delete("/settings/GLOBAL_SETTINGS")
    assert response.status_code == 405
    assert client.get("/settings/GLOBAL_SETTINGS").status_code == 200


def test_settings_singleton_defaults(client):
    response = client.get("/settings")
    assert response.status_code == 200
    settings = response.json()
    assert len(settings) == 1
    assert settings[0]["id"] == "GLOBAL_SETTINGS"
    assert settings[0]["weekStartDay"] == 0
    assert settings[0]["clockFormat"] == "12h"


def test_settings_validation(client):
    response = client.put("/settings/GLOBAL_SETTINGS", json={"weekStartDay": 7})
    assert response.status_code == 422

    response = client.put("/settings/GLOBAL_SETTINGS", json={"clockFormat": "24h", "weekStartDay": 1})
    assert response.status_code == 200
    assert response.json()["clockFormat"] == "24h"


def test_settings_only_accepts_the_global_id(client):
    response = client.put("/settings/OTHER", json={"weekStartDay": 1})
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["path", "record_id"]

    response = client.post("/settings", json={"id": "OTHER"})
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "id"]

    assert [s["id"] for s in client.get("/settings").json()] == ["GLOBAL_SETTINGS"]


def test_list_employees(client):
    response = client.get("/employees")
    assert response.status_code == 200
    ids = [e["id"] for e in response.json()]
    assert ids == ["EMP001", "EMP002", "EMP003"]


def test_time_record_breaks_default_to_empty(client):
    response = client.post(
        "/time_records",
        json={"id": "TR100", "employeeId": "EMP002", "clockIn": "2024-01-16T07:55:00Z"},
    )
    assert response.status_code == 201
    record = response.json()
    assert record["breaks"] == []
    assert record["clockOut"] is None


def test_time_record_rejects_bad_timestamp(client):
    response = client.post(
        "/time_records",
        json={"id": "TR101", "employeeId": "EMP002", "clockIn": "yesterday"},
    )
    assert response.status_code == 422


@pytest.mark.parametrize(
    "method,path,body",
    [
        ("get", "/widgets", None),
        ("get", "/widgets/W1", None),
        ("post", "/widgets", {"id": "W1"}),
        ("put", "/widgets/W1", {"name": "x"}),
        ("delete", "/widgets/W1", None),
        ("post", "/sync/widgets/pull", {"checkpoint": None}),
        ("post", "/sync/widgets/push", []),
    ],
)
def test_unknown_collection_is_not_found(client, method, path, body):
    kwargs = {"json": body} if body is not None else {}
    response = client.request(method.upper(), path, **kwargs)
    assert response.status_code == 404
    assert response.json()["detail"] == "Collection not found"
