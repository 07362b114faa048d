from conftest import alert_payload, seed_fleet
from fastapi.testclient import TestClient

from app.core.db import SessionLocal
from app.core.security import create_access_token
from app.main import create_app
from app.models import Customer
from app.services.alert_export import XLSX_MIME


def _client() -> TestClient:
    app = create_app()
    return TestClient(app)


def _ensure_fleet() -> None:
    with SessionLocal() as db:
        if db.get(Customer, 5) is None:
            seed_fleet(db)


def test_health():
    with _client() as client:
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert client.get("/api/v1/health/db").json() == {"status": "ok"}


def test_alert_lifecycle_over_http():
    with _client() as client:
        _ensure_fleet()
        resp = client.post("/api/v1/telematics-alerts", json=alert_payload(geofence_alert_name="HTTP rule"))
        assert resp.status_code == 200
        created = resp.json()
        alert_id = created["telematic_alert_id"]
        assert created["equipment_ids"] == [100, 101]

        resp = client.get(f"/api/v1/telematics-alerts/{alert_id}")
        assert resp.status_code == 200
        assert resp.json()["alert_name"] == "HTTP rule"

        resp = client.patch(f"/api/v1/telematics-alerts/{alert_id}", json=alert_payload(geofence_alert_name="HTTP edit"))
        assert resp.status_code == 200
        assert resp.json()["alert_name"] == "HTTP edit"

        resp = client.patch(f"/api/v1/telematics-alerts/toggle-status/{alert_id}")
        assert resp.json() == {"telematic_alert_id": alert_id, "status": "INACTIVE"}

        resp = client.get("/api/v1/telematics-alerts/customer/5", params={"alert_name": "http edit", "perPage": 5})
        assert resp.status_code == 200
        body = resp.json()
        assert [alert["telematic_alert_id"] for alert in body["alerts"]] == [alert_id]
        assert body["meta"]["per_page"] == 5
        assert resp.headers["X-Total-Count"] == "1"


def test_event_name_filter_over_http():
    with _client() as client:
        _ensure_fleet()
        door = client.post(
            "/api/v1/telematics-alerts",
            json=alert_payload(geofence_alert_name="Event filter door", events_id=[7], events_category_id=2),
        ).json()
        client.post("/api/v1/telematics-alerts", json=alert_payload(geofence_alert_name="Event filter reefer"))

        resp = client.get(
            "/api/v1/telematics-alerts/customer/5",
            params={"event_name": "door", "alert_name": "event filter"},
        )
        assert resp.status_code == 200
        assert [alert["telematic_alert_id"] for alert in resp.json()["alerts"]] == [door["telematic_alert_id"]]

        resp = client.post(
            "/api/v1/telematics-alerts/download/customer/5",
            params={"event_name": "door", "alert_name": "event filter"},
            json={"columns": [{"label": "Name", "field": "alert_name"}], "query": {"downloadAll": False}},
        )
        assert resp.status_code == 200


def test_error_mapping():
    with _client() as client:
        _ensure_fleet()
        assert client.get("/api/v1/telematics-alerts/987654").status_code == 404
        assert client.patch("/api/v1/telematics-alerts/toggle-status/987654").status_code == 404

        resp = client.post("/api/v1/telematics-alerts", json=alert_payload(events_id=[]))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required fields"

        resp = client.post(
            "/api/v1/telematics-alerts/download/customer/424242",
            json={"columns": [{"label": "Name", "field": "alert_name"}], "query": {}},
        )
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "NO_ALERTS_FOUND"


def test_download_returns_spreadsheet():
    with _client() as client:
        _ensure_fleet()
        client.post("/api/v1/telematics-alerts", json=alert_payload(geofence_alert_name="Export me"))
        resp = client.post(
            "/api/v1/telematics-alerts/download/customer/5",
            params={"alert_name": "export me"},
            json={"columns": [{"label": "Name", "field": "alert_name"}], "query": {"downloadAll": False}},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == XLSX_MIME
        assert "attachment; filename=customer_5_telematics_alerts_" in resp.headers["content-disposition"]
        assert resp.content[:2] == b"PK"


def test_equipment_and_recipient_pickers():
    with _client() as client:
        _ensure_fleet()
        resp = client.post("/api/v1/telematics-alerts/getEquipmentsByAccountIds", json={"account_ids": [10]})
        assert resp.status_code == 200
        assert [row["equipment_id"] for row in resp.json()["equipment"]] == [100, 101]

        resp = client.post(
            "/api/v1/telematics-alerts/fetchEquipmentByAccountsOrCustIdAndEvents",
            params={"global_unit_number": "cu-101"},
            json={"account_ids": [], "customer_id": 5, "event_cat_id": 1},
        )
        assert resp.status_code == 200
        assert [row["equipment_id"] for row in resp.json()["equipment"]] == [101]

        resp = client.post(
            "/api/v1/telematics-alerts/getUsersByAccountIds",
            params={"recipients": "alice"},
            json={"account_ids": [10], "customer_id": 5},
        )
        assert resp.status_code == 200
        assert [user["email"] for user in resp.json()["users"]] == ["alice@example.com"]


def test_lookup_endpoints():
    with _client() as client:
        _ensure_fleet()
        categories = client.get("/api/v1/alert-categories").json()
        assert {"Temperature", "Geofence"} <= {row["category_name"] for row in categories}

        resp = client.post("/api/v1/alert-categories", json={"category_name": "Temperature"})
        assert resp.status_code == 409

        resp = client.post("/api/v1/alert-types", json={"event_name": "Low Battery", "alert_category_lookup_id": 2})
        assert resp.status_code == 200
        assert resp.json()["metric_value"] == 0

        names = [row["event_name"] for row in client.get("/api/v1/alert-types/category/2").json()]
        assert names == ["Door Open", "Low Battery"]
        assert [row["method_type"] for row in client.get("/api/v1/delivery-methods").json()] == ["EMAIL", "SMS"]
        assert client.get("/api/v1/alert-categories/999").status_code == 404


def test_permissions_enforced_when_auth_enabled(monkeypatch):
    monkeypatch.setenv("TELEMATICS_AUTH_DISABLED", "false")
    with _client() as client:
        _ensure_fleet()
        assert client.get("/api/v1/telematics-alerts/customer/5").status_code == 401

        reader = create_access_token(
            sub="reader", user_id=2, customer_id=5, permissions=["read:telematics-activity-feed"]
        )
        headers = {"Authorization": f"Bearer {reader}"}
        assert client.get("/api/v1/telematics-alerts/customer/5", headers=headers).status_code == 200
        resp = client.post("/api/v1/telematics-alerts", json=alert_payload(), headers=headers)
        assert resp.status_code == 403

        writer = create_access_token(
            sub="writer", user_id=2, customer_id=5, permissions=["write:telematics-alerts"]
        )
        resp = client.post(
            "/api/v1/telematics-alerts",
            json=alert_payload(created_by=None, updated_by=None),
            headers={"Authorization": f"Bearer {writer}"},
        )
        assert resp.status_code == 200
        assert resp.json()["created_by"] == 2
