import logging
from datetime import datetime, timezone

import pytest
import requests
from conftest import alert_payload

from app.models import Customer
from app.schemas.telematics_alert import TelematicsAlertIn
from app.services import webhook_dispatcher
from app.services.telematics_alerts import create_telematics_alert, update_telematics_alert


class _FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def _configure_webhook(db, url="https://hooks.example.com/alerts", username="svc", password="secret"):
    customer = db.get(Customer, 5)
    customer.web_hook_url = url
    customer.web_hook_userName = username
    customer.web_hook_password = password
    db.commit()


@pytest.fixture(autouse=True)
def _sync_webhooks(monkeypatch):
    monkeypatch.setenv("TELEMATICS_WEBHOOK_ASYNC", "false")


def test_payload_shape():
    payload = TelematicsAlertIn.model_validate(alert_payload(geofence_account_id=[]))
    now = datetime(2024, 1, 15, 10, 0, 0, 123456, tzinfo=timezone.utc)
    body = webhook_dispatcher.build_webhook_payload(payload, 42, [100, 101], now=now).to_json()
    assert body == {
        "customer_id": 5,
        "created_by": 1,
        "telematic_alert_id": 42,
        "event_time": "2024-01-15T10:00:00.123Z",
        "latitude": 40.7128,
        "longitude": -74.006,
        "equipment_id": 100,
        "account_id": 10,
        "alert_type_id": 6,
        "alert_category_id": 1,
    }


def test_dispatch_without_url_is_a_soft_failure(fleet_db):
    payload = webhook_dispatcher.WebhookPayload(customer_id=5, created_by=1, telematic_alert_id=1, event_time="t")
    result = webhook_dispatcher.dispatch_webhook(fleet_db, 5, payload)
    assert result.success is False
    assert "not configured" in result.error


def test_post_uses_basic_auth_and_timeout(fleet_db, monkeypatch):
    _configure_webhook(fleet_db)
    seen = {}

    def _post(url, **kwargs):
        seen["url"] = url
        seen.update(kwargs)
        return _FakeResponse(200, {"received": True})

    monkeypatch.setattr(webhook_dispatcher.requests, "post", _post)
    payload = webhook_dispatcher.WebhookPayload(customer_id=5, created_by=1, telematic_alert_id=7, event_time="t")
    result = webhook_dispatcher.dispatch_webhook(fleet_db, 5, payload)

    assert result.success is True
    assert result.data == {"received": True}
    assert seen["url"] == "https://hooks.example.com/alerts"
    assert seen["auth"].username == "svc"
    assert seen["auth"].password == "secret"
    assert seen["timeout"] == webhook_dispatcher.settings.webhook_timeout_seconds
    assert seen["json"]["telematic_alert_id"] == 7


def test_non_2xx_is_logged_and_returned(fleet_db, monkeypatch, caplog):
    _configure_webhook(fleet_db, username=None, password=None)
    monkeypatch.setattr(webhook_dispatcher.requests, "post", lambda *a, **k: _FakeResponse(503, text="busy"))
    caplog.set_level(logging.ERROR)

    payload = webhook_dispatcher.WebhookPayload(customer_id=5, created_by=1, telematic_alert_id=9, event_time="t")
    result = webhook_dispatcher.dispatch_webhook(fleet_db, 5, payload)

    assert result.success is False
    assert result.status_code == 503
    assert any(webhook_dispatcher.FAILURE_TAG in rec.getMessage() for rec in caplog.records)


def test_timeout_does_not_block_update(fleet_db, monkeypatch, caplog):
    _configure_webhook(fleet_db)
    created = create_telematics_alert(fleet_db, alert_payload())

    def _timeout(*_args, **_kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(webhook_dispatcher.requests, "post", _timeout)
    caplog.set_level(logging.ERROR)

    updated = update_telematics_alert(
        fleet_db,
        created["telematic_alert_id"],
        alert_payload(webhook=True, geofence_alert_name="Still saved"),
    )
    assert updated["alert_name"] == "Still saved"
    failures = [rec for rec in caplog.records if webhook_dispatcher.FAILURE_TAG in rec.getMessage()]
    assert failures
    assert failures[0].name == "webhook"
    assert "read timed out" in failures[0].getMessage()


def test_async_dispatch_runs_on_detached_thread(fleet_db, monkeypatch):
    _configure_webhook(fleet_db)
    monkeypatch.setenv("TELEMATICS_WEBHOOK_ASYNC", "true")
    started = []
    posted = []

    class _InlineThread:
        def __init__(self, target, args, daemon, name):
            self.target, self.args, self.daemon, self.name = target, args, daemon, name

        def start(self):
            started.append(self)
            self.target(*self.args)

    monkeypatch.setattr(webhook_dispatcher.threading, "Thread", _InlineThread)
    monkeypatch.setattr(
        webhook_dispatcher.requests, "post", lambda url, **kwargs: posted.append(kwargs["json"]) or _FakeResponse(204)
    )

    payload = webhook_dispatcher.WebhookPayload(customer_id=5, created_by=1, telematic_alert_id=3, event_time="t")
    assert webhook_dispatcher.schedule_webhook(fleet_db, payload) is None
    assert started[0].daemon is True
    assert posted[0]["telematic_alert_id"] == 3
