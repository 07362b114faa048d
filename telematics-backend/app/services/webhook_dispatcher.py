"""
Per-customer webhook delivery for alert rule changes.

Customers may register a webhook URL (with optional Basic-Auth
credentials). Every create/update of a rule with ``webhook`` set posts a
small JSON summary there. Delivery is best effort: failures are logged
under ``WEBHOOK_DISPATCH_FAILED`` and returned as a result object, never
raised into the write path.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import requests
from requests.auth import HTTPBasicAuth
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.customer import Customer


logger = logging.getLogger("webhook")

FAILURE_TAG = "WEBHOOK_DISPATCH_FAILED"

# Rule changes have no position of their own; receivers expect a coordinate pair.
DEFAULT_LATITUDE = 40.7128
DEFAULT_LONGITUDE = -74.006


@dataclass
class WebhookPayload:
    customer_id: Optional[int]
    created_by: int
    telematic_alert_id: int
    event_time: str
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    equipment_id: Optional[int] = None
    account_id: Optional[int] = None
    geofence_id: Optional[int] = None
    alert_type_id: Optional[int] = None
    alert_category_id: Optional[int] = None

    def to_json(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class WebhookResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class WebhookTarget:
    url: str
    username: Optional[str] = None
    password: Optional[str] = None


def _first(values: Optional[Sequence[Any]]) -> Optional[Any]:
    return values[0] if values else None


def _isoformat_z(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def build_webhook_payload(
    payload: Any,
    alert_id: int,
    equipment_ids: Sequence[int],
    now: Optional[datetime] = None,
) -> WebhookPayload:
    """``event_time`` is the dispatch time, not when any telemetry event happened."""
    now = now or datetime.now(timezone.utc)
    return WebhookPayload(
        customer_id=payload.customer_id,
        created_by=payload.created_by or 0,
        telematic_alert_id=alert_id,
        event_time=_isoformat_z(now),
        equipment_id=_first(equipment_ids),
        account_id=_first(payload.account_id),
        geofence_id=_first(payload.geofence_account_id),
        alert_type_id=_first(payload.events_id),
        alert_category_id=payload.events_category_id,
    )


def load_webhook_target(db: Session, customer_id: Optional[int]) -> Optional[WebhookTarget]:
    if customer_id is None:
        return None
    customer = db.get(Customer, customer_id)
    if not customer or not (customer.web_hook_url or "").strip():
        return None
    return WebhookTarget(
        url=customer.web_hook_url.strip(),
        username=customer.web_hook_userName,
        password=customer.web_hook_password,
    )


def _log_failure(payload: WebhookPayload, error: str) -> None:
    logger.error(
        "%s customer_id=%s alert_id=%s err=%s",
        FAILURE_TAG,
        payload.customer_id,
        payload.telematic_alert_id,
        error,
    )


def post_webhook(target: WebhookTarget, payload: WebhookPayload) -> WebhookResult:
    auth = None
    if target.username and target.password:
        auth = HTTPBasicAuth(target.username, target.password)
    try:
        response = requests.post(
            target.url,
            json=payload.to_json(),
            auth=auth,
            headers={"Content-Type": "application/json"},
            timeout=settings.webhook_timeout_seconds,
        )
    except requests.RequestException as exc:
        _log_failure(payload, str(exc) or exc.__class__.__name__)
        return WebhookResult(success=False, error=str(exc) or exc.__class__.__name__)

    if response.status_code // 100 != 2:
        error = f"HTTP {response.status_code}: {(response.text or '')[:200]}"
        _log_failure(payload, error)
        return WebhookResult(success=False, error=error, status_code=response.status_code)

    try:
        data = response.json()
    except ValueError:
        data = response.text
    logger.info(
        "Webhook delivered customer_id=%s alert_id=%s status=%s",
        payload.customer_id,
        payload.telematic_alert_id,
        response.status_code,
    )
    return WebhookResult(success=True, data=data, status_code=response.status_code)


def dispatch_webhook(db: Session, customer_id: Optional[int], payload: WebhookPayload) -> WebhookResult:
    target = load_webhook_target(db, customer_id)
    if target is None:
        logger.info("Webhook skipped customer_id=%s: no URL configured", customer_id)
        return WebhookResult(success=False, error="Customer webhook URL not configured")
    return post_webhook(target, payload)


def _webhook_async_enabled() -> bool:
    return os.getenv("TELEMATICS_WEBHOOK_ASYNC", "true").lower() in {"1", "true", "yes"}


def _post_detached(target: WebhookTarget, payload: WebhookPayload) -> None:
    try:
        post_webhook(target, payload)
    except Exception as exc:
        _log_failure(payload, repr(exc))


def schedule_webhook(db: Session, payload: WebhookPayload) -> Optional[WebhookResult]:
    """
    Deliver ``payload`` to the customer's webhook after the rule is committed.

    The target is looked up on the request session; the POST itself runs on
    a daemon thread so callers never wait on the receiver. With
    ``TELEMATICS_WEBHOOK_ASYNC=false`` the POST runs inline and its result is
    returned.
    """
    target = load_webhook_target(db, payload.customer_id)
    if target is None:
        logger.info("Webhook skipped customer_id=%s: no URL configured", payload.customer_id)
        return WebhookResult(success=False, error="Customer webhook URL not configured")
    if not _webhook_async_enabled():
        return post_webhook(target, payload)
    thread = threading.Thread(
        target=_post_detached,
        args=(target, payload),
        daemon=True,
        name=f"webhook-{payload.telematic_alert_id}",
    )
    thread.start()
    return None
