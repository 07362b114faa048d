"""
Alert rule persistence: create, update, read, list and status toggling.

Rules store account, geofence, alert type and delivery method references
as ID arrays. Reads attach names with one ``IN`` lookup per entity over
the whole page and re-associate them per row in memory.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session, joinedload

from ..core.dates import utc_now
from ..core.errors import AlertValidationError, TelematicsAlertNotFound, log_exception
from ..core.pagination import get_pagination, pagination_meta
from ..models.customer import Account, Geofence
from ..models.lookups import AlertTypeLookup, DeliveryMethodLookup
from ..models.telematic_alert import TelematicAlert
from ..schemas.telematics_alert import TelematicsAlertIn
from .alert_filters import TelematicsAlertFilter, build_order_by, build_where_clause
from .equipment_resolver import EquipmentScope, coerce_ids, resolve_equipment_ids
from .unit_conversion import build_converted_values, converted_type_for
from .webhook_dispatcher import build_webhook_payload, schedule_webhook


logger = logging.getLogger("telematics_alerts")

STATUS_ACTIVE = "ACTIVE"
STATUS_INACTIVE = "INACTIVE"

AlertPayload = Union[TelematicsAlertIn, Mapping[str, Any]]


def coerce_alert_payload(payload: AlertPayload) -> TelematicsAlertIn:
    if isinstance(payload, TelematicsAlertIn):
        return payload
    try:
        return TelematicsAlertIn.model_validate(dict(payload or {}))
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise AlertValidationError(f"Invalid alert payload: {', '.join(fields)}") from exc


def validate_alert_payload(payload: TelematicsAlertIn, *, creating: bool) -> None:
    if creating and not payload.events_id:
        raise AlertValidationError("Missing required fields")
    if not payload.status:
        raise AlertValidationError("Missing required fields")


# -----------------------------------------------------------------------------
# Field builders
# -----------------------------------------------------------------------------


def _condition_fields(payload: TelematicsAlertIn) -> dict[str, Any]:
    return {
        "alert_name": payload.geofence_alert_name,
        "status": payload.status,
        "event_low": payload.event_low,
        "event_high": payload.event_high,
        "temperature_unit_id": payload.temperature_unit_id,
        "converted_type": converted_type_for(payload.events_id),
        "converted_value": build_converted_values(
            payload.events_id,
            payload.temperature_unit_id,
            payload.event_low,
            payload.event_high,
        ),
        "account_id": list(payload.account_id),
        "geofence_id": list(payload.geofence_account_id),
        "alert_type_id": list(payload.events_id),
        "alert_category_id": payload.events_category_id,
    }


def _schedule_fields(payload: TelematicsAlertIn) -> dict[str, Any]:
    return {
        "between_hours_from": payload.between_hours_from,
        "between_hours_to": payload.between_hours_to,
        "specific_days": list(payload.specific_days),
        "start_date": payload.start_date,
        "end_date": payload.end_date,
        "event_duration": payload.event_duration,
    }


def _recipient_fields(payload: TelematicsAlertIn) -> dict[str, Any]:
    return {
        "delivery_methods": list(payload.delivery_methods),
        "textRecipientsObj": list(payload.textRecipientsObj),
        "emailRecipientsObj": list(payload.emailRecipientsObj),
        "recipients": list(payload.recipients),
        "recipients_email": list(payload.recipients_email),
        "recipients_mobile": list(payload.recipients_mobile),
        "recipients_user_ids": list(payload.recipients_user_ids),
    }


def _equipment_fields(payload: TelematicsAlertIn, equipment_ids: list[int]) -> dict[str, Any]:
    return {
        "equipment_ids": list(equipment_ids),
        "selected_equipment_ids": coerce_ids(payload.equipment_ids),
        "equipmentSelectAll": payload.equipmentSelectAll,
    }


def build_alert_fields(payload: TelematicsAlertIn, equipment_ids: list[int]) -> dict[str, Any]:
    """Columns shared by create and update."""
    fields: dict[str, Any] = {}
    fields.update(_condition_fields(payload))
    fields.update(_schedule_fields(payload))
    fields.update(_recipient_fields(payload))
    fields.update(_equipment_fields(payload, equipment_ids))
    fields.update(
        {
            "customer_id": payload.customer_id,
            "webhook": payload.webhook,
            "deleted_by": payload.deleted_by,
            "updated_by": payload.updated_by,
        }
    )
    return fields


def _resolve_for(db: Session, payload: TelematicsAlertIn) -> list[int]:
    scope = EquipmentScope(
        customer_id=payload.customer_id,
        account_ids=list(payload.account_id),
        event_category_id=payload.events_category_id,
    )
    return resolve_equipment_ids(db, scope, payload.equipment_ids, payload.equipmentSelectAll)


def _notify_webhook(db: Session, alert: TelematicAlert, payload: TelematicsAlertIn, equipment_ids: list[int]) -> None:
    if not payload.webhook or not alert.telematic_alert_id:
        return
    try:
        schedule_webhook(db, build_webhook_payload(payload, alert.telematic_alert_id, equipment_ids))
    except Exception as exc:
        log_exception(
            logger,
            "Webhook scheduling failed",
            extra={"alert_id": alert.telematic_alert_id, "customer_id": payload.customer_id},
            exc=exc,
        )


# -----------------------------------------------------------------------------
# Serialization
# -----------------------------------------------------------------------------

ALERT_COLUMNS = (
    "telematic_alert_id",
    "customer_id",
    "account_id",
    "geofence_id",
    "alert_type_id",
    "alert_category_id",
    "status",
    "delivery_methods",
    "between_hours_from",
    "between_hours_to",
    "specific_days",
    "start_date",
    "end_date",
    "event_duration",
    "recipients",
    "recipients_email",
    "recipients_mobile",
    "recipients_user_ids",
    "created_at",
    "updated_at",
    "created_by",
    "updated_by",
    "alert_name",
    "event_low",
    "event_high",
    "converted_type",
    "converted_value",
    "temperature_unit_id",
    "equipment_ids",
    "selected_equipment_ids",
    "textRecipientsObj",
    "emailRecipientsObj",
    "equipmentSelectAll",
    "webhook",
)


def serialize_alert(alert: TelematicAlert) -> dict[str, Any]:
    return {name: getattr(alert, name) for name in ALERT_COLUMNS}


def _user_ref(user) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    return {
        "user_id": user.user_id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
    }


def serialize_alert_detail(alert: TelematicAlert) -> dict[str, Any]:
    data = serialize_alert(alert)
    data["created_by_user"] = _user_ref(alert.created_by_user)
    data["updated_by_user"] = _user_ref(alert.updated_by_user)
    customer = alert.customer
    data["customer"] = (
        {
            "customer_id": customer.customer_id,
            "customer_name": customer.customer_name,
            "web_hook_url": customer.web_hook_url,
        }
        if customer
        else None
    )
    category = alert.alert_category
    data["alert_category"] = (
        {
            "alert_category_lookup_id": category.alert_category_lookup_id,
            "category_name": category.category_name,
        }
        if category
        else None
    )
    unit = alert.temperature_unit
    data["temperature_unit"] = (
        {
            "localization_lookup_id": unit.localization_lookup_id,
            "locale_code": unit.locale_code,
            "locale_name": unit.locale_name,
            "temperature_unit": unit.temperature_unit,
        }
        if unit
        else None
    )
    return data


def _detail_options():
    return (
        joinedload(TelematicAlert.created_by_user),
        joinedload(TelematicAlert.updated_by_user),
        joinedload(TelematicAlert.customer),
        joinedload(TelematicAlert.alert_category),
        joinedload(TelematicAlert.temperature_unit),
    )


def _live_alert_query(db: Session):
    return db.query(TelematicAlert).filter(TelematicAlert.is_deleted == False)  # noqa: E712


# -----------------------------------------------------------------------------
# Batch lookups
# -----------------------------------------------------------------------------


def _id_union(alerts: Iterable[TelematicAlert], attr: str) -> list[int]:
    ids: set[int] = set()
    for alert in alerts:
        ids.update(coerce_ids(getattr(alert, attr)))
    return sorted(ids)


def fetch_alert_type_events(db: Session, alert_type_ids: Iterable[int]) -> list[dict[str, Any]]:
    ids = list(alert_type_ids)
    if not ids:
        return []
    rows = (
        db.query(AlertTypeLookup.alert_type_lookup_id, AlertTypeLookup.event_name)
        .filter(AlertTypeLookup.alert_type_lookup_id.in_(ids))
        .order_by(AlertTypeLookup.alert_type_lookup_id.asc())
        .all()
    )
    return [{"alert_type_lookup_id": row[0], "event_name": row[1]} for row in rows]


def _fetch_delivery_methods(db: Session, ids: list[int]) -> list[dict[str, Any]]:
    if not ids:
        return []
    rows = (
        db.query(DeliveryMethodLookup.delivery_id, DeliveryMethodLookup.method_type)
        .filter(DeliveryMethodLookup.delivery_id.in_(ids))
        .order_by(DeliveryMethodLookup.delivery_id.asc())
        .all()
    )
    return [{"delivery_id": row[0], "method_type": row[1]} for row in rows]


def _fetch_accounts(db: Session, ids: list[int]) -> list[dict[str, Any]]:
    if not ids:
        return []
    rows = (
        db.query(Account.account_id, Account.account_name, Account.account_number)
        .filter(Account.account_id.in_(ids), Account.is_deleted == False)  # noqa: E712
        .order_by(Account.account_id.asc())
        .all()
    )
    return [{"account_id": row[0], "account_name": row[1], "account_number": row[2]} for row in rows]


def _fetch_geofences(db: Session, ids: list[int]) -> list[dict[str, Any]]:
    if not ids:
        return []
    rows = (
        db.query(Geofence.geofence_id, Geofence.geofence_name, Geofence.description)
        .filter(Geofence.geofence_id.in_(ids), Geofence.is_deleted == False)  # noqa: E712
        .order_by(Geofence.geofence_id.asc())
        .all()
    )
    return [{"geofence_id": row[0], "geofence_name": row[1], "description": row[2]} for row in rows]


def _matching(rows: list[dict[str, Any]], key: str, ids: Iterable[Any]) -> list[dict[str, Any]]:
    wanted = set(coerce_ids(ids))
    return [row for row in rows if row[key] in wanted]


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------


def create_telematics_alert(db: Session, payload: AlertPayload) -> dict[str, Any]:
    data = coerce_alert_payload(payload)
    validate_alert_payload(data, creating=True)

    now = utc_now()
    equipment_ids = _resolve_for(db, data)
    fields = build_alert_fields(data, equipment_ids)
    alert = TelematicAlert(
        **fields,
        is_deleted=False,
        deleted_at=None,
        created_by=data.created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(alert)
    db.commit()
    db.refresh(alert)

    _notify_webhook(db, alert, data, equipment_ids)
    logger.info(
        "Created telematics alert id=%s customer_id=%s equipment=%s",
        alert.telematic_alert_id,
        alert.customer_id,
        len(equipment_ids),
    )
    return serialize_alert(alert)


def update_telematics_alert(db: Session, alert_id: int, payload: AlertPayload) -> dict[str, Any]:
    """
    Overwrite every editable column of a rule.

    Identity, soft-delete state and creation metadata are kept. The
    equipment snapshot is recomputed from the submitted selection.
    """
    data = coerce_alert_payload(payload)
    validate_alert_payload(data, creating=False)

    alert = _live_alert_query(db).filter(TelematicAlert.telematic_alert_id == alert_id).first()
    if not alert:
        raise TelematicsAlertNotFound(alert_id)

    equipment_ids = _resolve_for(db, data)
    for key, value in build_alert_fields(data, equipment_ids).items():
        setattr(alert, key, value)
    alert.updated_at = utc_now()
    db.add(alert)
    db.commit()
    db.refresh(alert)

    _notify_webhook(db, alert, data, equipment_ids)
    logger.info("Updated telematics alert id=%s equipment=%s", alert.telematic_alert_id, len(equipment_ids))
    return serialize_alert(alert)


def get_telematics_alert(db: Session, alert_id: int) -> Optional[dict[str, Any]]:
    alert = (
        _live_alert_query(db)
        .options(*_detail_options())
        .filter(TelematicAlert.telematic_alert_id == alert_id)
        .first()
    )
    if not alert:
        return None
    data = serialize_alert_detail(alert)
    data["alert_type_events"] = fetch_alert_type_events(db, coerce_ids(alert.alert_type_id))
    logger.info("Retrieved telematics alert id=%s", alert_id)
    return data


def list_telematics_alerts(
    db: Session,
    customer_id: int,
    page: Any = None,
    per_page: Any = None,
    filters: Optional[TelematicsAlertFilter] = None,
    user_id: Optional[int] = None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    skip, take, page_val, per_page_val = get_pagination(page, per_page)
    filters = filters or TelematicsAlertFilter()

    q = db.query(TelematicAlert).filter(build_where_clause(customer_id, user_id, filters))
    total = q.count()
    alerts = (
        q.options(*_detail_options())
        .order_by(*build_order_by(filters.sort))
        .offset(skip)
        .limit(take)
        .all()
    )

    # One lookup per entity for the whole page
    alert_type_events = fetch_alert_type_events(db, _id_union(alerts, "alert_type_id"))
    delivery_methods = _fetch_delivery_methods(db, _id_union(alerts, "delivery_methods"))
    accounts = _fetch_accounts(db, _id_union(alerts, "account_id"))
    geofences = _fetch_geofences(db, _id_union(alerts, "geofence_id"))

    items = []
    for alert in alerts:
        data = serialize_alert_detail(alert)
        data["alert_type_events"] = _matching(alert_type_events, "alert_type_lookup_id", alert.alert_type_id)
        data["accounts"] = _matching(accounts, "account_id", alert.account_id)
        data["geofence"] = _matching(geofences, "geofence_id", alert.geofence_id)
        data["deliveryMethods"] = _matching(delivery_methods, "delivery_id", alert.delivery_methods)
        items.append(data)

    logger.info("Retrieved %s telematics alerts customer_id=%s user_id=%s", len(items), customer_id, user_id)
    return items, pagination_meta(total, page_val, per_page_val)


def toggle_telematics_alert_status(db: Session, alert_id: int) -> str:
    alert = _live_alert_query(db).filter(TelematicAlert.telematic_alert_id == alert_id).first()
    if not alert:
        raise TelematicsAlertNotFound(alert_id)
    alert.status = STATUS_INACTIVE if alert.status == STATUS_ACTIVE else STATUS_ACTIVE
    alert.updated_at = utc_now()
    db.add(alert)
    db.commit()
    logger.info("Toggled telematics alert id=%s status=%s", alert_id, alert.status)
    return alert.status
