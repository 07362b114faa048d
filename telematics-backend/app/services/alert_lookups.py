"""
Alert category, alert type and delivery method lookups.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import DuplicateRecordError
from ..models.lookups import AlertCategoryLookup, AlertTypeLookup, DeliveryMethodLookup
from ..schemas.lookups import AlertCategoryCreate, AlertTypeCreate


logger = logging.getLogger("alert_lookups")

STATUS_ACTIVE = "ACTIVE"


def _is_active(column):
    return func.upper(column) == STATUS_ACTIVE


def _commit_new(db: Session, row, what: str):
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateRecordError(f"{what} already exists") from exc
    db.refresh(row)
    return row


def create_alert_category(db: Session, payload: AlertCategoryCreate) -> AlertCategoryLookup:
    category = AlertCategoryLookup(
        category_name=payload.category_name.strip(),
        status=(payload.status or STATUS_ACTIVE).upper(),
        created_by=payload.created_by,
    )
    category = _commit_new(db, category, "Alert category")
    logger.info("Created alert category id=%s name=%s", category.alert_category_lookup_id, category.category_name)
    return category


def list_alert_categories(db: Session) -> list[AlertCategoryLookup]:
    return (
        db.query(AlertCategoryLookup)
        .filter(_is_active(AlertCategoryLookup.status))
        .order_by(AlertCategoryLookup.alert_category_lookup_id.asc())
        .all()
    )


def get_alert_category(db: Session, category_id: int) -> Optional[AlertCategoryLookup]:
    return db.get(AlertCategoryLookup, category_id)


def create_alert_type(db: Session, payload: AlertTypeCreate) -> AlertTypeLookup:
    alert_type = AlertTypeLookup(
        event_name=payload.event_name.strip(),
        event_type=payload.event_type,
        metric_value=payload.metric_value if payload.metric_value is not None else 0,
        operation_type=payload.operation_type,
        status=(payload.status or STATUS_ACTIVE).upper(),
        customer_id=payload.customer_id,
        alert_category_lookup_id=payload.alert_category_lookup_id,
    )
    alert_type = _commit_new(db, alert_type, "Alert type")
    logger.info("Created alert type id=%s name=%s", alert_type.alert_type_lookup_id, alert_type.event_name)
    return alert_type


def list_alert_types(db: Session, category_id: Optional[int] = None) -> list[AlertTypeLookup]:
    q = db.query(AlertTypeLookup).filter(_is_active(AlertTypeLookup.status))
    if category_id is not None:
        q = q.filter(AlertTypeLookup.alert_category_lookup_id == category_id)
    return q.order_by(AlertTypeLookup.alert_type_lookup_id.asc()).all()


def list_delivery_methods(db: Session) -> list[DeliveryMethodLookup]:
    return (
        db.query(DeliveryMethodLookup)
        .filter(_is_active(DeliveryMethodLookup.status))
        .order_by(DeliveryMethodLookup.delivery_id.asc())
        .all()
    )
