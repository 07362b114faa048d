"""
Query filters and sort orders for alert rule listings.

Listing endpoints accept loosely typed query strings. They are parsed into
``TelematicsAlertFilter`` once, then ``build_where_clause`` translates the
populated fields into a single SQLAlchemy predicate. Every term is AND-ed;
the recipient search is an OR across the email and mobile arrays.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import and_, or_, select
from sqlalchemy.sql.expression import ColumnElement

from ..core.dates import coerce_datetime, end_of_day, start_of_day
from ..core.sorting import parse_sort
from ..models.customer import Customer
from ..models.lookups import AlertCategoryLookup, AlertTypeLookup
from ..models.sql import icontains, json_array_contains
from ..models.telematic_alert import TelematicAlert
from ..models.user import User


class TelematicsAlertFilter(BaseModel):
    """Typed view of the listing query string."""

    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = None
    event_duration: Optional[str] = None
    between_hours_from: Optional[str] = None
    between_hours_to: Optional[str] = None

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    customer_name: Optional[str] = None
    event_name: Optional[str] = None
    category_name: Optional[str] = None
    alert_category_id: Optional[int] = None

    delivery_method: Optional[int] = None
    alert_name: Optional[str] = None

    # Actor display-name searches, not user IDs
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    updated_from: Optional[datetime] = None
    updated_to: Optional[datetime] = None

    recipients: Optional[str] = None
    sort: Optional[str] = None

    @field_validator(
        "start_date",
        "end_date",
        "created_from",
        "created_to",
        "updated_from",
        "updated_to",
        mode="before",
    )
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[datetime]:
        return coerce_datetime(value)

    @field_validator("alert_category_id", "delivery_method", mode="before")
    @classmethod
    def _parse_ids(cls, value: Any) -> Optional[int]:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator(
        "status",
        "event_duration",
        "between_hours_from",
        "between_hours_to",
        "customer_name",
        "event_name",
        "category_name",
        "alert_name",
        "created_by",
        "updated_by",
        "recipients",
        "sort",
        mode="before",
    )
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @classmethod
    def from_query(cls, *sources: Optional[Mapping[str, Any]]) -> "TelematicsAlertFilter":
        """Merge query mappings left to right; later sources win."""
        merged: dict[str, Any] = {}
        for source in sources:
            if source:
                merged.update(source)
        return cls.model_validate(merged)


def _actor_name_matches(relationship, term: str):
    return relationship.has(or_(icontains(User.first_name, term), icontains(User.last_name, term)))


def build_where_clause(
    customer_id: int,
    user_id: Optional[int] = None,
    filters: Optional[TelematicsAlertFilter] = None,
) -> ColumnElement[bool]:
    clauses: list[ColumnElement[bool]] = [
        TelematicAlert.customer_id == customer_id,
        TelematicAlert.is_deleted == False,  # noqa: E712
    ]
    if user_id:
        clauses.append(TelematicAlert.created_by == user_id)
    if filters is None:
        return and_(*clauses)

    for name in ("status", "event_duration", "between_hours_from", "between_hours_to"):
        value = getattr(filters, name)
        if value:
            clauses.append(getattr(TelematicAlert, name) == value)

    if filters.start_date:
        clauses.append(TelematicAlert.start_date >= filters.start_date)
    if filters.end_date:
        clauses.append(TelematicAlert.end_date <= filters.end_date)

    if filters.customer_name:
        clauses.append(TelematicAlert.customer.has(icontains(Customer.customer_name, filters.customer_name)))
    if filters.event_name:
        matching_type = (
            select(AlertTypeLookup.alert_type_lookup_id)
            .where(
                icontains(AlertTypeLookup.event_name, filters.event_name),
                json_array_contains(TelematicAlert.alert_type_id, AlertTypeLookup.alert_type_lookup_id),
            )
            .exists()
        )
        clauses.append(matching_type)
    if filters.category_name:
        clauses.append(
            TelematicAlert.alert_category.has(icontains(AlertCategoryLookup.category_name, filters.category_name))
        )
    if filters.alert_category_id is not None:
        clauses.append(TelematicAlert.alert_category_id == filters.alert_category_id)

    if filters.delivery_method is not None:
        clauses.append(json_array_contains(TelematicAlert.delivery_methods, filters.delivery_method))
    if filters.alert_name:
        clauses.append(icontains(TelematicAlert.alert_name, filters.alert_name))

    if filters.created_by:
        clauses.append(_actor_name_matches(TelematicAlert.created_by_user, filters.created_by))
    if filters.updated_by:
        clauses.append(_actor_name_matches(TelematicAlert.updated_by_user, filters.updated_by))

    if filters.created_from:
        clauses.append(TelematicAlert.created_at >= start_of_day(filters.created_from))
    if filters.created_to:
        clauses.append(TelematicAlert.created_at <= end_of_day(filters.created_to))
    if filters.updated_from:
        clauses.append(TelematicAlert.updated_at >= start_of_day(filters.updated_from))
    if filters.updated_to:
        clauses.append(TelematicAlert.updated_at <= end_of_day(filters.updated_to))

    if filters.recipients:
        clauses.append(
            or_(
                json_array_contains(TelematicAlert.recipients_email, filters.recipients),
                json_array_contains(TelematicAlert.recipients_mobile, filters.recipients),
            )
        )
    return and_(*clauses)


def _related_name(column, key_column, foreign_key):
    return select(column).where(key_column == foreign_key).correlate(TelematicAlert).scalar_subquery()


TELEMATICS_ALERT_SORT_FIELDS: dict[str, Any] = {
    "alert_name": TelematicAlert.alert_name,
    "status": TelematicAlert.status,
    "event_duration": TelematicAlert.event_duration,
    "between_hours_from": TelematicAlert.between_hours_from,
    "between_hours_to": TelematicAlert.between_hours_to,
    "start_date": TelematicAlert.start_date,
    "end_date": TelematicAlert.end_date,
    "created_at": TelematicAlert.created_at,
    "updated_at": TelematicAlert.updated_at,
    "customer": _related_name(Customer.customer_name, Customer.customer_id, TelematicAlert.customer_id),
    "created_by": _related_name(User.first_name, User.user_id, TelematicAlert.created_by),
    "updated_by": _related_name(User.first_name, User.user_id, TelematicAlert.updated_by),
    "category": _related_name(
        AlertCategoryLookup.category_name,
        AlertCategoryLookup.alert_category_lookup_id,
        TelematicAlert.alert_category_id,
    ),
}


def build_order_by(
    sort: Optional[str],
    allowed: Mapping[str, Any] = TELEMATICS_ALERT_SORT_FIELDS,
    default: str = "created_at",
) -> list[ColumnElement]:
    """Order clauses for ``sort``; falls back to ``default`` descending."""
    order = []
    for field_name, direction in parse_sort(sort, allowed.keys()):
        column = allowed[field_name]
        order.append(column.desc() if direction == "desc" else column.asc())
    if not order:
        order.append(allowed[default].desc())
    return order
