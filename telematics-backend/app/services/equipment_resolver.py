"""
Equipment scoping for alert rules.

A rule targets the equipment assigned to its accounts (or to every account
of its customer). The user either picks units explicitly or selects all
and lists exclusions; ``resolve_equipment_ids`` turns that selection into
the ``equipment_ids`` snapshot stored on the rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ..core.pagination import get_pagination, pagination_meta
from ..models.customer import Account
from ..models.equipment import (
    Equipment,
    EquipmentAssignment,
    EquipmentIotDevice,
    EquipmentTypeAllocation,
    EquipmentTypeLookup,
    IotDevice,
    IotDeviceVendor,
    Oem,
    OemMakeModel,
)
from ..models.sql import icontains


logger = logging.getLogger("equipment_resolver")


@dataclass
class EquipmentScope:
    customer_id: Optional[int] = None
    account_ids: list[int] = field(default_factory=list)
    event_category_id: Optional[int] = None


class EquipmentFilter(BaseModel):
    """Column filters for the rich equipment listing. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    global_unit_number: Optional[str] = None
    unit_number: Optional[str] = None
    customer_unit_number: Optional[str] = None
    trailer_height: Optional[str] = None
    trailer_length: Optional[str] = None
    trailer_width: Optional[str] = None
    equipment_id: Optional[int] = None
    status: Optional[str] = None
    description: Optional[str] = None
    equipment_type: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    manufacturer_code: Optional[str] = None
    manufacturer_name: Optional[str] = None
    vendor_name: Optional[str] = None


def coerce_ids(values: Optional[Iterable[Any]]) -> list[int]:
    """Return the integer IDs in ``values``; entries that do not coerce are dropped."""
    ids: list[int] = []
    for raw in values or []:
        if raw is None or isinstance(raw, bool):
            continue
        try:
            ids.append(int(raw))
        except (TypeError, ValueError):
            continue
    return ids


def apply_equipment_selection(
    in_scope_ids: Iterable[Any],
    selected_ids: Optional[Iterable[Any]],
    select_all: bool,
) -> list[int]:
    """
    Combine the in-scope equipment with the user's selection.

    ``select_all`` with a selection means "everything except these";
    a selection without ``select_all`` is taken verbatim, even when it
    names equipment outside the scope.
    """
    scope = coerce_ids(in_scope_ids)
    selected = coerce_ids(selected_ids)
    if select_all and selected:
        excluded = set(selected)
        return [equipment_id for equipment_id in scope if equipment_id not in excluded]
    if not select_all and selected:
        return selected
    return scope if select_all else []


def scope_account_ids(db: Session, scope: EquipmentScope) -> list[int]:
    if scope.customer_id:
        rows = db.query(Account.account_id).filter(Account.customer_id == scope.customer_id).all()
        return [row[0] for row in rows]
    return coerce_ids(scope.account_ids)


def _assigned_to_accounts(account_ids: list[int]):
    return Equipment.equipment_assignment.any(
        EquipmentAssignment.equipment_type_allocation_ref.has(EquipmentTypeAllocation.account_id.in_(account_ids))
    )


def list_in_scope_equipment_ids(db: Session, scope: EquipmentScope) -> list[int]:
    account_ids = scope_account_ids(db, scope)
    if not account_ids:
        return []
    rows = (
        db.query(Equipment.equipment_id)
        .filter(_assigned_to_accounts(account_ids))
        .order_by(Equipment.equipment_id.asc())
        .all()
    )
    return [row[0] for row in rows]


def resolve_equipment_ids(
    db: Session,
    scope: EquipmentScope,
    selected_equipment_ids: Optional[Iterable[Any]],
    select_all: bool,
) -> list[int]:
    in_scope = list_in_scope_equipment_ids(db, scope)
    resolved = apply_equipment_selection(in_scope, selected_equipment_ids, bool(select_all))
    logger.debug(
        "Resolved equipment customer_id=%s accounts=%s select_all=%s in_scope=%s resolved=%s",
        scope.customer_id,
        scope.account_ids,
        select_all,
        len(in_scope),
        len(resolved),
    )
    return resolved


def fetch_equipment_by_accounts(
    db: Session,
    scope: EquipmentScope,
    page: Any = None,
    per_page: Any = None,
    filters: Optional[dict[str, Any]] = None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    skip, take, page_val, per_page_val = get_pagination(page, per_page)
    account_ids = scope_account_ids(db, scope)

    q = db.query(Equipment).filter(_assigned_to_accounts(account_ids))
    filters = filters or {}
    if filters.get("unit_number"):
        q = q.filter(icontains(Equipment.unit_number, filters["unit_number"]))
    if filters.get("customer_unit_number"):
        q = q.filter(icontains(Equipment.customer_unit_number, filters["customer_unit_number"]))
    if filters.get("description"):
        q = q.filter(icontains(Equipment.description, filters["description"]))
    if filters.get("status"):
        q = q.filter(func.lower(Equipment.status) == str(filters["status"]).lower())

    total = q.count()
    rows = q.order_by(Equipment.equipment_id.asc()).offset(skip).limit(take).all()
    items = [
        {
            "equipment_id": row.equipment_id,
            "unit_number": row.unit_number,
            "customer_unit_number": row.customer_unit_number,
            "description": row.description,
            "status": row.status,
        }
        for row in rows
    ]
    logger.info("Retrieved %s equipment items for accounts=%s", len(items), len(account_ids))
    return items, pagination_meta(total, page_val, per_page_val)


def _apply_equipment_filter(q, filters: EquipmentFilter):
    if filters.global_unit_number:
        q = q.filter(
            or_(
                icontains(Equipment.unit_number, filters.global_unit_number),
                icontains(Equipment.customer_unit_number, filters.global_unit_number),
            )
        )
    else:
        if filters.unit_number:
            q = q.filter(icontains(Equipment.unit_number, filters.unit_number))
        if filters.customer_unit_number:
            q = q.filter(icontains(Equipment.customer_unit_number, filters.customer_unit_number))

    for name in ("trailer_height", "trailer_length", "trailer_width", "description"):
        value = getattr(filters, name)
        if value:
            q = q.filter(icontains(getattr(Equipment, name), value))
    if filters.equipment_id is not None:
        q = q.filter(Equipment.equipment_id == filters.equipment_id)
    if filters.status:
        q = q.filter(Equipment.status == filters.status)

    if filters.equipment_type:
        q = q.filter(
            Equipment.equipment_type_lookup_ref.has(icontains(EquipmentTypeLookup.equipment_type, filters.equipment_type))
        )
    if filters.make:
        q = q.filter(Equipment.oem_make_model_ref.has(icontains(OemMakeModel.make, filters.make)))
    if filters.model:
        q = q.filter(Equipment.oem_make_model_ref.has(icontains(OemMakeModel.model, filters.model)))
    if filters.year is not None:
        q = q.filter(Equipment.oem_make_model_ref.has(OemMakeModel.year == filters.year))
    if filters.manufacturer_code:
        q = q.filter(Equipment.oem_ref.has(icontains(Oem.manufacturer_code, filters.manufacturer_code)))
    if filters.manufacturer_name:
        q = q.filter(Equipment.oem_ref.has(icontains(Oem.manufacturer_name, filters.manufacturer_name)))
    if filters.vendor_name:
        q = q.filter(
            Equipment.equipment_iot_device_ref.any(
                EquipmentIotDevice.iot_device_ref.has(
                    IotDevice.iot_device_vendor_ref.has(icontains(IotDeviceVendor.vendor_name, filters.vendor_name))
                )
            )
        )
    return q


def _rich_equipment_row(row: Equipment) -> dict[str, Any]:
    type_ref = row.equipment_type_lookup_ref
    make_model = row.oem_make_model_ref
    oem = row.oem_ref
    devices = []
    for link in row.equipment_iot_device_ref or []:
        vendor = link.iot_device_ref.iot_device_vendor_ref if link.iot_device_ref else None
        devices.append(
            {"iot_device_ref": {"iot_device_vendor_ref": {"vendor_name": vendor.vendor_name} if vendor else None}}
        )
    return {
        "equipment_id": row.equipment_id,
        "unit_number": row.unit_number,
        "telematic_device_id": row.telematic_device_id,
        "customer_unit_number": row.customer_unit_number,
        "description": row.description,
        "status": row.status,
        "trailer_height": row.trailer_height,
        "trailer_length": row.trailer_length,
        "trailer_width": row.trailer_width,
        "equipment_type_lookup_ref": {"equipment_type": type_ref.equipment_type} if type_ref else None,
        "oem_make_model_ref": (
            {"make": make_model.make, "model": make_model.model, "year": make_model.year} if make_model else None
        ),
        "oem_ref": (
            {"manufacturer_code": oem.manufacturer_code, "manufacturer_name": oem.manufacturer_name} if oem else None
        ),
        "equipment_iot_device_ref": devices,
    }


def fetch_equipment_by_accounts_or_customer_and_events(
    db: Session,
    scope: EquipmentScope,
    page: Any = None,
    per_page: Any = None,
    filters: Optional[EquipmentFilter] = None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    skip, take, page_val, per_page_val = get_pagination(page, per_page)
    account_ids = scope_account_ids(db, scope)
    if scope.event_category_id is not None:
        # Equipment carries no category relation; the category only narrows the UI event picker.
        logger.debug("Equipment listing requested for event_category_id=%s", scope.event_category_id)

    q = db.query(Equipment).filter(_assigned_to_accounts(account_ids))
    if filters is not None:
        q = _apply_equipment_filter(q, filters)

    total = q.count()
    rows = (
        q.options(
            joinedload(Equipment.equipment_type_lookup_ref),
            joinedload(Equipment.oem_make_model_ref),
            joinedload(Equipment.oem_ref),
            selectinload(Equipment.equipment_iot_device_ref)
            .joinedload(EquipmentIotDevice.iot_device_ref)
            .joinedload(IotDevice.iot_device_vendor_ref),
        )
        .order_by(Equipment.equipment_id.asc())
        .offset(skip)
        .limit(take)
        .all()
    )
    items = [_rich_equipment_row(row) for row in rows]
    logger.info("Retrieved %s equipment items with events for accounts=%s", len(items), len(account_ids))
    return items, pagination_meta(total, page_val, per_page_val)
