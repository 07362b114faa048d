"""
SQLAlchemy model base class for the telematics alert backend.

This package defines ORM models for alert rules, the lookup tables they
reference, and the read-only customer/account/equipment/user entities the
rule engine queries. All models should inherit from the declarative
`Base` defined here.
"""

from __future__ import annotations

from sqlalchemy import JSON
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import JSONB


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return compiler.process(JSON(), **kw)


from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


from .customer import Customer, Account, Geofence  # noqa: E402,F401
from .user import User, UserRole  # noqa: E402,F401
from .lookups import (  # noqa: E402,F401
    AlertCategoryLookup,
    AlertTypeLookup,
    DeliveryMethodLookup,
    LocalizationLookup,
)
from .equipment import (  # noqa: E402,F401
    Equipment,
    EquipmentAssignment,
    EquipmentTypeAllocation,
    EquipmentTypeLookup,
    OemMakeModel,
    Oem,
    IotDeviceVendor,
    IotDevice,
    EquipmentIotDevice,
)
from .telematic_alert import TelematicAlert  # noqa: E402,F401

__all__ = [
    "Base",

    # Alert rules
    "TelematicAlert",

    # Lookups
    "AlertCategoryLookup",
    "AlertTypeLookup",
    "DeliveryMethodLookup",
    "LocalizationLookup",

    # Customer scope
    "Customer",
    "Account",
    "Geofence",

    # Users
    "User",
    "UserRole",

    # Equipment
    "Equipment",
    "EquipmentAssignment",
    "EquipmentTypeAllocation",
    "EquipmentTypeLookup",
    "OemMakeModel",
    "Oem",
    "IotDeviceVendor",
    "IotDevice",
    "EquipmentIotDevice",
]
