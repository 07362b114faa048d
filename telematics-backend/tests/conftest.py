import os
import tempfile

# Settings are read at import time; pin a throwaway SQLite file before any app module loads.
_DB_DIR = tempfile.mkdtemp(prefix="telematics_test_")
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{_DB_DIR}/api.db")
os.environ.setdefault("AUTO_CREATE_DB", "true")
os.environ.setdefault("AUTO_RUN_MIGRATIONS", "false")
os.environ.setdefault("TELEMATICS_AUTH_DISABLED", "true")
os.environ.setdefault("TELEMATICS_WEBHOOK_ASYNC", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.models import (
    Account,
    AlertCategoryLookup,
    AlertTypeLookup,
    Base,
    Customer,
    DeliveryMethodLookup,
    Equipment,
    EquipmentAssignment,
    EquipmentTypeAllocation,
    Geofence,
    LocalizationLookup,
    User,
)


def _make_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal()


def seed_fleet(db) -> None:
    """Customer 5 owns account 10 (equipment 100, 101); customer 6 owns account 11 (equipment 102)."""
    db.add_all(
        [
            Customer(customer_id=5, customer_name="Acme Freight"),
            Customer(customer_id=6, customer_name="Other Logistics"),
            Account(account_id=10, customer_id=5, account_name="Acme East", account_number="A-10"),
            Account(account_id=11, customer_id=6, account_name="Other West", account_number="A-11"),
            Geofence(geofence_id=1, customer_id=5, geofence_name="Depot", description="Main depot"),
            EquipmentTypeAllocation(equipment_type_allocation_id=1, account_id=10),
            EquipmentTypeAllocation(equipment_type_allocation_id=2, account_id=11),
            Equipment(equipment_id=100, unit_number="TR-100", customer_unit_number="CU-100", status="Active"),
            Equipment(equipment_id=101, unit_number="TR-101", customer_unit_number="CU-101", status="Inactive"),
            Equipment(equipment_id=102, unit_number="TR-102", customer_unit_number="CU-102", status="Active"),
            EquipmentAssignment(equipment_id=100, equipment_type_allocation_id=1),
            EquipmentAssignment(equipment_id=101, equipment_type_allocation_id=1),
            EquipmentAssignment(equipment_id=102, equipment_type_allocation_id=2),
            User(user_id=1, first_name="Alice", last_name="Smith", email="alice@example.com", customer_id=5),
            User(user_id=2, first_name="Bob", last_name="Jones", email="bob@example.com", customer_id=5),
            AlertCategoryLookup(alert_category_lookup_id=1, category_name="Temperature"),
            AlertCategoryLookup(alert_category_lookup_id=2, category_name="Geofence"),
            AlertTypeLookup(alert_type_lookup_id=6, event_name="Temperature Breach", alert_category_lookup_id=1),
            AlertTypeLookup(alert_type_lookup_id=7, event_name="Door Open", alert_category_lookup_id=2),
            DeliveryMethodLookup(delivery_id=1, method_type="EMAIL"),
            DeliveryMethodLookup(delivery_id=2, method_type="SMS"),
            LocalizationLookup(localization_lookup_id=2, locale_code="en-CA", temperature_unit="C"),
        ]
    )
    db.commit()


@pytest.fixture()
def db():
    session = _make_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fleet_db(db):
    seed_fleet(db)
    return db


def alert_payload(**overrides):
    payload = {
        "customer_id": 5,
        "account_id": [10],
        "geofence_account_id": [1],
        "events_id": [6],
        "events_category_id": 1,
        "status": "ACTIVE",
        "geofence_alert_name": "Reefer temperature",
        "event_low": "0",
        "event_high": "100",
        "temperature_unit_id": 2,
        "delivery_methods": [1],
        "recipients_email": ["ops@example.com"],
        "equipmentSelectAll": True,
        "equipment_ids": [],
        "created_by": 1,
        "updated_by": 1,
    }
    payload.update(overrides)
    return payload


UTC = timezone.utc
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)
FEB_01 = datetime(2024, 2, 1, 9, 30, 0, tzinfo=UTC)
