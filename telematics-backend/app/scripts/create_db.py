"""Create database tables and default lookup rows for the telematics alert backend."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.db import SessionLocal, engine
from app.models import Base, DeliveryMethodLookup, LocalizationLookup


logger = logging.getLogger("scripts.create_db")

DEFAULT_DELIVERY_METHODS = ("EMAIL", "SMS", "WEBHOOK")

# IDs line up with the temperature unit sets used for threshold conversion.
DEFAULT_LOCALIZATIONS = (
    (1, "en-US", "United States", "F"),
    (2, "en-CA", "Canada", "C"),
    (3, "en-GB", "United Kingdom", "C"),
)


def seed_lookups(db: Session) -> int:
    """Insert missing delivery methods and localizations. Returns rows added."""
    added = 0
    existing_methods = {row.method_type for row in db.query(DeliveryMethodLookup).all()}
    for method in DEFAULT_DELIVERY_METHODS:
        if method not in existing_methods:
            db.add(DeliveryMethodLookup(method_type=method, status="ACTIVE"))
            added += 1
    existing_locales = {row.localization_lookup_id for row in db.query(LocalizationLookup).all()}
    for locale_id, code, name, unit in DEFAULT_LOCALIZATIONS:
        if locale_id not in existing_locales:
            db.add(
                LocalizationLookup(
                    localization_lookup_id=locale_id,
                    locale_code=code,
                    locale_name=name,
                    temperature_unit=unit,
                )
            )
            added += 1
    db.commit()
    return added


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        added = seed_lookups(db)
    logger.info("Database tables created/verified. lookup_rows_added=%s", added)


if __name__ == "__main__":
    main()
