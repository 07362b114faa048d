"""
Lookup tables referenced by ID arrays on alert rules.

Rules never embed these rows; names are joined in at read time.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


class AlertCategoryLookup(Base):
    __tablename__ = "alert_category_lookup"

    alert_category_lookup_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_name: Mapped[str] = mapped_column(String(128), unique=True)
    status: Mapped[str] = mapped_column(String(16), default="ACTIVE")
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)


class AlertTypeLookup(Base):
    __tablename__ = "alert_type_lookup"

    alert_type_lookup_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_name: Mapped[str] = mapped_column(String(128))
    event_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    metric_value: Mapped[float | None] = mapped_column(Float, nullable=True, default=0)
    operation_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="ACTIVE")
    customer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    alert_category_lookup_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("alert_category_lookup.alert_category_lookup_id"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)


class DeliveryMethodLookup(Base):
    __tablename__ = "delivery_method_lookup"

    delivery_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    method_type: Mapped[str] = mapped_column(String(64))  # EMAIL | SMS | WEBHOOK
    status: Mapped[str] = mapped_column(String(16), default="ACTIVE")


class LocalizationLookup(Base):
    __tablename__ = "localization_lookup"

    localization_lookup_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    locale_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    locale_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    temperature_unit: Mapped[str | None] = mapped_column(String(16), nullable=True)
