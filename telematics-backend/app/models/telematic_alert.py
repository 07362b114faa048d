"""
ORM model for telematics alert rules.

A rule scopes itself to a customer plus optional account and geofence ID
arrays, names its alert types and category, carries thresholds and a
scheduling window, and stores the resolved ``equipment_ids`` snapshot next
to the raw user selection it was computed from. ID arrays are JSON columns
rather than join tables; names are attached at read time with batch
lookups.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import Base
from .customer import Customer
from .lookups import AlertCategoryLookup, LocalizationLookup
from .user import User


class TelematicAlert(Base):
    __tablename__ = "telematic_alert"

    telematic_alert_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    alert_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="ACTIVE", index=True)

    # Scope
    customer_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("customer.customer_id"), nullable=True, index=True)
    account_id: Mapped[list] = mapped_column(JSONB, default=list)
    geofence_id: Mapped[list] = mapped_column(JSONB, default=list)

    # Condition
    alert_type_id: Mapped[list] = mapped_column(JSONB, default=list)
    alert_category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("alert_category_lookup.alert_category_lookup_id"),
        nullable=True,
        index=True,
    )
    event_low: Mapped[str | None] = mapped_column(String(32), nullable=True)
    event_high: Mapped[str | None] = mapped_column(String(32), nullable=True)
    temperature_unit_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("localization_lookup.localization_lookup_id"), nullable=True
    )
    converted_type: Mapped[str | None] = mapped_column(String(4), nullable=True)
    converted_value: Mapped[list] = mapped_column(JSONB, default=list)

    # Scheduling window
    between_hours_from: Mapped[str | None] = mapped_column(String(16), nullable=True)
    between_hours_to: Mapped[str | None] = mapped_column(String(16), nullable=True)
    specific_days: Mapped[list] = mapped_column(JSONB, default=list)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    event_duration: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Delivery
    delivery_methods: Mapped[list] = mapped_column(JSONB, default=list)
    textRecipientsObj: Mapped[list] = mapped_column(JSONB, default=list)
    emailRecipientsObj: Mapped[list] = mapped_column(JSONB, default=list)
    recipients: Mapped[list] = mapped_column(JSONB, default=list)
    recipients_email: Mapped[list] = mapped_column(JSONB, default=list)
    recipients_mobile: Mapped[list] = mapped_column(JSONB, default=list)
    recipients_user_ids: Mapped[list] = mapped_column(JSONB, default=list)
    webhook: Mapped[bool] = mapped_column(Boolean, default=False)

    # Equipment targeting
    equipment_ids: Mapped[list] = mapped_column(JSONB, default=list)
    selected_equipment_ids: Mapped[list] = mapped_column(JSONB, default=list)
    equipmentSelectAll: Mapped[bool] = mapped_column(Boolean, default=False)

    # Lifecycle
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    deleted_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("user.user_id"), nullable=True, index=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("user.user_id"), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    customer: Mapped[Customer | None] = relationship("Customer")
    alert_category: Mapped[AlertCategoryLookup | None] = relationship("AlertCategoryLookup")
    temperature_unit: Mapped[LocalizationLookup | None] = relationship("LocalizationLookup")
    created_by_user: Mapped[User | None] = relationship("User", foreign_keys=[created_by])
    updated_by_user: Mapped[User | None] = relationship("User", foreign_keys=[updated_by])
