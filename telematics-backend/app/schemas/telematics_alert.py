"""
Pydantic schemas for telematics alert rules.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.dates import coerce_datetime


class TelematicsAlertIn(BaseModel):
    """Create/update body. Field names follow the alert builder UI."""

    model_config = ConfigDict(extra="ignore")

    customer_id: Optional[int] = None
    account_id: List[int] = Field(default_factory=list)
    geofence_account_id: List[int] = Field(default_factory=list)
    events_id: List[int] = Field(default_factory=list)
    events_category_id: Optional[int] = None
    status: Optional[str] = None
    geofence_alert_name: Optional[str] = None

    event_low: Optional[str] = None
    event_high: Optional[str] = None
    temperature_unit_id: Optional[int] = None  # 1=F, 2/3=C

    between_hours_from: Optional[str] = None
    between_hours_to: Optional[str] = None
    specific_days: List[str] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    event_duration: Optional[str] = None

    delivery_methods: List[int] = Field(default_factory=list)
    recipients: List[str] = Field(default_factory=list)
    recipients_email: List[str] = Field(default_factory=list)
    recipients_mobile: List[str] = Field(default_factory=list)
    recipients_user_ids: List[int] = Field(default_factory=list)
    textRecipientsObj: List[Any] = Field(default_factory=list)
    emailRecipientsObj: List[Any] = Field(default_factory=list)

    # Raw user selection; IDs that do not coerce are dropped during resolution
    equipment_ids: List[Any] = Field(default_factory=list)
    equipmentSelectAll: bool = False

    webhook: bool = False
    deleted_by: Optional[int] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    @field_validator(
        "account_id",
        "geofence_account_id",
        "events_id",
        "specific_days",
        "delivery_methods",
        "recipients",
        "recipients_email",
        "recipients_mobile",
        "recipients_user_ids",
        "textRecipientsObj",
        "emailRecipientsObj",
        "equipment_ids",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("event_low", "event_high", "event_duration", mode="before")
    @classmethod
    def _numbers_to_str(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[datetime]:
        return coerce_datetime(value)

    @field_validator("equipmentSelectAll", "webhook", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> Any:
        return False if value is None else value


class ColumnSpecIn(BaseModel):
    label: str
    field: str
    width: Optional[int] = None


class DownloadQueryIn(BaseModel):
    """Download filter plus any listing filters the client sends alongside."""

    model_config = ConfigDict(extra="allow")

    downloadAll: bool = False
    download_ids: Optional[List[int]] = None


class DownloadRequestIn(BaseModel):
    columns: List[ColumnSpecIn] = Field(default_factory=list)
    query: DownloadQueryIn = Field(default_factory=DownloadQueryIn)


class ToggleStatusOut(BaseModel):
    telematic_alert_id: int
    status: str


class AccountScopeIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    account_ids: List[int]
    customer_id: Optional[int] = None


class AccountEventScopeIn(AccountScopeIn):
    event_cat_id: Optional[int] = None

