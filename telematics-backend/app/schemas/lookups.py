"""
Pydantic schemas for alert lookup tables.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AlertCategoryCreate(BaseModel):
    category_name: str = Field(..., min_length=1, max_length=128)
    status: Optional[str] = None
    created_by: Optional[int] = None


class AlertCategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    alert_category_lookup_id: int
    category_name: str
    status: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AlertTypeCreate(BaseModel):
    event_name: str = Field(..., min_length=1, max_length=128)
    event_type: Optional[str] = None
    metric_value: Optional[float] = None
    operation_type: Optional[str] = None
    status: Optional[str] = None
    customer_id: Optional[int] = None
    alert_category_lookup_id: Optional[int] = None


class AlertTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    alert_type_lookup_id: int
    event_name: str
    event_type: Optional[str] = None
    metric_value: Optional[float] = None
    operation_type: Optional[str] = None
    status: str
    customer_id: Optional[int] = None
    alert_category_lookup_id: Optional[int] = None


class DeliveryMethodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    delivery_id: int
    method_type: str
    status: str
