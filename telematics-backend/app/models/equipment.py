"""
ORM models for equipment and the lookups joined into equipment listings.

Equipment belongs to accounts through ``equipment_assignment`` rows that
point at an ``equipment_type_allocation`` carrying the account ID. The rule
engine only reads these tables.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import Base


class EquipmentTypeLookup(Base):
    __tablename__ = "equipment_type_lookup"

    equipment_type_lookup_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipment_type: Mapped[str | None] = mapped_column(String(64), nullable=True)


class OemMakeModel(Base):
    __tablename__ = "oem_make_model"

    oem_make_model_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    make: Mapped[str | None] = mapped_column(String(64), nullable=True)
    model: Mapped[str | None] = mapped_column(String(64), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Oem(Base):
    __tablename__ = "oem"

    oem_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    manufacturer_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    manufacturer_name: Mapped[str | None] = mapped_column(String(128), nullable=True)


class IotDeviceVendor(Base):
    __tablename__ = "iot_device_vendor"

    iot_device_vendor_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vendor_name: Mapped[str | None] = mapped_column(String(128), nullable=True)


class IotDevice(Base):
    __tablename__ = "iot_device"

    iot_device_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    iot_device_vendor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("iot_device_vendor.iot_device_vendor_id"), nullable=True
    )

    iot_device_vendor_ref: Mapped[IotDeviceVendor | None] = relationship("IotDeviceVendor")


class Equipment(Base):
    __tablename__ = "equipment"

    equipment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unit_number: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    customer_unit_number: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    telematic_device_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    trailer_height: Mapped[str | None] = mapped_column(String(32), nullable=True)
    trailer_length: Mapped[str | None] = mapped_column(String(32), nullable=True)
    trailer_width: Mapped[str | None] = mapped_column(String(32), nullable=True)
    equipment_type_lookup_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("equipment_type_lookup.equipment_type_lookup_id"), nullable=True
    )
    oem_make_model_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("oem_make_model.oem_make_model_id"), nullable=True
    )
    oem_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("oem.oem_id"), nullable=True)

    equipment_type_lookup_ref: Mapped[EquipmentTypeLookup | None] = relationship("EquipmentTypeLookup")
    oem_make_model_ref: Mapped[OemMakeModel | None] = relationship("OemMakeModel")
    oem_ref: Mapped[Oem | None] = relationship("Oem")
    equipment_assignment: Mapped[list[EquipmentAssignment]] = relationship(
        "EquipmentAssignment", back_populates="equipment"
    )
    equipment_iot_device_ref: Mapped[list[EquipmentIotDevice]] = relationship(
        "EquipmentIotDevice", back_populates="equipment"
    )


class EquipmentTypeAllocation(Base):
    __tablename__ = "equipment_type_allocation"

    equipment_type_allocation_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("account.account_id"), index=True)


class EquipmentAssignment(Base):
    __tablename__ = "equipment_assignment"

    equipment_assignment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipment_id: Mapped[int] = mapped_column(Integer, ForeignKey("equipment.equipment_id"), index=True)
    equipment_type_allocation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("equipment_type_allocation.equipment_type_allocation_id"),
        index=True,
    )

    equipment: Mapped[Equipment] = relationship("Equipment", back_populates="equipment_assignment")
    equipment_type_allocation_ref: Mapped[EquipmentTypeAllocation] = relationship("EquipmentTypeAllocation")


class EquipmentIotDevice(Base):
    __tablename__ = "equipment_iot_device"

    equipment_iot_device_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipment_id: Mapped[int] = mapped_column(Integer, ForeignKey("equipment.equipment_id"), index=True)
    iot_device_id: Mapped[int] = mapped_column(Integer, ForeignKey("iot_device.iot_device_id"))

    equipment: Mapped[Equipment] = relationship("Equipment", back_populates="equipment_iot_device_ref")
    iot_device_ref: Mapped[IotDevice] = relationship("IotDevice")
