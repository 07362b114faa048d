"""create telematics alert tables

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None


def _tz() -> sa.DateTime:
    return sa.DateTime(timezone=True)


def json_list(name: str) -> sa.Column:
    return sa.Column(name, sa.JSON(), nullable=False, server_default=sa.text("'[]'"))


def upgrade() -> None:
    op.create_table(
        "customer",
        sa.Column("customer_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("web_hook_url", sa.String(length=1024), nullable=True),
        sa.Column("web_hook_userName", sa.String(length=255), nullable=True),
        sa.Column("web_hook_password", sa.String(length=255), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", _tz(), nullable=True),
    )
    op.create_index("ix_customer_customer_name", "customer", ["customer_name"])

    op.create_table(
        "account",
        sa.Column("account_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.customer_id"), nullable=True),
        sa.Column("account_name", sa.String(length=255), nullable=True),
        sa.Column("account_number", sa.String(length=64), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_account_customer_id", "account", ["customer_id"])

    op.create_table(
        "geofence",
        sa.Column("geofence_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.customer_id"), nullable=True),
        sa.Column("geofence_name", sa.String(length=255), nullable=True),
        sa.Column("description", sa.String(length=1024), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_geofence_customer_id", "geofence", ["customer_id"])

    op.create_table(
        "user_role",
        sa.Column("user_role_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.String(length=512), nullable=True),
    )

    op.create_table(
        "user",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(length=128), nullable=True),
        sa.Column("last_name", sa.String(length=128), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.customer_id"), nullable=True),
        sa.Column("assigned_account_ids", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("user_role_id", sa.Integer(), sa.ForeignKey("user_role.user_role_id"), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"])
    op.create_index("ix_user_customer_id", "user", ["customer_id"])

    op.create_table(
        "alert_category_lookup",
        sa.Column("alert_category_lookup_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category_name", sa.String(length=128), nullable=False, unique=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", _tz(), nullable=True),
        sa.Column("updated_at", _tz(), nullable=True),
    )

    op.create_table(
        "alert_type_lookup",
        sa.Column("alert_type_lookup_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_name", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=True),
        sa.Column("metric_value", sa.Float(), nullable=True, server_default=sa.text("0")),
        sa.Column("operation_type", sa.String(length=32), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column(
            "alert_category_lookup_id",
            sa.Integer(),
            sa.ForeignKey("alert_category_lookup.alert_category_lookup_id"),
            nullable=True,
        ),
        sa.Column("created_at", _tz(), nullable=True),
        sa.Column("updated_at", _tz(), nullable=True),
    )
    op.create_index(
        "ix_alert_type_lookup_alert_category_lookup_id", "alert_type_lookup", ["alert_category_lookup_id"]
    )

    op.create_table(
        "delivery_method_lookup",
        sa.Column("delivery_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("method_type", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
    )

    op.create_table(
        "localization_lookup",
        sa.Column("localization_lookup_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("locale_code", sa.String(length=16), nullable=True),
        sa.Column("locale_name", sa.String(length=64), nullable=True),
        sa.Column("temperature_unit", sa.String(length=16), nullable=True),
    )

    op.create_table(
        "equipment_type_lookup",
        sa.Column("equipment_type_lookup_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("equipment_type", sa.String(length=64), nullable=True),
    )
    op.create_table(
        "oem_make_model",
        sa.Column("oem_make_model_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("make", sa.String(length=64), nullable=True),
        sa.Column("model", sa.String(length=64), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
    )
    op.create_table(
        "oem",
        sa.Column("oem_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("manufacturer_code", sa.String(length=32), nullable=True),
        sa.Column("manufacturer_name", sa.String(length=128), nullable=True),
    )
    op.create_table(
        "iot_device_vendor",
        sa.Column("iot_device_vendor_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("vendor_name", sa.String(length=128), nullable=True),
    )
    op.create_table(
        "iot_device",
        sa.Column("iot_device_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "iot_device_vendor_id",
            sa.Integer(),
            sa.ForeignKey("iot_device_vendor.iot_device_vendor_id"),
            nullable=True,
        ),
    )

    op.create_table(
        "equipment",
        sa.Column("equipment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("unit_number", sa.String(length=64), nullable=True),
        sa.Column("customer_unit_number", sa.String(length=64), nullable=True),
        sa.Column("description", sa.String(length=512), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("telematic_device_id", sa.String(length=64), nullable=True),
        sa.Column("trailer_height", sa.String(length=32), nullable=True),
        sa.Column("trailer_length", sa.String(length=32), nullable=True),
        sa.Column("trailer_width", sa.String(length=32), nullable=True),
        sa.Column(
            "equipment_type_lookup_id",
            sa.Integer(),
            sa.ForeignKey("equipment_type_lookup.equipment_type_lookup_id"),
            nullable=True,
        ),
        sa.Column("oem_make_model_id", sa.Integer(), sa.ForeignKey("oem_make_model.oem_make_model_id"), nullable=True),
        sa.Column("oem_id", sa.Integer(), sa.ForeignKey("oem.oem_id"), nullable=True),
    )
    op.create_index("ix_equipment_unit_number", "equipment", ["unit_number"])
    op.create_index("ix_equipment_customer_unit_number", "equipment", ["customer_unit_number"])

    op.create_table(
        "equipment_type_allocation",
        sa.Column("equipment_type_allocation_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.account_id"), nullable=False),
    )
    op.create_index("ix_equipment_type_allocation_account_id", "equipment_type_allocation", ["account_id"])

    op.create_table(
        "equipment_assignment",
        sa.Column("equipment_assignment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("equipment_id", sa.Integer(), sa.ForeignKey("equipment.equipment_id"), nullable=False),
        sa.Column(
            "equipment_type_allocation_id",
            sa.Integer(),
            sa.ForeignKey("equipment_type_allocation.equipment_type_allocation_id"),
            nullable=False,
        ),
    )
    op.create_index("ix_equipment_assignment_equipment_id", "equipment_assignment", ["equipment_id"])
    op.create_index(
        "ix_equipment_assignment_equipment_type_allocation_id",
        "equipment_assignment",
        ["equipment_type_allocation_id"],
    )

    op.create_table(
        "equipment_iot_device",
        sa.Column("equipment_iot_device_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("equipment_id", sa.Integer(), sa.ForeignKey("equipment.equipment_id"), nullable=False),
        sa.Column("iot_device_id", sa.Integer(), sa.ForeignKey("iot_device.iot_device_id"), nullable=False),
    )
    op.create_index("ix_equipment_iot_device_equipment_id", "equipment_iot_device", ["equipment_id"])

    op.create_table(
        "telematic_alert",
        sa.Column("telematic_alert_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("alert_name", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.customer_id"), nullable=True),
        json_list("account_id"),
        json_list("geofence_id"),
        json_list("alert_type_id"),
        sa.Column(
            "alert_category_id",
            sa.Integer(),
            sa.ForeignKey("alert_category_lookup.alert_category_lookup_id"),
            nullable=True,
        ),
        sa.Column("event_low", sa.String(length=32), nullable=True),
        sa.Column("event_high", sa.String(length=32), nullable=True),
        sa.Column(
            "temperature_unit_id",
            sa.Integer(),
            sa.ForeignKey("localization_lookup.localization_lookup_id"),
            nullable=True,
        ),
        sa.Column("converted_type", sa.String(length=4), nullable=True),
        json_list("converted_value"),
        sa.Column("between_hours_from", sa.String(length=16), nullable=True),
        sa.Column("between_hours_to", sa.String(length=16), nullable=True),
        json_list("specific_days"),
        sa.Column("start_date", _tz(), nullable=True),
        sa.Column("end_date", _tz(), nullable=True),
        sa.Column("event_duration", sa.String(length=32), nullable=True),
        json_list("delivery_methods"),
        json_list("textRecipientsObj"),
        json_list("emailRecipientsObj"),
        json_list("recipients"),
        json_list("recipients_email"),
        json_list("recipients_mobile"),
        json_list("recipients_user_ids"),
        sa.Column("webhook", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        json_list("equipment_ids"),
        json_list("selected_equipment_ids"),
        sa.Column("equipmentSelectAll", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_by", sa.Integer(), nullable=True),
        sa.Column("deleted_at", _tz(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.user_id"), nullable=True),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("user.user_id"), nullable=True),
        sa.Column("created_at", _tz(), nullable=True),
        sa.Column("updated_at", _tz(), nullable=True),
    )
    op.create_index("ix_telematic_alert_status", "telematic_alert", ["status"])
    op.create_index("ix_telematic_alert_customer_id", "telematic_alert", ["customer_id"])
    op.create_index("ix_telematic_alert_alert_category_id", "telematic_alert", ["alert_category_id"])
    op.create_index("ix_telematic_alert_is_deleted", "telematic_alert", ["is_deleted"])
    op.create_index("ix_telematic_alert_created_by", "telematic_alert", ["created_by"])
    op.create_index("ix_telematic_alert_created_at", "telematic_alert", ["created_at"])


def downgrade() -> None:
    op.drop_table("telematic_alert")
    op.drop_table("equipment_iot_device")
    op.drop_table("equipment_assignment")
    op.drop_table("equipment_type_allocation")
    op.drop_table("equipment")
    op.drop_table("iot_device")
    op.drop_table("iot_device_vendor")
    op.drop_table("oem")
    op.drop_table("oem_make_model")
    op.drop_table("equipment_type_lookup")
    op.drop_table("localization_lookup")
    op.drop_table("delivery_method_lookup")
    op.drop_table("alert_type_lookup")
    op.drop_table("alert_category_lookup")
    op.drop_table("user")
    op.drop_table("user_role")
    op.drop_table("geofence")
    op.drop_table("account")
    op.drop_table("customer")
