from app.models import Equipment, EquipmentIotDevice, IotDevice, IotDeviceVendor, OemMakeModel
from app.services.equipment_resolver import (
    EquipmentFilter,
    EquipmentScope,
    apply_equipment_selection,
    coerce_ids,
    fetch_equipment_by_accounts,
    fetch_equipment_by_accounts_or_customer_and_events,
    resolve_equipment_ids,
)


def test_coerce_ids_drops_garbage():
    assert coerce_ids([1, "2", "x", None, True, 3.0]) == [1, 2, 3]
    assert coerce_ids(None) == []


def test_select_all_with_exclusions():
    assert apply_equipment_selection([100, 101, 102], [101], True) == [100, 102]


def test_select_all_without_exclusions_keeps_scope():
    assert apply_equipment_selection([100, 101], [], True) == [100, 101]


def test_explicit_selection_is_taken_verbatim():
    assert apply_equipment_selection([100, 101], [101, 555], False) == [101, 555]


def test_nothing_selected_yields_empty():
    assert apply_equipment_selection([100, 101], None, False) == []


def test_resolve_customer_scope_select_all(fleet_db):
    scope = EquipmentScope(customer_id=5, account_ids=[10])
    assert resolve_equipment_ids(fleet_db, scope, [], True) == [100, 101]


def test_resolve_customer_scope_excludes_selection(fleet_db):
    scope = EquipmentScope(customer_id=5)
    resolved = resolve_equipment_ids(fleet_db, scope, ["101"], True)
    assert resolved == [100]
    assert 101 not in resolved


def test_resolve_account_scope_without_customer(fleet_db):
    scope = EquipmentScope(account_ids=[11])
    assert resolve_equipment_ids(fleet_db, scope, None, True) == [102]


def test_resolve_empty_scope(fleet_db):
    assert resolve_equipment_ids(fleet_db, EquipmentScope(), None, True) == []


def test_fetch_equipment_by_accounts_filters_and_pages(fleet_db):
    scope = EquipmentScope(account_ids=[10, 11])
    items, meta = fetch_equipment_by_accounts(fleet_db, scope, 1, 2, {})
    assert [item["equipment_id"] for item in items] == [100, 101]
    assert meta == {"total": 3, "page": 1, "per_page": 2, "total_pages": 2}

    items, meta = fetch_equipment_by_accounts(fleet_db, scope, None, None, {"unit_number": "tr-10", "status": "active"})
    assert [item["equipment_id"] for item in items] == [100, 102]
    assert meta["total"] == 2


def _attach_make_and_vendor(db):
    db.add_all(
        [
            OemMakeModel(oem_make_model_id=1, make="Utility", model="3000R", year=2021),
            IotDeviceVendor(iot_device_vendor_id=1, vendor_name="ORBCOMM"),
            IotDevice(iot_device_id=1, iot_device_vendor_id=1),
            EquipmentIotDevice(equipment_id=101, iot_device_id=1),
        ]
    )
    db.commit()
    equipment = db.get(Equipment, 101)
    equipment.oem_make_model_id = 1
    db.commit()


def test_rich_listing_filters_on_related_rows(fleet_db):
    _attach_make_and_vendor(fleet_db)
    scope = EquipmentScope(customer_id=5, event_category_id=1)

    items, meta = fetch_equipment_by_accounts_or_customer_and_events(
        fleet_db, scope, 1, 20, EquipmentFilter(make="util")
    )
    assert meta["total"] == 1
    row = items[0]
    assert row["equipment_id"] == 101
    assert row["oem_make_model_ref"] == {"make": "Utility", "model": "3000R", "year": 2021}
    assert row["equipment_iot_device_ref"][0]["iot_device_ref"]["iot_device_vendor_ref"]["vendor_name"] == "ORBCOMM"

    items, _ = fetch_equipment_by_accounts_or_customer_and_events(
        fleet_db, scope, 1, 20, EquipmentFilter(vendor_name="orb")
    )
    assert [item["equipment_id"] for item in items] == [101]


def test_global_unit_number_matches_either_unit_column(fleet_db):
    scope = EquipmentScope(customer_id=5)
    items, _ = fetch_equipment_by_accounts_or_customer_and_events(
        fleet_db, scope, 1, 20, EquipmentFilter(global_unit_number="cu-100", unit_number="TR-101")
    )
    assert [item["equipment_id"] for item in items] == [100]
