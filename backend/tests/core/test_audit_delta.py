"""Audit Delta — tests for before/after extraction on updates.

Tests cover:
    - Only changed keys appear, on both sides
    - Keys absent from the patch are never reported
    - Decimal equality is compared before JSON conversion
    - UUID / Decimal / date values become JSON-safe
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from propertyhub.core.audit_delta import build_update_values, jsonable


def test_only_changed_keys_are_reported():
    old = {"city": "Pune", "state": "MH", "description": "x"}
    patch = {"city": "Mumbai", "state": "MH"}
    old_values, new_values = build_update_values(old, patch)
    assert old_values == {"city": "Pune"}
    assert new_values == {"city": "Mumbai"}


def test_identical_patch_yields_empty_delta():
    old = {"city": "Pune"}
    assert build_update_values(old, {"city": "Pune"}) == ({}, {})


def test_keys_outside_patch_are_ignored():
    old = {"city": "Pune", "selling_price": Decimal("100")}
    old_values, new_values = build_update_values(old, {})
    assert old_values == {} and new_values == {}


def test_decimal_scale_difference_is_not_a_change():
    old = {"selling_price": Decimal("10.00")}
    assert build_update_values(old, {"selling_price": Decimal("10")}) == ({}, {})


def test_clearing_a_value_is_a_change():
    old_values, new_values = build_update_values({"micro_market": "BKC"}, {"micro_market": None})
    assert old_values == {"micro_market": "BKC"}
    assert new_values == {"micro_market": None}


def test_values_are_json_safe():
    uid = uuid4()
    old_values, new_values = build_update_values(
        {"sales_id": None, "lease_end_date": date(2030, 1, 1)},
        {"sales_id": uid, "lease_end_date": date(2031, 1, 1)},
    )
    assert new_values["sales_id"] == str(uid)
    assert old_values["lease_end_date"] == "2030-01-01"
    assert new_values["lease_end_date"] == "2031-01-01"


def test_jsonable_handles_nested_structures():
    assert jsonable({"ids": [1, 2], "price": Decimal("1.5")}) == {"ids": [1, 2], "price": "1.5"}
