"""Tests for InventoryDB."""

from datetime import date

import pytest

from pantrypal.scanner.db import HouseholdDB, InventoryDB
from pantrypal.scanner.models import NewInventoryItem
from pantrypal.scanner.result import DbErrorKind, Err, Ok


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def household_id(db_path):
    households = HouseholdDB(db_path)
    household = households.create_household("Test", "TEST01").value
    households.close()
    return household.id


@pytest.fixture
def db(db_path):
    d = InventoryDB(db_path)
    yield d
    d.close()


def _item(household_id, name="Milk", expiry="2026-01-10", **kwargs):
    return NewInventoryItem(
        household_id=household_id,
        user_id="u1",
        name=name,
        category="Dairy",
        expiry_date=expiry,
        **kwargs,
    )


def test_add_item(db, household_id):
    result = db.add_item(_item(household_id))
    assert isinstance(result, Ok)
    assert isinstance(result.value, int)

    [item] = db.get_household_items(household_id).value
    assert item.id == result.value
    assert item.name == "Milk"
    assert item.quantity == 1.0
    assert item.unit == "pcs"
    assert item.status == "fresh"
    assert item.expiry_date == "2026-01-10"


def test_add_item_unknown_household(db, household_id):
    result = db.add_item(_item(household_id + 100))
    assert isinstance(result, Err)
    assert result.error.kind is DbErrorKind.CONSTRAINT


def test_add_item_invalid_status(db, household_id):
    result = db.add_item(_item(household_id, status="rotten"))
    assert isinstance(result, Err)
    assert result.error.kind is DbErrorKind.CONSTRAINT


def test_items_ordered_by_expiry(db, household_id):
    db.add_item(_item(household_id, "Late", "2026-03-01"))
    db.add_item(_item(household_id, "None", None))
    db.add_item(_item(household_id, "Early", "2026-01-01"))

    names = [i.name for i in db.get_household_items(household_id).value]
    assert names == ["Early", "Late", "None"]


def test_inactive_items_hidden_by_default(db, household_id):
    db.add_item(_item(household_id, "Milk"))
    db.add_item(_item(household_id, "Old Bread", status="consumed"))
    db.add_item(_item(household_id, "Mouldy Cheese", status="wasted"))

    assert [i.name for i in db.get_household_items(household_id).value] == ["Milk"]
    assert len(db.get_household_items(household_id, include_inactive=True).value) == 3


def test_refresh_statuses(db, household_id):
    today = date(2026, 1, 10)
    db.add_item(_item(household_id, "Gone", "2026-01-09"))
    db.add_item(_item(household_id, "Soon", "2026-01-12"))
    db.add_item(_item(household_id, "Later", "2026-02-01"))
    db.add_item(_item(household_id, "Eaten", "2026-01-01", status="consumed"))

    result = db.refresh_statuses(today=today, expiring_soon_days=3)
    assert result == Ok(2)

    statuses = {
        i.name: i.status
        for i in db.get_household_items(household_id, include_inactive=True).value
    }
    assert statuses == {
        "Gone": "expired",
        "Soon": "expiring_soon",
        "Later": "fresh",
        "Eaten": "consumed",
    }


def test_refresh_statuses_expiring_item_expires(db, household_id):
    db.add_item(_item(household_id, "Soon", "2026-01-12"))
    db.refresh_statuses(today=date(2026, 1, 10))
    db.refresh_statuses(today=date(2026, 1, 13))

    [item] = db.get_household_items(household_id).value
    assert item.status == "expired"
