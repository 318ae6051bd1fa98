"""Tests for the expiry forecast and dashboard metrics."""

from datetime import date

from pantrypal.scanner.forecast import dashboard_metrics, waste_forecast
from pantrypal.scanner.models import InventoryItem

TODAY = date(2026, 1, 10)


def _item(name, expiry, status="fresh", item_id=1):
    return InventoryItem(
        id=item_id,
        household_id=1,
        user_id="u1",
        name=name,
        category="Other",
        quantity=1.0,
        unit="pcs",
        expiry_date=expiry,
        status=status,
        created_at="",
    )


def test_waste_forecast_window():
    items = [
        _item("Yesterday", "2026-01-09"),
        _item("Today", "2026-01-10"),
        _item("Week", "2026-01-17"),
        _item("Later", "2026-01-18"),
        _item("Unknown", None),
    ]
    forecast = waste_forecast(items, today=TODAY)
    assert [i.name for i in forecast.at_risk] == ["Today", "Week"]
    assert forecast.count == 2


def test_waste_forecast_sorted_and_active_only():
    items = [
        _item("B", "2026-01-15"),
        _item("A", "2026-01-12"),
        _item("Eaten", "2026-01-11", status="consumed"),
        _item("Binned", "2026-01-11", status="wasted"),
    ]
    forecast = waste_forecast(items, today=TODAY)
    assert [i.name for i in forecast.at_risk] == ["A", "B"]


def test_dashboard_metrics():
    items = [
        _item("Milk", "2026-01-12", status="expiring_soon"),
        _item("Rice", "2026-06-01"),
        _item("Old", "2026-01-01", status="expired"),
    ]
    metrics = dashboard_metrics(items, today=TODAY)
    assert metrics["total"] == 3
    assert metrics["by_status"]["fresh"] == 1
    assert metrics["by_status"]["expiring_soon"] == 1
    assert metrics["by_status"]["expired"] == 1
    assert metrics["by_status"]["wasted"] == 0
    assert metrics["at_risk"] == [{"name": "Milk", "expiry_date": "2026-01-12"}]
