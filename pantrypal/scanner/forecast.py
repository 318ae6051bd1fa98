"""Expiry forecast feeding the dashboard metrics view."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta

from .models import INACTIVE_STATUSES, ITEM_STATUSES, InventoryItem


@dataclass
class WasteForecast:
    at_risk: list[InventoryItem] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.at_risk)


def waste_forecast(
    items: list[InventoryItem], today: date | None = None, horizon_days: int = 7
) -> WasteForecast:
    """Items still in stock that expire between today and ``horizon_days`` out.

    Sorted soonest first.
    """
    today = today or date.today()
    horizon = today + timedelta(days=horizon_days)

    at_risk = []
    for item in items:
        if not item.expiry_date or item.status in INACTIVE_STATUSES:
            continue
        expiry = date.fromisoformat(item.expiry_date)
        if today <= expiry <= horizon:
            at_risk.append(item)
    at_risk.sort(key=lambda i: i.expiry_date)
    return WasteForecast(at_risk=at_risk)


def dashboard_metrics(items: list[InventoryItem], today: date | None = None) -> dict:
    counts = Counter(item.status for item in items)
    forecast = waste_forecast(items, today=today)
    return {
        "total": len(items),
        "by_status": {status: counts.get(status, 0) for status in ITEM_STATUSES},
        "at_risk": [
            {"name": i.name, "expiry_date": i.expiry_date} for i in forecast.at_risk
        ],
    }
