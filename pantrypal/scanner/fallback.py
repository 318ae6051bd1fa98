"""Deterministic substitute results for when live detection is unavailable."""

from __future__ import annotations

from .models import DetectionCandidate

_FALLBACK_ITEMS: tuple[tuple[str, str, float, str, int], ...] = (
    ("Fresh Bananas", "Produce", 0.95, "Pantry", 5),
    ("Whole Milk", "Dairy", 0.92, "Fridge", 7),
    ("Large Eggs", "Protein", 0.88, "Fridge", 21),
)


def fallback_results() -> list[DetectionCandidate]:
    """Return the fixed fallback candidates. Each call returns fresh objects."""
    return [
        DetectionCandidate(
            name=name,
            category=category,
            confidence=confidence,
            suggested_location=location,
            estimated_expiry_days=days,
        )
        for name, category, confidence, location, days in _FALLBACK_ITEMS
    ]
