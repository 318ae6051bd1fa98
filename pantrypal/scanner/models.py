"""Domain records for detection candidates and the household store."""

from __future__ import annotations

from dataclasses import dataclass

STORAGE_LOCATIONS = ("Pantry", "Fridge", "Freezer")
DEFAULT_LOCATION = "Pantry"
DEFAULT_CATEGORY = "Other"

ITEM_STATUSES = ("fresh", "expiring_soon", "expired", "consumed", "wasted")
INACTIVE_STATUSES = ("consumed", "wasted")


@dataclass
class DetectionCandidate:
    name: str
    category: str
    confidence: float  # 0.0〜1.0, scan-time filter only
    suggested_location: str  # Pantry / Fridge / Freezer
    estimated_expiry_days: int  # 1〜365

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "confidence": self.confidence,
            "suggestedLocation": self.suggested_location,
            "estimatedExpiryDays": self.estimated_expiry_days,
        }


@dataclass
class Identity:
    user_id: str
    display_name: str = ""


@dataclass
class Household:
    id: int
    name: str
    invite_code: str
    currency: str
    created_by: str | None = None
    created_at: str = ""


@dataclass
class Membership:
    household_id: int
    user_id: str
    role: str


@dataclass
class StorageLocation:
    id: int
    household_id: int
    name: str
    location_type: str
    is_default: bool = False


@dataclass
class InventoryItem:
    id: int
    household_id: int
    user_id: str
    name: str
    category: str
    quantity: float
    unit: str
    expiry_date: str | None
    status: str
    created_at: str
    storage_id: int | None = None


@dataclass
class NewInventoryItem:
    """Insert payload for a pantry item."""

    household_id: int
    user_id: str
    name: str
    category: str
    expiry_date: str | None
    quantity: float = 1.0
    unit: str = "pcs"
    status: str = "fresh"
    storage_id: int | None = None
