"""SQLite database module for households, pantry items and user secrets."""

from .households import HouseholdDB
from .inventory import InventoryDB
from .schema import ensure_schema
from .secrets import SecretDB

__all__ = [
    "HouseholdDB",
    "InventoryDB",
    "SecretDB",
    "ensure_schema",
]
