"""Commit selected candidates into the household inventory.

The sequence is not atomic. Tenant provisioning is three separate writes
and items are inserted one row at a time; a failure part-way through
leaves earlier writes in place and is reported to the caller instead of
being rolled back. A later commit for the same identity re-checks
membership before provisioning again.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

from .cache import DASHBOARD_METRICS_KEY, INVENTORY_KEY, QueryCache
from .errors import CommitError, TenantProvisioningError
from .models import NewInventoryItem
from .result import Err, Ok

if TYPE_CHECKING:
    from .db import HouseholdDB, InventoryDB
    from .models import DetectionCandidate, Identity

logger = logging.getLogger(__name__)

INVALIDATED_KEYS = (INVENTORY_KEY, DASHBOARD_METRICS_KEY)

DEFAULT_LOCATIONS = (
    ("Pantry", "pantry"),
    ("Fridge", "fridge"),
    ("Freezer", "freezer"),
)

OWNER_ROLE = "admin"

_INVITE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class CommitResult:
    household_id: int
    item_ids: list[int] = field(default_factory=list)
    provisioned: bool = False


def generate_invite_code(length: int = 6) -> str:
    return "".join(secrets.choice(_INVITE_ALPHABET) for _ in range(length))


def household_name(display_name: str) -> str:
    first = display_name.split()[0] if display_name.strip() else ""
    return f"{first}'s Household" if first else "My Household"


class CommitPipeline:
    """Provision the identity's household if needed, then insert the items."""

    def __init__(
        self,
        households: HouseholdDB,
        inventory: InventoryDB,
        cache: QueryCache | None = None,
        default_currency: str = "USD",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._households = households
        self._inventory = inventory
        self._cache = cache or QueryCache()
        self._default_currency = default_currency
        self._clock = clock

    def commit(
        self,
        selected: list[DetectionCandidate],
        identity: Identity,
        quantities: dict[str, float] | None = None,
    ) -> CommitResult:
        """Insert ``selected`` as fresh pantry items for ``identity``.

        Raises:
            TenantProvisioningError: the household could not be resolved or
                created. Nothing has been inserted.
            CommitError: an item insert failed. ``item_name`` names it and
                ``inserted_ids`` lists the rows already written.
        """
        if not selected:
            raise CommitError("No items selected to add")

        household_id, provisioned = self.resolve_household(identity)
        location_ids = self._location_ids(household_id)
        quantities = quantities or {}
        now = self._clock()

        item_ids: list[int] = []
        for candidate in selected:
            expiry = now + timedelta(days=candidate.estimated_expiry_days)
            item = NewInventoryItem(
                household_id=household_id,
                user_id=identity.user_id,
                name=candidate.name,
                category=candidate.category,
                expiry_date=expiry.date().isoformat(),
                quantity=quantities.get(candidate.name, 1.0),
                status="fresh",
                storage_id=location_ids.get(candidate.suggested_location),
            )
            match self._inventory.add_item(item):
                case Ok(value=row_id):
                    item_ids.append(row_id)
                case Err(error=err):
                    logger.error(
                        "Adding %r failed after %d item(s) were stored: %s",
                        candidate.name, len(item_ids), err.message,
                    )
                    raise CommitError(
                        f"Could not add {candidate.name!r} to the pantry: {err.message}",
                        item_name=candidate.name,
                        inserted_ids=item_ids,
                    )

        self._cache.invalidate(*INVALIDATED_KEYS)
        logger.info("Added %d item(s) to household %d", len(item_ids), household_id)
        return CommitResult(household_id=household_id, item_ids=item_ids, provisioned=provisioned)

    def resolve_household(self, identity: Identity) -> tuple[int, bool]:
        """Return (household id, whether it was created by this call)."""
        match self._households.get_membership(identity.user_id):
            case Ok(value=None):
                return self._provision(identity), True
            case Ok(value=membership):
                return membership.household_id, False
            case Err(error=err):
                raise TenantProvisioningError(
                    f"Could not look up the household for {identity.user_id}: {err.message}"
                )

    def _provision(self, identity: Identity) -> int:
        match self._households.create_household(
            name=household_name(identity.display_name),
            invite_code=generate_invite_code(),
            currency=self._default_currency,
            created_by=identity.user_id,
        ):
            case Ok(value=household):
                pass
            case Err(error=err):
                raise TenantProvisioningError(f"Could not create a household: {err.message}")

        match self._households.add_member(household.id, identity.user_id, role=OWNER_ROLE):
            case Err(error=err):
                logger.error("Household %d was created without its owner", household.id)
                raise TenantProvisioningError(
                    f"Could not add {identity.user_id} to the new household: {err.message}"
                )

        for name, location_type in DEFAULT_LOCATIONS:
            match self._households.add_storage_location(
                household.id, name, location_type, is_default=True
            ):
                case Err(error=err):
                    raise TenantProvisioningError(
                        f"Could not create the {name} storage location: {err.message}"
                    )

        logger.info("Provisioned household %d for %s", household.id, identity.user_id)
        return household.id

    def _location_ids(self, household_id: int) -> dict[str, int]:
        match self._households.get_storage_locations(household_id):
            case Ok(value=locations):
                return {loc.name: loc.id for loc in locations}
            case Err(error=err):
                raise CommitError(f"Could not load storage locations: {err.message}")
