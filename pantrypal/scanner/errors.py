"""User-facing exceptions raised by the capture and commit phases."""

from __future__ import annotations


class PantryPalError(Exception):
    """Base class for scanner errors."""


class PermissionDenied(PantryPalError):
    """Camera access was refused; recoverable through the OS settings."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Camera permission denied. Enable camera access for this "
            "application in your system settings and try again."
        )


class HardwareNotReady(PantryPalError):
    """capture() was called before the device signalled readiness."""


class SessionBusy(PantryPalError):
    """A scan session is already in progress on this surface."""


class TenantProvisioningError(PantryPalError):
    """The household for an identity could not be resolved or created."""


class CommitError(PantryPalError):
    """Inserting a selected item failed.

    Items inserted earlier in the same commit are not retracted; their row
    IDs are available in ``inserted_ids``.
    """

    def __init__(
        self,
        message: str,
        item_name: str | None = None,
        inserted_ids: list[int] | None = None,
    ) -> None:
        super().__init__(message)
        self.item_name = item_name
        self.inserted_ids = list(inserted_ids or [])
