"""Dvornik error types.

Every error is terminal for a run. ``main()`` renders the message to the
operator and exits with a non-zero status.
"""

from __future__ import annotations

from typing import Any


class DvornikError(Exception):
    """Base error for all Dvornik exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured log output."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DvornikError):
    """Invalid run parameters or unusable cluster credentials."""

    code = "configuration_error"
    message = "Invalid configuration"


class ListingError(DvornikError):
    """Listing pods in the namespace failed."""

    code = "listing_error"
    message = "Failed to list pods"


class DeletionError(DvornikError):
    """Deleting a pod failed (including a pod that no longer exists)."""

    code = "deletion_error"
    message = "Failed to delete pod"
