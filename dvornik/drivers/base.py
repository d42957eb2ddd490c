"""Driver base class - cluster API abstraction.

Driver is responsible ONLY for talking to the orchestrator.
It does NOT handle:
- Selection policy
- Retry/backoff
- Reporting
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dvornik.models import Instance


class Driver(ABC):
    """Abstract driver interface for listing and deleting pods."""

    @abstractmethod
    async def list_pods(
        self,
        namespace: str,
        *,
        label_selector: str | None = None,
    ) -> list["Instance"]:
        """List pods in a namespace, in the order the API returns them.

        Args:
            namespace: Target namespace
            label_selector: Optional server-side label selector expression

        Raises:
            ListingError: if the list call fails
        """
        ...

    @abstractmethod
    async def delete_pod(
        self,
        namespace: str,
        name: str,
        *,
        grace_period_seconds: int | None = None,
    ) -> None:
        """Delete a pod.

        Args:
            namespace: Pod namespace
            name: Pod name
            grace_period_seconds: Explicit grace period; None keeps the
                orchestrator default

        Raises:
            DeletionError: if the delete call fails, including 404
        """
        ...

    async def connect(self) -> None:
        """Load credentials so a bad session fails before any API call."""
        return None

    async def close(self) -> None:
        """Release the underlying API client, if any."""
        return None
