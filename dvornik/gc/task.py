"""PodGC - one pass of stale pod collection.

Trigger condition (exemption policy):
    pod.phase == Running AND pod.created_at < now - pod_age
    AND no label matches an exemption

Trigger condition (remote_filter policy):
    pod matches label_selector (server side)
    AND pod.phase in (Running, Pending) AND pod.created_at < now - pod_age

Action:
    Delete each selected pod, Pending pods with a zero grace period.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, TextIO

import structlog

from dvornik.errors import DeletionError
from dvornik.gc.base import GCResult
from dvornik.gc.remover import Remover
from dvornik.gc.selector import select, staleness_threshold
from dvornik.utils.datetime import utcnow

if TYPE_CHECKING:
    from dvornik.config import RunParameters
    from dvornik.drivers.base import Driver

logger = structlog.get_logger()


class PodGC:
    """Selects stale pods from a namespace snapshot and deletes them."""

    def __init__(
        self,
        driver: "Driver",
        params: "RunParameters",
        *,
        stream: TextIO | None = None,
    ) -> None:
        self._driver = driver
        self._params = params
        self._log = logger.bind(
            gc_task="pod_gc",
            namespace=params.namespace,
            policy=params.policy.kind.value,
        )
        self._remover = Remover(
            driver,
            params.namespace,
            stream=stream,
            continue_on_error=params.continue_on_error,
        )

    @property
    def name(self) -> str:
        return "pod_gc"

    async def run(self, now: datetime | None = None) -> GCResult:
        """Execute one pass.

        Raises:
            ConfigurationError: if the pod age is not positive
            ListingError: if the pods cannot be listed
            DeletionError: on a failed delete (after all deletes were
                attempted when continue_on_error is set)
        """
        params = self._params
        result = GCResult(namespace=params.namespace)

        threshold = staleness_threshold(now or utcnow(), params.pod_age_minutes)
        self._log.info("gc.run.start", threshold=threshold.isoformat())

        snapshot = await self._driver.list_pods(
            params.namespace,
            label_selector=params.policy.label_selector,
        )
        result.listed_count = len(snapshot)

        eligible = select(snapshot, threshold, params.policy)
        result.selected_count = len(eligible)

        self._log.info(
            "gc.run.selected",
            listed=result.listed_count,
            selected=result.selected_count,
        )

        result.results = await self._remover.remove(eligible)

        self._log.info(
            "gc.run.complete",
            removed=result.removed_count,
            failed=len(result.errors),
        )

        if not result.success:
            raise DeletionError(
                f"Failed to delete {len(result.errors)} of {result.selected_count} pods",
                details={"errors": result.errors},
            )

        return result
