"""Pod removal and the deletion report."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING, TextIO

import structlog

from dvornik.errors import DeletionError
from dvornik.models import Instance, PodPhase, RemovalOutcome, RemovalResult

if TYPE_CHECKING:
    from dvornik.drivers.base import Driver

logger = structlog.get_logger()

REPORT_HEADER = "The following pods have been deleted:"


def grace_period_for(instance: Instance) -> int | None:
    """Pending pods are deleted immediately; others keep the default grace period."""
    if instance.phase is PodPhase.PENDING:
        return 0
    return None


class Remover:
    """Deletes eligible pods one at a time and reports each deletion.

    The report goes to ``stream``: a header line once (only when there is
    something to delete), then the name of every deleted pod in order.

    By default the first failed delete aborts the pass by raising
    DeletionError. With ``continue_on_error`` the failure is recorded as
    a FAILED result and the remaining pods are still processed.
    """

    def __init__(
        self,
        driver: "Driver",
        namespace: str,
        *,
        stream: TextIO | None = None,
        continue_on_error: bool = False,
    ) -> None:
        self._driver = driver
        self._namespace = namespace
        self._stream = stream
        self._continue_on_error = continue_on_error
        self._log = logger.bind(gc_task="remover", namespace=namespace)

    def _emit(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        print(line, file=stream, flush=True)

    async def remove(self, eligible: Sequence[Instance]) -> list[RemovalResult]:
        """Delete every pod in ``eligible``.

        Returns:
            One RemovalResult per input pod, same order

        Raises:
            DeletionError: on the first failed delete, unless continue_on_error
        """
        results: list[RemovalResult] = []
        if not eligible:
            return results

        self._emit(REPORT_HEADER)

        for instance in eligible:
            try:
                await self._driver.delete_pod(
                    self._namespace,
                    instance.name,
                    grace_period_seconds=grace_period_for(instance),
                )
            except DeletionError as e:
                if not self._continue_on_error:
                    raise
                self._log.warning(
                    "gc.pod.remove_failed",
                    pod_name=instance.name,
                    error=e.message,
                )
                results.append(
                    RemovalResult(instance, RemovalOutcome.FAILED, error=e.message)
                )
                continue

            self._emit(instance.name)
            self._log.info(
                "gc.pod.removed",
                pod_name=instance.name,
                phase=instance.phase.value,
            )
            results.append(RemovalResult(instance, RemovalOutcome.REMOVED))

        return results
