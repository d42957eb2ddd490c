"""Unit tests for the Remover.

Covers grace period handling, the deletion report and fail-fast
behavior on delete errors.
"""

from __future__ import annotations

import io
from datetime import UTC, datetime, timedelta

import pytest

from dvornik.errors import DeletionError
from dvornik.gc.remover import REPORT_HEADER, Remover, grace_period_for
from dvornik.models import PodPhase, RemovalOutcome
from tests.fakes import FakeDriver, make_pod

CREATED = datetime(2024, 5, 1, 11, 0, tzinfo=UTC) - timedelta(hours=1)


class TestGracePeriod:
    """Tests for grace_period_for()."""

    def test_pending_pod_forced_to_zero(self):
        assert grace_period_for(make_pod("a", CREATED, phase=PodPhase.PENDING)) == 0

    def test_running_pod_uses_default(self):
        assert grace_period_for(make_pod("a", CREATED, phase=PodPhase.RUNNING)) is None


class TestRemover:
    """Tests for Remover.remove()."""

    @pytest.mark.asyncio
    async def test_removes_pods_in_order_and_reports(self):
        pods = [make_pod("a", CREATED), make_pod("b", CREATED)]
        driver = FakeDriver(pods)
        stream = io.StringIO()

        results = await Remover(driver, "ci", stream=stream).remove(pods)

        assert [r.outcome for r in results] == [RemovalOutcome.REMOVED] * 2
        assert [r.instance.name for r in results] == ["a", "b"]
        assert driver.deleted_names == ["a", "b"]
        assert stream.getvalue().splitlines() == [REPORT_HEADER, "a", "b"]

    @pytest.mark.asyncio
    async def test_no_pods_no_header(self):
        driver = FakeDriver()
        stream = io.StringIO()

        results = await Remover(driver, "ci", stream=stream).remove([])

        assert results == []
        assert stream.getvalue() == ""
        assert driver.delete_calls == []

    @pytest.mark.asyncio
    async def test_grace_period_passed_per_phase(self):
        pending = make_pod("pending", CREATED, phase=PodPhase.PENDING)
        running = make_pod("running", CREATED, phase=PodPhase.RUNNING)
        driver = FakeDriver([pending, running])

        await Remover(driver, "ci", stream=io.StringIO()).remove([pending, running])

        assert driver.delete_calls[0]["grace_period_seconds"] == 0
        assert driver.delete_calls[1]["grace_period_seconds"] is None
        assert all(call["namespace"] == "ci" for call in driver.delete_calls)

    @pytest.mark.asyncio
    async def test_failure_aborts_remaining_deletes(self):
        pods = [make_pod("a", CREATED), make_pod("b", CREATED), make_pod("c", CREATED)]
        driver = FakeDriver(pods)
        driver.fail_delete("b")
        stream = io.StringIO()

        with pytest.raises(DeletionError):
            await Remover(driver, "ci", stream=stream).remove(pods)

        assert [call["name"] for call in driver.delete_calls] == ["a", "b"]
        assert stream.getvalue().splitlines() == [REPORT_HEADER, "a"]

    @pytest.mark.asyncio
    async def test_vanished_pod_is_fatal(self):
        """A pod deleted by someone else between list and delete fails the run."""
        gone = make_pod("gone", CREATED)
        driver = FakeDriver([])

        with pytest.raises(DeletionError) as exc_info:
            await Remover(driver, "ci", stream=io.StringIO()).remove([gone])

        assert exc_info.value.details["status"] == 404

    @pytest.mark.asyncio
    async def test_continue_on_error_records_failure(self):
        pods = [make_pod("a", CREATED), make_pod("b", CREATED), make_pod("c", CREATED)]
        driver = FakeDriver(pods)
        driver.fail_delete("b")
        stream = io.StringIO()

        remover = Remover(driver, "ci", stream=stream, continue_on_error=True)
        results = await remover.remove(pods)

        assert [r.outcome for r in results] == [
            RemovalOutcome.REMOVED,
            RemovalOutcome.FAILED,
            RemovalOutcome.REMOVED,
        ]
        assert results[1].error is not None
        assert driver.deleted_names == ["a", "c"]
        assert stream.getvalue().splitlines() == [REPORT_HEADER, "a", "c"]

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate_with_continue_on_error(self):
        pods = [make_pod("a", CREATED), make_pod("b", CREATED)]
        driver = FakeDriver(pods)
        driver.fail_delete("a", RuntimeError("boom"))

        remover = Remover(driver, "ci", stream=io.StringIO(), continue_on_error=True)
        with pytest.raises(RuntimeError, match="boom"):
            await remover.remove(pods)

        assert len(driver.delete_calls) == 1
