"""Unit tests for domain types."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from dvornik.models import Instance, PodPhase, SelectionPolicy

CREATED = datetime(2024, 5, 1, tzinfo=UTC)


class TestInstance:
    """Tests for Instance immutability."""

    def test_labels_are_read_only(self):
        pod = Instance("a", CREATED, PodPhase.RUNNING, {"env": "prod"})

        with pytest.raises(TypeError):
            pod.labels["env"] = "dev"

        assert pod.labels == {"env": "prod"}

    def test_labels_copied_from_source(self):
        labels = {"env": "prod"}
        pod = Instance("a", CREATED, PodPhase.RUNNING, labels)

        labels["env"] = "dev"

        assert pod.labels["env"] == "prod"

    def test_hashable(self):
        a = Instance("a", CREATED, PodPhase.RUNNING, {"env": "prod"})
        b = Instance("a", CREATED, PodPhase.RUNNING, {"env": "prod"})

        assert a == b
        assert len({a, b}) == 1

    def test_parse_phase(self):
        assert PodPhase.parse("Pending") is PodPhase.PENDING
        assert PodPhase.parse("Evicted") is PodPhase.UNKNOWN


class TestSelectionPolicy:
    """Tests for SelectionPolicy immutability."""

    def test_exemptions_are_read_only(self):
        policy = SelectionPolicy.exemption({"env": "prod"})

        with pytest.raises(TypeError):
            policy.exemptions["env"] = "dev"

    def test_exemptions_copied_from_source(self):
        exemptions = {"env": "prod"}
        policy = SelectionPolicy.exemption(exemptions)

        exemptions["keep"] = "true"

        assert dict(policy.exemptions) == {"env": "prod"}

    def test_hashable(self):
        policy = SelectionPolicy.exemption({"env": "prod"})

        assert hash(policy) == hash(SelectionPolicy.exemption({"env": "prod"}))
