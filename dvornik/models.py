"""Domain types shared by the selector and the remover."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType


class PodPhase(str, Enum):
    """Pod lifecycle phase as reported by the API server."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "PodPhase":
        """Map an API phase string to a PodPhase (unrecognized -> UNKNOWN)."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Instance:
    """Read-only snapshot of a pod.

    ``labels`` is copied into a read-only mapping on construction.
    """

    name: str
    created_at: datetime  # timezone-aware UTC
    phase: PodPhase
    labels: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))


class PolicyKind(str, Enum):
    """How a run narrows the set of pods it may delete."""

    # Local label exemptions, Running pods only
    EXEMPTION = "exemption"
    # Server-side label selector, Running and Pending pods
    REMOTE_FILTER = "remote_filter"


@dataclass(frozen=True)
class SelectionPolicy:
    """Which pods a run considers for removal.

    Build one with :meth:`exemption` or :meth:`remote_filter` rather than
    calling the constructor directly.
    """

    kind: PolicyKind
    eligible_phases: frozenset[PodPhase]
    exemptions: Mapping[str, str] = field(default_factory=dict, hash=False)
    label_selector: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "exemptions", MappingProxyType(dict(self.exemptions)))

    @classmethod
    def exemption(cls, exemptions: Mapping[str, str] | None = None) -> "SelectionPolicy":
        return cls(
            kind=PolicyKind.EXEMPTION,
            eligible_phases=frozenset({PodPhase.RUNNING}),
            exemptions=exemptions or {},
        )

    @classmethod
    def remote_filter(cls, label_selector: str | None = None) -> "SelectionPolicy":
        return cls(
            kind=PolicyKind.REMOTE_FILTER,
            eligible_phases=frozenset({PodPhase.RUNNING, PodPhase.PENDING}),
            label_selector=label_selector or None,
        )

    @property
    def applies_exemptions(self) -> bool:
        return self.kind is PolicyKind.EXEMPTION


class RemovalOutcome(str, Enum):
    """Result of a single delete request."""

    REMOVED = "Removed"
    FAILED = "Failed"


@dataclass
class RemovalResult:
    """Outcome of removing one pod."""

    instance: Instance
    outcome: RemovalOutcome
    error: str | None = None

    @property
    def removed(self) -> bool:
        return self.outcome is RemovalOutcome.REMOVED
