"""GC result structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from dvornik.models import RemovalResult


@dataclass
class GCResult:
    """Result of a GC pass.

    Attributes:
        namespace: Namespace the pass ran against
        listed_count: Number of pods in the snapshot
        selected_count: Number of pods eligible for removal
        results: One RemovalResult per pod a delete was attempted for
    """

    namespace: str = ""
    listed_count: int = 0
    selected_count: int = 0
    results: list[RemovalResult] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return sum(1 for r in self.results if r.removed)

    @property
    def errors(self) -> list[str]:
        return [f"pod {r.instance.name}: {r.error}" for r in self.results if not r.removed]

    @property
    def success(self) -> bool:
        """Whether every attempted delete succeeded."""
        return len(self.errors) == 0
