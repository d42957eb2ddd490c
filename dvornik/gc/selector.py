"""Stale pod selection.

A pod is eligible for removal when, in this order:

1. its phase is one of the policy's eligible phases,
2. it was created strictly before the staleness threshold,
3. (exemption policy only) none of its labels matches an exemption.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta

from dvornik.errors import ConfigurationError
from dvornik.models import Instance, SelectionPolicy


def staleness_threshold(now: datetime, minutes: int) -> datetime:
    """Return the cutoff instant ``now - minutes``.

    Raises:
        ConfigurationError: if minutes is not a positive integer
    """
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise ConfigurationError(
            f"Pod age must be a positive number of minutes, got {minutes!r}",
            details={"pod_age": minutes},
        )
    return now - timedelta(minutes=minutes)


def is_exempt(instance: Instance, exemptions: Mapping[str, str] | None) -> bool:
    """Whether any label on the pod matches an exemption key and value."""
    if not exemptions:
        return False
    for key, value in instance.labels.items():
        if key in exemptions and exemptions[key] == value:
            return True
    return False


def is_eligible(instance: Instance, threshold: datetime, policy: SelectionPolicy) -> bool:
    if instance.phase not in policy.eligible_phases:
        return False
    if not instance.created_at < threshold:
        return False
    if policy.applies_exemptions and is_exempt(instance, policy.exemptions):
        return False
    return True


def select(
    snapshot: Iterable[Instance],
    threshold: datetime,
    policy: SelectionPolicy,
) -> list[Instance]:
    """Return the pods eligible for removal, in snapshot order.

    Every pod is compared against the same ``threshold``.
    """
    return [instance for instance in snapshot if is_eligible(instance, threshold, policy)]
