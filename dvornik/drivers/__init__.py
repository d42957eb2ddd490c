"""Driver layer - cluster API abstraction."""

from dvornik.drivers.base import Driver
from dvornik.drivers.k8s import K8sDriver

__all__ = [
    "Driver",
    "K8sDriver",
]
