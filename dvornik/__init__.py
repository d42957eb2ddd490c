"""Dvornik - deletes stale pods from a Kubernetes namespace."""

from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("dvornik")
except PackageNotFoundError:
    __version__ = "unknown"
