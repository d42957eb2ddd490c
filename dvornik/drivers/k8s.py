"""Kubernetes driver implementation using kubernetes-asyncio.

Credentials come from an explicit kubeconfig path when one is configured,
otherwise (or when that file cannot be loaded) from the in-cluster
service account.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import aiohttp
import structlog
import yaml
from kubernetes_asyncio import client, config
from kubernetes_asyncio.client import ApiClient, ApiException
from kubernetes_asyncio.config import ConfigException

from dvornik.drivers.base import Driver
from dvornik.errors import ConfigurationError, DeletionError, ListingError
from dvornik.models import Instance, PodPhase

logger = structlog.get_logger()

# Pods the API returns without a creation timestamp are never age-eligible
_NEVER = datetime.max.replace(tzinfo=UTC)

_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)

# What kubernetes-asyncio raises for a missing, unreadable or malformed kubeconfig
_KUBECONFIG_ERRORS = (ConfigException, OSError, yaml.YAMLError, TypeError, KeyError, ValueError)


def _to_instance(pod: client.V1Pod) -> Instance:
    """Convert an API pod object into a read-only Instance."""
    created_at = pod.metadata.creation_timestamp or _NEVER
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)

    phase = pod.status.phase if pod.status else None

    return Instance(
        name=pod.metadata.name,
        created_at=created_at,
        phase=PodPhase.parse(phase),
        labels=dict(pod.metadata.labels or {}),
    )


def _error_details(e: Exception, **extra: object) -> dict:
    details: dict = dict(extra)
    if isinstance(e, ApiException):
        details["status"] = e.status
        details["reason"] = e.reason
    else:
        details["error"] = type(e).__name__
    return details


class K8sDriver(Driver):
    """Kubernetes driver implementation using kubernetes-asyncio."""

    def __init__(self, kubeconfig: str | None = None) -> None:
        self._kubeconfig = kubeconfig

        self._log = logger.bind(driver="k8s")
        self._api_client: ApiClient | None = None
        self._config_loaded = False

    async def _ensure_config(self) -> None:
        """Load Kubernetes configuration once.

        Raises:
            ConfigurationError: if neither kubeconfig nor in-cluster
                credentials can be loaded
        """
        if self._config_loaded:
            return

        if self._kubeconfig:
            try:
                await config.load_kube_config(config_file=self._kubeconfig)
            except _KUBECONFIG_ERRORS as e:
                self._log.warning(
                    "k8s.config.kubeconfig_failed",
                    path=self._kubeconfig,
                    error=str(e),
                )
            else:
                self._log.info("k8s.config.loaded", source="kubeconfig", path=self._kubeconfig)
                self._config_loaded = True
                return

        try:
            config.load_incluster_config()
        except (ConfigException, OSError) as e:
            raise ConfigurationError(
                f"Cannot load cluster credentials: {e}",
                details={"kubeconfig": self._kubeconfig},
            ) from e

        self._log.info("k8s.config.loaded", source="incluster")
        self._config_loaded = True

    async def _get_api_client(self) -> ApiClient:
        """Get or create the API client."""
        await self._ensure_config()
        if self._api_client is None:
            self._api_client = ApiClient()
        return self._api_client

    async def connect(self) -> None:
        """Load credentials eagerly so bad config fails before any API call."""
        await self._get_api_client()

    async def close(self) -> None:
        """Close the API client."""
        if self._api_client is not None:
            await self._api_client.close()
            self._api_client = None

    async def list_pods(
        self,
        namespace: str,
        *,
        label_selector: str | None = None,
    ) -> list[Instance]:
        """List pods in a namespace."""
        api_client = await self._get_api_client()
        v1 = client.CoreV1Api(api_client)

        kwargs = {"namespace": namespace}
        if label_selector:
            kwargs["label_selector"] = label_selector

        self._log.debug(
            "k8s.list_pods",
            namespace=namespace,
            label_selector=label_selector,
        )

        try:
            pod_list = await v1.list_namespaced_pod(**kwargs)
        except (ApiException, *_TRANSPORT_ERRORS) as e:
            self._log.error("k8s.list_pods.failed", namespace=namespace, error=str(e))
            raise ListingError(
                f"Failed to list pods in namespace {namespace!r}: {e}",
                details=_error_details(e, namespace=namespace),
            ) from e

        instances = [_to_instance(pod) for pod in pod_list.items]

        self._log.debug(
            "k8s.list_pods.result",
            namespace=namespace,
            count=len(instances),
        )

        return instances

    async def delete_pod(
        self,
        namespace: str,
        name: str,
        *,
        grace_period_seconds: int | None = None,
    ) -> None:
        """Delete a Pod, optionally overriding its grace period."""
        api_client = await self._get_api_client()
        v1 = client.CoreV1Api(api_client)

        kwargs = {"name": name, "namespace": namespace}
        if grace_period_seconds is not None:
            kwargs["body"] = client.V1DeleteOptions(
                grace_period_seconds=grace_period_seconds,
            )

        self._log.info(
            "k8s.delete_pod",
            namespace=namespace,
            pod_name=name,
            grace_period_seconds=grace_period_seconds,
        )

        try:
            await v1.delete_namespaced_pod(**kwargs)
        except (ApiException, *_TRANSPORT_ERRORS) as e:
            if isinstance(e, ApiException) and e.status == 404:
                self._log.warning("k8s.delete_pod.not_found", namespace=namespace, pod_name=name)
            else:
                self._log.error(
                    "k8s.delete_pod.failed",
                    namespace=namespace,
                    pod_name=name,
                    error=str(e),
                )
            raise DeletionError(
                f"Failed to delete pod {name!r} in namespace {namespace!r}: {e}",
                details=_error_details(e, namespace=namespace, pod_name=name),
            ) from e
