"""
stagehand.infrastructure.kube - Kubernetes-backed Cluster Store
=================================================================

ClusterClient implementation on top of the kubernetes dynamic client. The
dynamic client is synchronous, so every call runs in a worker thread to keep
the event loop free.

Authentication is not handled here: build the DynamicClient from an already
configured ``kubernetes.client.ApiClient`` and pass it in.

Usage:
    >>> from kubernetes import client, config
    >>> from kubernetes.dynamic import DynamicClient
    >>> config.load_incluster_config()
    >>> cluster = KubernetesClusterClient(DynamicClient(client.ApiClient()))
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import structlog
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import NotFoundError

from stagehand.core.exceptions import ClusterError
from stagehand.core.models import ResourceIdentity
from stagehand.infrastructure.cluster import ClusterClient

logger = structlog.get_logger()


def _to_dict(obj: Any) -> dict[str, Any]:
    return obj.to_dict() if hasattr(obj, "to_dict") else dict(obj)


class KubernetesClusterClient(ClusterClient):
    """ClusterClient backed by a kubernetes DynamicClient.

    Attributes:
        _client: The dynamic client used for all calls.
    """

    def __init__(self, dynamic_client: DynamicClient) -> None:
        self._client = dynamic_client
        self._logger = logger.bind(component="kubernetes_cluster_client")

    async def get(self, identity: ResourceIdentity) -> Optional[dict[str, Any]]:
        resource = await self._resource(identity.api_version, identity.kind)
        try:
            obj = await asyncio.to_thread(
                resource.get, name=identity.name, namespace=identity.namespace
            )
        except NotFoundError:
            return None
        except ApiException as e:
            raise self._error("get", identity, e) from e
        return _to_dict(obj)

    async def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        identity = ResourceIdentity.from_object(obj)
        resource = await self._resource(identity.api_version, identity.kind)
        try:
            created = await asyncio.to_thread(
                resource.create, body=obj, namespace=identity.namespace
            )
        except ApiException as e:
            raise self._error("create", identity, e) from e
        self._logger.debug("resource_created", resource=str(identity))
        return _to_dict(created)

    async def delete(self, identity: ResourceIdentity) -> None:
        resource = await self._resource(identity.api_version, identity.kind)
        try:
            await asyncio.to_thread(
                resource.delete, name=identity.name, namespace=identity.namespace
            )
        except ApiException as e:
            raise self._error("delete", identity, e) from e
        self._logger.debug("resource_deleted", resource=str(identity))

    async def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        identity = ResourceIdentity.from_object(obj)
        resource = await self._resource(identity.api_version, identity.kind)
        try:
            updated = await asyncio.to_thread(
                resource.replace, body=obj, namespace=identity.namespace
            )
        except ApiException as e:
            raise self._error("update", identity, e) from e
        self._logger.debug("resource_updated", resource=str(identity))
        return _to_dict(updated)

    async def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> list[dict[str, Any]]:
        resource = await self._resource(api_version, kind)
        selector = ",".join(f"{k}={v}" for k, v in (labels or {}).items()) or None
        try:
            listed = await asyncio.to_thread(
                resource.get, namespace=namespace, label_selector=selector
            )
        except NotFoundError:
            return []
        except ApiException as e:
            raise ClusterError(
                message=f"failed to list {kind} in {namespace or 'all namespaces'}: {e.reason}",
                details={"kind": kind, "namespace": namespace, "status": e.status},
            ) from e
        return list(_to_dict(listed).get("items") or [])

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    async def _resource(self, api_version: str, kind: str) -> Any:
        try:
            return await asyncio.to_thread(
                self._client.resources.get, api_version=api_version, kind=kind
            )
        except Exception as e:
            raise ClusterError(
                message=f"failed to discover API for {api_version} {kind}: {e}",
                error_code="DISCOVERY_FAILED",
                details={"api_version": api_version, "kind": kind},
            ) from e

    @staticmethod
    def _error(verb: str, identity: ResourceIdentity, e: ApiException) -> ClusterError:
        code = {404: "NOT_FOUND", 409: "ALREADY_EXISTS"}.get(e.status, "CLUSTER_ERROR")
        return ClusterError(
            message=f"failed to {verb} {identity}: {e.reason}",
            error_code=code,
            details={"resource": str(identity), "status": e.status},
        )
