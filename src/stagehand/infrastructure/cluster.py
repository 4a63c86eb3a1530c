"""
stagehand.infrastructure.cluster - Cluster Resource Store
===========================================================

This module defines the ClusterClient, the only way stagehand touches the
cluster's resource store. The pipeline depends on exactly four operations
keyed by ``{kind, name, namespace}`` plus a label-filtered list:

    get(identity)              → object dict or None
    create(obj)                → created object
    delete(identity)           → None
    update(obj)                → updated object
    list(api_version, kind, namespace, labels) → [object dicts]

Implementations:
    - ClusterClient (ABC):      Abstract interface
    - InMemoryClusterClient:    Dict-based for dev/testing; records every
                                mutating call so tests can assert on them
    - KubernetesClusterClient:  kubernetes dynamic client (see kube.py)

Error Contract:
    - get() returns None for a missing object; it never raises for NotFound.
    - create() of an existing object, and delete()/update() of a missing one,
      raise ClusterError with error_code ALREADY_EXISTS / NOT_FOUND.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from stagehand.core.exceptions import ClusterError
from stagehand.core.models import ResourceIdentity

logger = logging.getLogger(__name__)


# =============================================================================
# Abstract Base Class: ClusterClient
# =============================================================================
class ClusterClient(ABC):
    """Abstract interface to the cluster resource store.

    Components should type-hint against this ABC.

    Example:
        >>> async def ensure(client: ClusterClient, obj: dict) -> None:
        ...     if await client.get(ResourceIdentity.from_object(obj)) is None:
        ...         await client.create(obj)
    """

    @abstractmethod
    async def get(self, identity: ResourceIdentity) -> Optional[dict[str, Any]]:
        """Read a live object.

        Returns:
            The object dict, or None if it does not exist.

        Raises:
            ClusterError: If the read fails for any other reason.
        """

    @abstractmethod
    async def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object.

        Raises:
            ClusterError: If the object exists already or the create fails.
        """

    @abstractmethod
    async def delete(self, identity: ResourceIdentity) -> None:
        """Delete an object.

        Raises:
            ClusterError: If the object does not exist or the delete fails.
        """

    @abstractmethod
    async def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an existing object.

        Raises:
            ClusterError: If the object does not exist or the update fails.
        """

    @abstractmethod
    async def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> list[dict[str, Any]]:
        """List objects of one kind, optionally filtered by exact label match.

        Raises:
            ClusterError: If the list call fails.
        """


# =============================================================================
# InMemoryClusterClient Implementation
# =============================================================================
# Key Data Structures:
#   _objects: dict[(kind, name, namespace), object dict]
#   calls:    ordered log of (verb, identity) for create/delete/update
# =============================================================================
class InMemoryClusterClient(ClusterClient):
    """In-memory cluster store for development and testing.

    Objects are deep-copied on the way in and out, so callers can never
    mutate stored state by accident.

    Attributes:
        calls: Ordered log of mutating calls as ``(verb, identity)`` tuples.

    Example:
        >>> cluster = InMemoryClusterClient()
        >>> await cluster.create({"apiVersion": "v1", "kind": "ConfigMap",
        ...                       "metadata": {"name": "x", "namespace": "ns"}})
        >>> cluster.mutation_count
        1
    """

    def __init__(self, objects: Optional[list[dict[str, Any]]] = None) -> None:
        self._objects: dict[tuple[str, str, Optional[str]], dict[str, Any]] = {}
        self._next_version = 1
        self.calls: list[tuple[str, ResourceIdentity]] = []

        for obj in objects or []:
            self._store(obj)

    @property
    def mutation_count(self) -> int:
        """Number of create/delete/update calls made so far."""
        return len(self.calls)

    def calls_for(self, name: str) -> list[str]:
        """Verbs of every mutating call made against objects called ``name``."""
        return [verb for verb, identity in self.calls if identity.name == name]

    def reset_calls(self) -> None:
        """Forget the mutating call log (stored objects are kept)."""
        self.calls.clear()

    # -------------------------------------------------------------------------
    # ClusterClient operations
    # -------------------------------------------------------------------------
    async def get(self, identity: ResourceIdentity) -> Optional[dict[str, Any]]:
        obj = self._objects.get(identity.key)
        return copy.deepcopy(obj) if obj is not None else None

    async def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        identity = ResourceIdentity.from_object(obj)
        if identity.key in self._objects:
            raise ClusterError(
                message=f"{identity} already exists",
                error_code="ALREADY_EXISTS",
                details={"resource": str(identity)},
            )
        self.calls.append(("create", identity))
        stored = self._store(obj)
        logger.debug("Created %s", identity)
        return copy.deepcopy(stored)

    async def delete(self, identity: ResourceIdentity) -> None:
        if identity.key not in self._objects:
            raise ClusterError(
                message=f"{identity} not found",
                error_code="NOT_FOUND",
                details={"resource": str(identity)},
            )
        self.calls.append(("delete", identity))
        del self._objects[identity.key]
        logger.debug("Deleted %s", identity)

    async def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        identity = ResourceIdentity.from_object(obj)
        if identity.key not in self._objects:
            raise ClusterError(
                message=f"{identity} not found",
                error_code="NOT_FOUND",
                details={"resource": str(identity)},
            )
        self.calls.append(("update", identity))
        stored = self._store(obj)
        logger.debug("Updated %s", identity)
        return copy.deepcopy(stored)

    async def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> list[dict[str, Any]]:
        results = []
        for (obj_kind, _, obj_namespace), obj in self._objects.items():
            if obj_kind != kind or obj.get("apiVersion", "v1") != api_version:
                continue
            if namespace is not None and obj_namespace != namespace:
                continue
            obj_labels = (obj.get("metadata") or {}).get("labels") or {}
            if labels and any(obj_labels.get(k) != v for k, v in labels.items()):
                continue
            results.append(copy.deepcopy(obj))
        return results

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _store(self, obj: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(obj)
        metadata = stored.setdefault("metadata", {})
        metadata["resourceVersion"] = str(self._next_version)
        self._next_version += 1
        self._objects[ResourceIdentity.from_object(stored).key] = stored
        return stored
