"""
stagehand.sync.conflict_coordinator - Shared Registry Coordination
====================================================================

Another controller in the cluster (the samples operator) also manages image
streams and templates in the shared namespace. To keep it from fighting over
the resources installed here, their names are added to its skip lists on the
cluster-scoped ``Config/cluster`` object:

    spec:
      skippedImagestreams: [fis-java-openshift, ...]
      skippedTemplates:    [fuse-console, ...]

Rules:
    - Registry object absent → nothing to coordinate with; success, no call.
    - Names are appended only if missing, in input order. Existing entries
      are never removed or reordered.
    - One update per declare_managed() call, skipped when nothing is new.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from stagehand.core.enums import RegistryCategory
from stagehand.core.exceptions import ClusterError, CoordinationError
from stagehand.core.models import ResourceIdentity
from stagehand.infrastructure.cluster import ClusterClient

logger = structlog.get_logger()

SAMPLES_REGISTRY = ResourceIdentity(
    api_version="samples.operator.openshift.io/v1",
    kind="Config",
    name="cluster",
    namespace=None,
)


def merge_names(existing: list[str], names: Iterable[str]) -> list[str]:
    """Append every name not yet in ``existing``, preserving order."""
    merged = list(existing)
    for name in names:
        if name not in merged:
            merged.append(name)
    return merged


class ConflictCoordinator:
    """Declares resource names as managed in the shared samples registry."""

    def __init__(
        self,
        cluster: ClusterClient,
        registry: ResourceIdentity = SAMPLES_REGISTRY,
    ) -> None:
        self._cluster = cluster
        self._registry = registry
        self._logger = logger.bind(component="conflict_coordinator")

    async def declare_managed(
        self,
        category: RegistryCategory,
        names: Iterable[str],
    ) -> None:
        """Record ``names`` in the registry's skip list for ``category``.

        Raises:
            CoordinationError: If the registry cannot be read or updated.
        """
        try:
            registry = await self._cluster.get(self._registry)
        except ClusterError as e:
            raise CoordinationError(
                message=f"failed to get {self._registry}: {e.message}",
                category=category.value,
            ) from e

        if registry is None:
            self._logger.debug(
                "registry_absent",
                registry=str(self._registry),
                category=category.value,
            )
            return

        spec = registry.setdefault("spec", {})
        field = category.spec_field
        existing = list(spec.get(field) or [])
        merged = merge_names(existing, names)
        if len(merged) == len(existing):
            return

        spec[field] = merged
        try:
            await self._cluster.update(registry)
        except ClusterError as e:
            raise CoordinationError(
                message=(
                    f"failed to update {self._registry} {field}: {e.message}"
                ),
                category=category.value,
            ) from e

        self._logger.info(
            "registry_updated",
            registry=str(self._registry),
            field=field,
            added=merged[len(existing):],
        )
