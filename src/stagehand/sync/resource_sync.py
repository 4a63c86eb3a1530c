"""
stagehand.sync.resource_sync - Ownership-safe Resource Synchronization
========================================================================

The ResourceSyncEngine makes a set of manifests exist in the cluster without
ever overwriting something it already owns and without tolerating objects it
does not own.

Per-resource decision:

    live = get(identity)
      │
      ├── absent ───────────────────────→ create            (CREATED)
      ├── ownership label matches ──────→ no-op             (UNCHANGED)
      └── label missing or different ───→ delete, create    (RECLAIMED)
                                             │
                                             └─ create fails → ResourceConflict
                                                (resource left absent until
                                                 the next pass recreates it)

Batch semantics (sync):
    - Resources are applied in dependency order: ImageStream, then Template,
      then everything else (stable within a kind).
    - A failing resource does not stop its siblings. Once the batch is done
      the collected failures are raised together as ResourceSyncError.
      Nothing is rolled back.
    - The cancellation signal is checked before each apply.

A second pass over an unchanged cluster performs zero mutating calls: every
resource created here carries the ownership label, so it is UNCHANGED next
time.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

from stagehand.core.config import OwnershipLabelConfig
from stagehand.core.enums import RegistryCategory
from stagehand.core.exceptions import (
    ClusterError,
    ReconcileCancelled,
    ResourceConflict,
    ResourceSyncError,
    StagehandError,
)
from stagehand.core.models import Manifest, ManifestDocument
from stagehand.infrastructure.cluster import ClusterClient
from stagehand.sync.manifests import ManifestLoader

logger = structlog.get_logger()

# Kinds that must exist before anything referencing them is applied.
SYNC_ORDER: tuple[str, ...] = ("ImageStream", "Template")

KIND_CATEGORIES: dict[str, RegistryCategory] = {
    "ImageStream": RegistryCategory.IMAGE_STREAMS,
    "Template": RegistryCategory.TEMPLATES,
}


def sync_rank(manifest: Manifest) -> int:
    """Position of a manifest's kind in the dependency order."""
    try:
        return SYNC_ORDER.index(manifest.identity.kind)
    except ValueError:
        return len(SYNC_ORDER)


class ApplyOutcome(str, Enum):
    """What apply() did to one resource."""

    CREATED = "created"
    UNCHANGED = "unchanged"
    RECLAIMED = "reclaimed"


class SyncReport(BaseModel):
    """Result of a successful batch sync.

    Attributes:
        manifests: Every manifest applied, in apply order.
        outcomes: Outcome per manifest, parallel to ``manifests``.
    """

    manifests: list[Manifest] = Field(default_factory=list)
    outcomes: list[ApplyOutcome] = Field(default_factory=list)

    def record(self, manifest: Manifest, outcome: ApplyOutcome) -> None:
        self.manifests.append(manifest)
        self.outcomes.append(outcome)

    def names(self, category: RegistryCategory) -> list[str]:
        """Names of synchronized resources that belong to ``category``."""
        return [
            m.identity.name
            for m in self.manifests
            if KIND_CATEGORIES.get(m.identity.kind) == category
        ]

    def categories(self) -> list[RegistryCategory]:
        """Registry categories present in this report, in first-seen order."""
        seen: list[RegistryCategory] = []
        for manifest in self.manifests:
            category = KIND_CATEGORIES.get(manifest.identity.kind)
            if category is not None and category not in seen:
                seen.append(category)
        return seen

    def count(self, outcome: ApplyOutcome) -> int:
        return sum(1 for o in self.outcomes if o == outcome)

    @property
    def mutated(self) -> bool:
        return any(o != ApplyOutcome.UNCHANGED for o in self.outcomes)


class ResourceSyncEngine:
    """Applies manifests with ownership-safe, idempotent semantics.

    Attributes:
        _cluster: The cluster store.
        _loader: Turns documents into stamped manifests.
        _label: The ownership marker a live object must carry to be left alone.

    Example:
        >>> engine = ResourceSyncEngine(cluster, ManifestLoader(label), label)
        >>> report = await engine.sync(documents, "openshift", installation.owner_reference())
        >>> report.names(RegistryCategory.TEMPLATES)
        ['fuse-console', ...]
    """

    def __init__(
        self,
        cluster: ClusterClient,
        loader: ManifestLoader,
        ownership_label: OwnershipLabelConfig,
    ) -> None:
        self._cluster = cluster
        self._loader = loader
        self._label = ownership_label
        self._logger = logger.bind(component="resource_sync")

    # =========================================================================
    # Single resource
    # =========================================================================
    async def apply(self, manifest: Manifest) -> ApplyOutcome:
        """Make ``manifest`` exist and be owned.

        Raises:
            ResourceConflict: If an unowned object was deleted but the
                replacement could not be created.
            ClusterError: If the read, the plain create or the delete fails.
        """
        identity = manifest.identity
        live = await self._cluster.get(identity)

        if live is None:
            await self._cluster.create(manifest.to_object())
            self._logger.info("resource_created", resource=str(identity))
            return ApplyOutcome.CREATED

        if self._is_owned(live):
            self._logger.debug("resource_unchanged", resource=str(identity))
            return ApplyOutcome.UNCHANGED

        self._logger.info(
            "resource_reclaiming",
            resource=str(identity),
            label=self._label.key,
        )
        await self._cluster.delete(identity)
        try:
            await self._cluster.create(manifest.to_object())
        except ClusterError as e:
            raise ResourceConflict(
                message=(
                    f"failed to recreate {identity} after removing unowned copy: "
                    f"{e.message}"
                ),
                kind=identity.kind,
                name=identity.name,
                namespace=identity.namespace,
            ) from e
        return ApplyOutcome.RECLAIMED

    async def apply_if_absent_or_unowned(
        self,
        document: ManifestDocument,
        namespace: str,
        owner: dict[str, Any],
    ) -> list[Manifest]:
        """Load one document and apply every resource it contains.

        Returns:
            The applied manifests.

        Raises:
            ParseError: If the document cannot be decoded.
            ResourceConflict: See apply().
            ClusterError: See apply().
        """
        manifests = self._loader.load(document, namespace, owner)
        for manifest in sorted(manifests, key=sync_rank):
            await self.apply(manifest)
        return manifests

    # =========================================================================
    # Batch
    # =========================================================================
    async def sync(
        self,
        documents: list[ManifestDocument],
        namespace: str,
        owner: dict[str, Any],
        cancel: Optional[asyncio.Event] = None,
    ) -> SyncReport:
        """Apply every resource in ``documents`` in dependency order.

        Raises:
            ResourceSyncError: If any document failed to load or any resource
                failed to apply. Siblings are still attempted.
            ReconcileCancelled: If ``cancel`` is set between applies.
        """
        failures: list[StagehandError] = []
        manifests: list[Manifest] = []
        for document in documents:
            loaded, errors = self._loader.load_each(document, namespace, owner)
            manifests.extend(loaded)
            for e in errors:
                self._logger.warning(
                    "manifest_load_failed",
                    source=e.source,
                    error=e.message,
                )
                failures.append(e)

        report = SyncReport()
        for manifest in sorted(manifests, key=sync_rank):
            if cancel is not None and cancel.is_set():
                raise ReconcileCancelled(
                    message=f"cancelled before applying {manifest.identity}",
                    details={"applied": len(report.manifests)},
                )
            try:
                outcome = await self.apply(manifest)
            except StagehandError as e:
                self._logger.warning(
                    "resource_sync_failed",
                    resource=str(manifest.identity),
                    source=manifest.source,
                    error=e.message,
                )
                failures.append(e)
                continue
            report.record(manifest, outcome)

        if failures:
            raise ResourceSyncError(
                message=(
                    f"failed to sync {len(failures)} resource(s) into {namespace}: "
                    + "; ".join(f.message for f in failures)
                ),
                failures=failures,
                details={"namespace": namespace},
            )

        self._logger.info(
            "resources_synced",
            namespace=namespace,
            created=report.count(ApplyOutcome.CREATED),
            unchanged=report.count(ApplyOutcome.UNCHANGED),
            reclaimed=report.count(ApplyOutcome.RECLAIMED),
        )
        return report

    async def list_managed(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """List live objects of ``kind`` that carry the ownership label."""
        return await self._cluster.list(
            api_version,
            kind,
            namespace=namespace,
            labels=self._label.as_selector(),
        )

    def _is_owned(self, live: dict[str, Any]) -> bool:
        labels = (live.get("metadata") or {}).get("labels") or {}
        return labels.get(self._label.key) == self._label.value
