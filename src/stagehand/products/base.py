"""
stagehand.products.base - Product Reconciler Contract
=======================================================

Every product reconciler runs the same fixed pipeline. ProductReconciler
implements it as a Template Method; subclasses only say WHICH artifacts
they need and HOW those artifacts become manifest documents.

    ┌──────────────────────────────────────────────────────────────┐
    │  ProductReconciler.reconcile(installation, product_status)   │
    │  ┌────────────────────────────────────────────────────────┐  │
    │  │ 1. validate configuration                              │  │
    │  │ 2. cache.ensure() for each artifact_groups() entry     │  │
    │  │ 3. documents(records)              ← override this     │  │
    │  │ 4. engine.sync(documents)                              │  │
    │  │ 5. coordinator.declare_managed() per category synced   │  │
    │  │ 6. stamp versions on product_status                    │  │
    │  └────────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────────┘

Outcome mapping:
    all steps succeed        → (COMPLETED, None)
    ReconcileCancelled       → (IN_PROGRESS, error)   not terminal, re-run
    any other StagehandError → (FAILED, error)        first failure wins

Nothing is persisted between steps. A failed pass simply runs again from
step 1; the cache and the ownership check make the repeat cheap.

Configuration is read ONCE, when the reconciler is constructed. A
ConfigError at that point propagates to whoever builds the reconciler.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import structlog
from pydantic import BaseModel, Field

from stagehand.core.config import ConfigProvider, ProductConfig
from stagehand.core.enums import Phase, ProductName
from stagehand.core.exceptions import ReconcileCancelled, StagehandError
from stagehand.core.models import CacheRecord, ManifestDocument
from stagehand.core.state import Installation, ProductStatus
from stagehand.sync.artifact_cache import ExternalArtifactCache, SourceResolver
from stagehand.sync.conflict_coordinator import ConflictCoordinator
from stagehand.sync.resource_sync import ResourceSyncEngine, SyncReport

logger = structlog.get_logger()


class ArtifactGroup(BaseModel):
    """A batch of artifacts cached together under one key."""

    model_config = {"frozen": True}

    cache_key: str = Field(min_length=1, description="Cache record name")
    files: list[str] = Field(description="Artifact paths relative to the source root")


class ReconcilerContext:
    """Shared collaborators handed to every product reconciler.

    One context is built per facade and reused across passes; reconcilers
    themselves are cheap and built per pass.

    Attributes:
        config_provider: Supplies product configuration.
        cache: The external artifact cache.
        source: Resolves ``(filename, version)`` to a download URL.
        engine: Applies manifests to the cluster.
        coordinator: Registers names with the shared registry.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        cache: ExternalArtifactCache,
        source: SourceResolver,
        engine: ResourceSyncEngine,
        coordinator: ConflictCoordinator,
    ) -> None:
        self.config_provider = config_provider
        self.cache = cache
        self.source = source
        self.engine = engine
        self.coordinator = coordinator


class ProductReconciler(ABC):
    """Abstract base class for product reconcilers.

    Subclasses set the ``product`` class attribute and implement
    artifact_groups() and documents().

    Attributes:
        product: Which product this reconciler installs.
        _context: Shared collaborators.
        _config: The product configuration, read once at construction.

    Example:
        >>> reconciler = FuseOnOpenshiftReconciler(context)
        >>> phase, error = await reconciler.reconcile(installation, product_status)
        >>> phase
        <Phase.COMPLETED: 'completed'>
    """

    product: ProductName

    def __init__(self, context: ReconcilerContext) -> None:
        """Read the product configuration.

        Raises:
            ConfigError: If the configuration is missing or invalid.
        """
        self._context = context
        self._config = context.config_provider.read(self.product)
        self._logger = logger.bind(
            product=self.product.value,
            namespace=self._config.namespace,
        )

    @property
    def config(self) -> ProductConfig:
        return self._config

    # =========================================================================
    # Template Method
    # =========================================================================
    async def reconcile(
        self,
        installation: Installation,
        product_status: ProductStatus,
        cancel: Optional[asyncio.Event] = None,
    ) -> tuple[Phase, Optional[StagehandError]]:
        """Run one reconciliation pass for this product.

        Subclasses should NOT override this method.

        Args:
            installation: The owning installation (provides the owner reference).
            product_status: Status record stamped with versions on success.
            cancel: Optional cooperative cancellation signal.

        Returns:
            ``(phase, error)``; error is None exactly when phase is COMPLETED.
        """
        self._logger.info("product_reconcile_starting")

        try:
            report = await self._run_steps(installation, cancel)
        except ReconcileCancelled as e:
            self._logger.info("product_reconcile_cancelled", error=e.message)
            return Phase.IN_PROGRESS, e
        except StagehandError as e:
            self._logger.error(
                "product_reconcile_failed",
                error_code=e.error_code,
                error=e.message,
            )
            return Phase.FAILED, e

        product_status.version = self._config.product_version
        product_status.operator_version = self._config.operator_version
        if self._config.host:
            product_status.host = self._config.host

        self._logger.info(
            "product_reconcile_completed",
            resources=len(report.manifests),
            version=self._config.product_version,
        )
        return Phase.COMPLETED, None

    async def _run_steps(
        self,
        installation: Installation,
        cancel: Optional[asyncio.Event],
    ) -> SyncReport:
        ctx = self._context
        ctx.config_provider.validate(self.product, self._config)

        records: dict[str, CacheRecord] = {}
        for group in self.artifact_groups():
            records[group.cache_key] = await ctx.cache.ensure(
                group.cache_key,
                group.files,
                ctx.source,
                self._config.product_version,
                cancel=cancel,
            )

        report = await ctx.engine.sync(
            self.documents(records),
            self._config.namespace,
            installation.owner_reference(),
            cancel=cancel,
        )

        for category in report.categories():
            await ctx.coordinator.declare_managed(category, report.names(category))

        return report

    # =========================================================================
    # Abstract Methods
    # =========================================================================
    @abstractmethod
    def artifact_groups(self) -> list[ArtifactGroup]:
        """The artifact batches this product needs cached before it can sync."""
        ...

    @abstractmethod
    def documents(self, records: dict[str, CacheRecord]) -> list[ManifestDocument]:
        """Turn cached records into the manifest documents to apply.

        Args:
            records: Cache records keyed by ArtifactGroup.cache_key.
        """
        ...

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"product={self.product.value!r}, "
            f"namespace={self._config.namespace!r})"
        )
