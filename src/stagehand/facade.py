"""
stagehand.facade - Stagehand Top-Level Facade
===============================================

The single entry point that wires every layer together and exposes the
upstream contract: ``reconcile(installation) -> (phase, error)``.

    ┌──────────────────────────────────────────────────┐
    │                Stagehand (Facade)                │
    │                                                  │
    │  ┌────────────────────────────────────────────┐  │
    │  │  Orchestration                             │  │
    │  │  StageOrchestrator, InstallationStore      │  │
    │  └─────────────────────┬──────────────────────┘  │
    │  ┌─────────────────────▼──────────────────────┐  │
    │  │  Products                                  │  │
    │  │  RegistryTable → ProductReconcilers        │  │
    │  └─────────────────────┬──────────────────────┘  │
    │  ┌─────────────────────▼──────────────────────┐  │
    │  │  Sync                                      │  │
    │  │  ArtifactCache, ManifestLoader,            │  │
    │  │  ResourceSyncEngine, ConflictCoordinator   │  │
    │  └─────────────────────┬──────────────────────┘  │
    │  ┌─────────────────────▼──────────────────────┐  │
    │  │  Infrastructure                            │  │
    │  │  ClusterClient, ArtifactFetcher            │  │
    │  └────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────┘

Usage:
    >>> async with Stagehand(config, cluster=cluster) as stagehand:
    ...     phase, error = await stagehand.reconcile(installation)

    Against a real cluster:
    >>> from kubernetes import client, config as kube_config
    >>> from kubernetes.dynamic import DynamicClient
    >>> kube_config.load_kube_config()
    >>> cluster = KubernetesClusterClient(DynamicClient(client.ApiClient()))
    >>> stagehand = Stagehand(load_config(), cluster=cluster)
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import structlog

from stagehand.core.config import (
    ConfigProvider,
    SettingsConfigProvider,
    StagehandConfig,
)
from stagehand.core.enums import Phase
from stagehand.core.state import Installation
from stagehand.infrastructure.artifact_source import (
    ArtifactFetcher,
    ArtifactSource,
    HttpArtifactFetcher,
)
from stagehand.infrastructure.cluster import ClusterClient, InMemoryClusterClient
from stagehand.orchestration.installation_store import (
    InMemoryInstallationStore,
    InstallationStore,
)
from stagehand.orchestration.stage_orchestrator import StageOrchestrator
from stagehand.products.base import ReconcilerContext
from stagehand.products.registry import RegistryTable, default_registry
from stagehand.sync.artifact_cache import ExternalArtifactCache
from stagehand.sync.conflict_coordinator import ConflictCoordinator
from stagehand.sync.manifests import ManifestLoader
from stagehand.sync.resource_sync import ResourceSyncEngine

logger = structlog.get_logger()


class Stagehand:
    """Top-level facade for staged product installation.

    Lifecycle:
        1. ``Stagehand(config, cluster=...)``  Instantiate and wire
        2. ``await initialize()``              Connect the store
        3. ``await reconcile(installation)``   Run passes
        4. ``await shutdown()``                Close HTTP client and store

    Or use the async context manager.

    Attributes:
        _config: Stagehand configuration.
        _cluster: Cluster resource store.
        _fetcher: Remote artifact fetcher.
        _store: Installation snapshot store.
        _engine: Resource sync engine (also backs managed_resources()).
        _orchestrator: Stage walker.
        _initialized: Whether initialize() has been called.
    """

    def __init__(
        self,
        config: Optional[StagehandConfig] = None,
        *,
        cluster: Optional[ClusterClient] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        store: Optional[InstallationStore] = None,
        registry: Optional[RegistryTable] = None,
        config_provider: Optional[ConfigProvider] = None,
    ) -> None:
        """Wire every component.

        Args:
            config: Configuration. Defaults to StagehandConfig() (env vars).
            cluster: Cluster store. Defaults to InMemoryClusterClient.
            fetcher: Artifact fetcher. Defaults to HttpArtifactFetcher.
            store: Installation store. Defaults to InMemoryInstallationStore.
            registry: Stage/product table. Defaults to default_registry().
            config_provider: Product configuration source. Defaults to
                SettingsConfigProvider over ``config``.
        """
        self._config = config or StagehandConfig()
        self._cluster = cluster or InMemoryClusterClient()
        self._fetcher = fetcher or HttpArtifactFetcher.from_config(self._config.artifacts)
        self._store = store or InMemoryInstallationStore()
        self._config_provider = config_provider or SettingsConfigProvider(self._config)

        label = self._config.ownership_label
        self._engine = ResourceSyncEngine(self._cluster, ManifestLoader(label), label)
        self._context = ReconcilerContext(
            config_provider=self._config_provider,
            cache=ExternalArtifactCache(
                self._cluster,
                self._fetcher,
                namespace=self._config_provider.operator_namespace,
            ),
            source=ArtifactSource.from_config(self._config.artifacts),
            engine=self._engine,
            coordinator=ConflictCoordinator(self._cluster),
        )
        self._orchestrator = StageOrchestrator(
            registry or default_registry(),
            self._context,
        )

        self._initialized = False
        self._logger = logger.bind(component="stagehand")

    # =========================================================================
    # Properties
    # =========================================================================
    @property
    def config(self) -> StagehandConfig:
        return self._config

    @property
    def cluster(self) -> ClusterClient:
        return self._cluster

    @property
    def store(self) -> InstallationStore:
        return self._store

    @property
    def orchestrator(self) -> StageOrchestrator:
        return self._orchestrator

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # =========================================================================
    # Lifecycle Management
    # =========================================================================
    async def initialize(self) -> None:
        """Connect the installation store. Idempotent."""
        if self._initialized:
            self._logger.debug("stagehand_already_initialized")
            return

        await self._store.connect()
        self._initialized = True
        self._logger.info(
            "stagehand_initialized",
            operator_namespace=self._config_provider.operator_namespace,
        )

    async def shutdown(self) -> None:
        """Close the artifact fetcher and the store. Idempotent."""
        if not self._initialized:
            self._logger.debug("stagehand_not_initialized_skipping_shutdown")
            return

        await self._fetcher.close()
        await self._store.disconnect()
        self._initialized = False
        self._logger.info("stagehand_shutdown_complete")

    async def __aenter__(self) -> Stagehand:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.shutdown()

    # =========================================================================
    # Reconciliation
    # =========================================================================
    async def reconcile(
        self,
        installation: Installation,
        cancel: Optional[asyncio.Event] = None,
    ) -> tuple[Phase, Optional[str]]:
        """Run one reconciliation pass and persist the resulting snapshot.

        ``installation`` is updated in place.

        Raises:
            RuntimeError: If the facade has not been initialized.
        """
        self._ensure_initialized()
        phase, error = await self._orchestrator.reconcile(installation, cancel)
        await self._store.save(installation)

        self._logger.info(
            "installation_pass_finished",
            installation=installation.name,
            phase=phase.value,
            error=error,
        )
        return phase, error

    async def get_installation(self, namespace: str, name: str) -> Optional[Installation]:
        """The snapshot saved after the most recent pass, if any."""
        return await self._store.get(namespace, name)

    async def managed_resources(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """List live objects of ``kind`` that carry the ownership label."""
        return await self._engine.list_managed(api_version, kind, namespace)

    # =========================================================================
    # Internal Helpers
    # =========================================================================
    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "Stagehand has not been initialized. "
                "Call await stagehand.initialize() or use 'async with Stagehand() as stagehand:'"
            )

    def __repr__(self) -> str:
        return (
            f"Stagehand("
            f"initialized={self._initialized}, "
            f"stages={[s.name.value for s in self._orchestrator.registry.stages]})"
        )
