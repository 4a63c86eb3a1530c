"""
stagehand.sync - Resource Synchronization Pipeline
====================================================

The idempotent pipeline every product reconciler runs:

    ExternalArtifactCache  → fetch once, persist as an immutable record
    ManifestLoader         → decode, expand lists, stamp ownership
    ResourceSyncEngine     → create / leave alone / reclaim
    ConflictCoordinator    → register names with the shared registry
"""

from stagehand.sync.artifact_cache import ExternalArtifactCache, cache_key_for
from stagehand.sync.conflict_coordinator import SAMPLES_REGISTRY, ConflictCoordinator
from stagehand.sync.manifests import ManifestLoader, ResourceList, ResourceObject
from stagehand.sync.resource_sync import (
    ApplyOutcome,
    ResourceSyncEngine,
    SyncReport,
)

__all__ = [
    "ApplyOutcome",
    "ConflictCoordinator",
    "ExternalArtifactCache",
    "ManifestLoader",
    "ResourceList",
    "ResourceObject",
    "ResourceSyncEngine",
    "SAMPLES_REGISTRY",
    "SyncReport",
    "cache_key_for",
]
