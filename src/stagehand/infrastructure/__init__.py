"""
stagehand.infrastructure - External Systems
=============================================

Adapters to the two things outside the process:

    ┌──────────────── SYNC LAYER ─────────────────┐
    │  ArtifactCache, ResourceSyncEngine, ...     │
    └───────────┬─────────────────────┬───────────┘
                │                     │
    ┌───────────▼──────────┐ ┌────────▼────────────────┐
    │  ClusterClient (ABC) │ │  ArtifactFetcher (ABC)  │
    │   ├ InMemory...      │ │   └ HttpArtifactFetcher │
    │   └ Kubernetes...    │ │  ArtifactSource (URLs)  │
    └──────────────────────┘ └─────────────────────────┘
"""

from stagehand.infrastructure.artifact_source import (
    ArtifactFetcher,
    ArtifactSource,
    HttpArtifactFetcher,
)
from stagehand.infrastructure.cluster import ClusterClient, InMemoryClusterClient
from stagehand.infrastructure.kube import KubernetesClusterClient

__all__ = [
    "ArtifactFetcher",
    "ArtifactSource",
    "ClusterClient",
    "HttpArtifactFetcher",
    "InMemoryClusterClient",
    "KubernetesClusterClient",
]
