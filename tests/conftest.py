"""
Shared Test Fixtures for Stagehand
====================================

Reusable pytest fixtures used across the test suite, organized by layer:

    1. Configuration fixtures
    2. Artifact fixtures (fake template repository served over httpx.MockTransport)
    3. Infrastructure fixtures (InMemoryClusterClient, HttpArtifactFetcher)
    4. Sync fixtures (cache, loader, engine, coordinator)
    5. Installation / facade fixtures
"""

from __future__ import annotations

import json

import httpx
import pytest

from stagehand.core.config import (
    ArtifactSourceConfig,
    OwnershipLabelConfig,
    SettingsConfigProvider,
    StagehandConfig,
)
from stagehand.core.state import Installation
from stagehand.facade import Stagehand
from stagehand.infrastructure.artifact_source import ArtifactSource, HttpArtifactFetcher
from stagehand.infrastructure.cluster import InMemoryClusterClient
from stagehand.products.base import ReconcilerContext
from stagehand.products.fuse_on_openshift import artifact_files
from stagehand.sync.artifact_cache import ExternalArtifactCache
from stagehand.sync.conflict_coordinator import ConflictCoordinator
from stagehand.sync.manifests import ManifestLoader
from stagehand.sync.resource_sync import ResourceSyncEngine

BASE_URL = "https://templates.example.com/"
VERSION = "master"
OPERATOR_NAMESPACE = "integreatly-operator"


# =============================================================================
# Manifest builders
# =============================================================================

def template_json(name: str) -> bytes:
    """A minimal OpenShift Template as JSON."""
    return json.dumps({
        "apiVersion": "template.openshift.io/v1",
        "kind": "Template",
        "metadata": {"name": name, "annotations": {"description": name}},
        "objects": [],
        "parameters": [{"name": "APP_NAME", "value": name}],
    }).encode("utf-8")


def template_yaml(name: str) -> bytes:
    """A minimal OpenShift Template as YAML."""
    return (
        "apiVersion: template.openshift.io/v1\n"
        "kind: Template\n"
        "metadata:\n"
        f"  name: {name}\n"
        "  annotations:\n"
        "    description: Design APIs\n"
        "objects: []\n"
    ).encode("utf-8")


def image_stream_list(*names: str) -> bytes:
    """A ``kind: List`` of ImageStreams."""
    return json.dumps({
        "apiVersion": "v1",
        "kind": "List",
        "items": [
            {
                "apiVersion": "image.openshift.io/v1",
                "kind": "ImageStream",
                "metadata": {"name": name},
                "spec": {"tags": [{"name": "1.0"}]},
            }
            for name in names
        ],
    }).encode("utf-8")


IMAGE_STREAM_NAMES = ("fis-java-openshift", "fis-karaf-openshift", "fuse-console")


def _template_name(path: str) -> str:
    base = path.rsplit("/", 1)[-1]
    return base.rsplit(".", 1)[0]


def build_fuse_artifacts() -> dict[str, bytes]:
    """Every Fuse on OpenShift artifact, keyed by path under the version root."""
    files: dict[str, bytes] = {}
    for path in artifact_files():
        if path == "fis-image-streams.json":
            files[path] = image_stream_list(*IMAGE_STREAM_NAMES)
        elif path.endswith(".yml"):
            files[path] = template_yaml(_template_name(path))
        else:
            files[path] = template_json(_template_name(path))
    return files


# =============================================================================
# Fake artifact server
# =============================================================================

class FakeArtifactServer:
    """Serves ``{version}/{path}`` from a dict; records every requested URL."""

    def __init__(self, files: dict[str, bytes], version: str = VERSION) -> None:
        self.files = dict(files)
        self.version = version
        self.requests: list[str] = []
        self.failures: dict[str, int] = {}

    def fail(self, path: str, status: int = 500) -> None:
        self.failures[path] = status

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        prefix = f"/{self.version}/"
        if not request.url.path.startswith(prefix):
            return httpx.Response(404)
        path = request.url.path[len(prefix):]
        if path in self.failures:
            return httpx.Response(self.failures[path])
        if path not in self.files:
            return httpx.Response(404)
        return httpx.Response(200, content=self.files[path])

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config():
    """Stagehand configuration pointing at the fake artifact server."""
    return StagehandConfig(
        operator_namespace=OPERATOR_NAMESPACE,
        artifacts=ArtifactSourceConfig(base_url=BASE_URL),
    )


@pytest.fixture
def ownership_label():
    """The default integreatly=true ownership label."""
    return OwnershipLabelConfig()


@pytest.fixture
def config_provider(config):
    """SettingsConfigProvider over the test configuration."""
    return SettingsConfigProvider(config)


# =============================================================================
# Artifacts
# =============================================================================

@pytest.fixture
def fuse_artifacts():
    """Fresh copy of the Fuse on OpenShift artifact set."""
    return build_fuse_artifacts()


@pytest.fixture
def artifact_server(fuse_artifacts):
    """FakeArtifactServer serving every Fuse artifact with status 200."""
    return FakeArtifactServer(fuse_artifacts)


@pytest.fixture
def artifact_source():
    """ArtifactSource resolving against the fake server's base URL."""
    return ArtifactSource(BASE_URL)


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def cluster():
    """Fresh, empty InMemoryClusterClient."""
    return InMemoryClusterClient()


@pytest.fixture
async def fetcher(artifact_server):
    """HttpArtifactFetcher routed to the fake artifact server."""
    fetcher = HttpArtifactFetcher(transport=artifact_server.transport())
    yield fetcher
    await fetcher.close()


@pytest.fixture
def samples_registry():
    """The cluster-scoped samples operator Config object."""
    return {
        "apiVersion": "samples.operator.openshift.io/v1",
        "kind": "Config",
        "metadata": {"name": "cluster"},
        "spec": {
            "skippedImagestreams": ["jenkins"],
            "skippedTemplates": [],
        },
    }


# =============================================================================
# Sync
# =============================================================================

@pytest.fixture
def artifact_cache(cluster, fetcher):
    """ExternalArtifactCache storing records in the operator namespace."""
    return ExternalArtifactCache(cluster, fetcher, namespace=OPERATOR_NAMESPACE)


@pytest.fixture
def manifest_loader(ownership_label):
    return ManifestLoader(ownership_label)


@pytest.fixture
def sync_engine(cluster, manifest_loader, ownership_label):
    """ResourceSyncEngine over the in-memory cluster."""
    return ResourceSyncEngine(cluster, manifest_loader, ownership_label)


@pytest.fixture
def coordinator(cluster):
    return ConflictCoordinator(cluster)


@pytest.fixture
def reconciler_context(config_provider, artifact_cache, artifact_source, sync_engine, coordinator):
    """ReconcilerContext wired from the fixtures above."""
    return ReconcilerContext(
        config_provider=config_provider,
        cache=artifact_cache,
        source=artifact_source,
        engine=sync_engine,
        coordinator=coordinator,
    )


# =============================================================================
# Installation and facade
# =============================================================================

@pytest.fixture
def installation():
    """A fresh Installation with a fixed uid."""
    return Installation(
        name="rhmi",
        namespace=OPERATOR_NAMESPACE,
        uid="0b9b3f0e-6b53-4c1e-8f57-3f1c9a0d2e11",
    )


@pytest.fixture
async def stagehand(config, cluster, fetcher):
    """Initialized Stagehand facade over the in-memory cluster."""
    async with Stagehand(config, cluster=cluster, fetcher=fetcher) as instance:
        yield instance
