"""
Tests for stagehand.sync.conflict_coordinator - ConflictCoordinator
=====================================================================

What's Being Tested:
    - Registry absent → success, no mutating call
    - Names appended in order, duplicates skipped, existing kept
    - Nothing new → no update issued
    - Read/update failures → CoordinationError
"""

import pytest

from stagehand.core.enums import RegistryCategory
from stagehand.core.exceptions import ClusterError, CoordinationError
from stagehand.infrastructure.cluster import InMemoryClusterClient
from stagehand.sync.conflict_coordinator import (
    SAMPLES_REGISTRY,
    ConflictCoordinator,
    merge_names,
)


class FailingUpdateCluster(InMemoryClusterClient):
    async def update(self, obj):
        raise ClusterError("conflict: object has been modified")


class FailingGetCluster(InMemoryClusterClient):
    async def get(self, identity):
        raise ClusterError("forbidden")


class TestMergeNames:
    def test_dedup_and_order(self) -> None:
        assert merge_names(["a", "b"], ["b", "c", "a", "d", "c"]) == ["a", "b", "c", "d"]

    def test_empty(self) -> None:
        assert merge_names([], []) == []


class TestDeclareManaged:
    """Tests for ConflictCoordinator.declare_managed()."""

    async def test_registry_absent_is_success(self, coordinator, cluster) -> None:
        await coordinator.declare_managed(RegistryCategory.TEMPLATES, ["fuse-console"])
        assert cluster.mutation_count == 0

    async def test_appends_new_names(self, samples_registry) -> None:
        cluster = InMemoryClusterClient([samples_registry])
        coordinator = ConflictCoordinator(cluster)

        await coordinator.declare_managed(
            RegistryCategory.IMAGE_STREAMS,
            ["fis-java-openshift", "jenkins", "fis-karaf-openshift"],
        )

        registry = await cluster.get(SAMPLES_REGISTRY)
        assert registry["spec"]["skippedImagestreams"] == [
            "jenkins",
            "fis-java-openshift",
            "fis-karaf-openshift",
        ]
        assert registry["spec"]["skippedTemplates"] == []
        assert cluster.calls_for("cluster") == ["update"]

    async def test_templates_field(self, samples_registry) -> None:
        cluster = InMemoryClusterClient([samples_registry])
        await ConflictCoordinator(cluster).declare_managed(
            RegistryCategory.TEMPLATES, ["fuse-console", "apicurito"]
        )

        registry = await cluster.get(SAMPLES_REGISTRY)
        assert registry["spec"]["skippedTemplates"] == ["fuse-console", "apicurito"]

    async def test_missing_field_is_created(self, samples_registry) -> None:
        del samples_registry["spec"]
        cluster = InMemoryClusterClient([samples_registry])

        await ConflictCoordinator(cluster).declare_managed(RegistryCategory.TEMPLATES, ["t"])

        assert (await cluster.get(SAMPLES_REGISTRY))["spec"]["skippedTemplates"] == ["t"]

    async def test_nothing_new_skips_update(self, samples_registry) -> None:
        """Registry dedup: repeating a declaration issues no further update."""
        cluster = InMemoryClusterClient([samples_registry])
        coordinator = ConflictCoordinator(cluster)

        await coordinator.declare_managed(RegistryCategory.IMAGE_STREAMS, ["jenkins"])
        await coordinator.declare_managed(RegistryCategory.TEMPLATES, [])

        assert cluster.mutation_count == 0

    async def test_repeated_declaration_is_stable(self, samples_registry) -> None:
        cluster = InMemoryClusterClient([samples_registry])
        coordinator = ConflictCoordinator(cluster)

        await coordinator.declare_managed(RegistryCategory.TEMPLATES, ["a", "b"])
        await coordinator.declare_managed(RegistryCategory.TEMPLATES, ["b", "a"])

        registry = await cluster.get(SAMPLES_REGISTRY)
        assert registry["spec"]["skippedTemplates"] == ["a", "b"]
        assert cluster.calls_for("cluster") == ["update"]

    async def test_update_failure(self, samples_registry) -> None:
        coordinator = ConflictCoordinator(FailingUpdateCluster([samples_registry]))

        with pytest.raises(CoordinationError) as exc_info:
            await coordinator.declare_managed(RegistryCategory.TEMPLATES, ["t"])

        assert exc_info.value.category == "templates"
        assert "skippedTemplates" in exc_info.value.message

    async def test_read_failure(self) -> None:
        coordinator = ConflictCoordinator(FailingGetCluster())
        with pytest.raises(CoordinationError):
            await coordinator.declare_managed(RegistryCategory.IMAGE_STREAMS, ["x"])
