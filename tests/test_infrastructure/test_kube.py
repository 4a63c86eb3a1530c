"""
Tests for stagehand.infrastructure.kube - KubernetesClusterClient
===================================================================

The kubernetes DynamicClient is replaced with unittest.mock objects, so
these tests only verify how calls and errors are translated.
"""

from unittest.mock import MagicMock

import pytest
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import NotFoundError

from stagehand.core.exceptions import ClusterError
from stagehand.core.models import ResourceIdentity
from stagehand.infrastructure.kube import KubernetesClusterClient

IDENTITY = ResourceIdentity(
    api_version="template.openshift.io/v1",
    kind="Template",
    name="fuse-console",
    namespace="openshift",
)


def _body() -> dict:
    return {
        "apiVersion": "template.openshift.io/v1",
        "kind": "Template",
        "metadata": {"name": "fuse-console", "namespace": "openshift"},
    }


def _result(obj: dict) -> MagicMock:
    result = MagicMock()
    result.to_dict.return_value = obj
    return result


@pytest.fixture
def resource():
    return MagicMock()


@pytest.fixture
def kube(resource):
    dynamic = MagicMock()
    dynamic.resources.get.return_value = resource
    return KubernetesClusterClient(dynamic)


class TestKubernetesClusterClient:
    """Tests for call translation and error mapping."""

    async def test_get_returns_dict(self, kube, resource) -> None:
        resource.get.return_value = _result(_body())

        obj = await kube.get(IDENTITY)

        assert obj == _body()
        resource.get.assert_called_once_with(name="fuse-console", namespace="openshift")

    async def test_get_not_found_returns_none(self, kube, resource) -> None:
        resource.get.side_effect = NotFoundError(ApiException(status=404, reason="Not Found"))
        assert await kube.get(IDENTITY) is None

    async def test_get_other_error_raises(self, kube, resource) -> None:
        resource.get.side_effect = ApiException(status=500, reason="Internal Server Error")
        with pytest.raises(ClusterError) as exc_info:
            await kube.get(IDENTITY)
        assert exc_info.value.error_code == "CLUSTER_ERROR"
        assert exc_info.value.details["status"] == 500

    async def test_create(self, kube, resource) -> None:
        resource.create.return_value = _result(_body())

        await kube.create(_body())

        resource.create.assert_called_once_with(body=_body(), namespace="openshift")

    async def test_create_conflict_maps_to_already_exists(self, kube, resource) -> None:
        resource.create.side_effect = ApiException(status=409, reason="Conflict")
        with pytest.raises(ClusterError) as exc_info:
            await kube.create(_body())
        assert exc_info.value.error_code == "ALREADY_EXISTS"

    async def test_delete(self, kube, resource) -> None:
        await kube.delete(IDENTITY)
        resource.delete.assert_called_once_with(name="fuse-console", namespace="openshift")

    async def test_update_uses_replace(self, kube, resource) -> None:
        resource.replace.return_value = _result(_body())
        await kube.update(_body())
        resource.replace.assert_called_once_with(body=_body(), namespace="openshift")

    async def test_list_builds_label_selector(self, kube, resource) -> None:
        resource.get.return_value = _result({"items": [_body()]})

        items = await kube.list(
            "template.openshift.io/v1",
            "Template",
            namespace="openshift",
            labels={"integreatly": "true"},
        )

        assert items == [_body()]
        resource.get.assert_called_once_with(
            namespace="openshift", label_selector="integreatly=true"
        )

    async def test_discovery_failure(self, resource) -> None:
        dynamic = MagicMock()
        dynamic.resources.get.side_effect = RuntimeError("no such API")
        kube = KubernetesClusterClient(dynamic)

        with pytest.raises(ClusterError) as exc_info:
            await kube.get(IDENTITY)
        assert exc_info.value.error_code == "DISCOVERY_FAILED"
