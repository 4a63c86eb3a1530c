"""
Reconcile Example: Install Fuse on OpenShift
==============================================

Runs reconciliation passes for one Installation until it reaches a
terminal phase, then prints the product status.

By default the cluster is simulated in memory and the templates are
downloaded from the real application-templates repository. Pass
``--kube`` to run against the cluster in your current kubeconfig.

Usage:
    python examples/reconcile_fuse.py
    python examples/reconcile_fuse.py --kube
"""

from __future__ import annotations

import asyncio
import sys

from stagehand.core.config import configure_logging, load_config
from stagehand.core.enums import ProductName
from stagehand.core.state import Installation
from stagehand.facade import Stagehand
from stagehand.infrastructure.cluster import ClusterClient, InMemoryClusterClient

MAX_PASSES = 3


def _cluster(use_kube: bool) -> ClusterClient:
    if not use_kube:
        return InMemoryClusterClient()

    from kubernetes import client, config as kube_config
    from kubernetes.dynamic import DynamicClient

    from stagehand.infrastructure.kube import KubernetesClusterClient

    kube_config.load_kube_config()
    return KubernetesClusterClient(DynamicClient(client.ApiClient()))


async def main(use_kube: bool) -> None:
    config = load_config()
    configure_logging(config)

    installation = Installation(name="rhmi", namespace=config.operator_namespace)

    async with Stagehand(config, cluster=_cluster(use_kube)) as stagehand:
        for attempt in range(1, MAX_PASSES + 1):
            phase, error = await stagehand.reconcile(installation)
            print(f"Pass {attempt}: phase={phase.value!r} error={error}")
            if phase.is_terminal:
                break

    fuse = installation.get_product_status(ProductName.FUSE_ON_OPENSHIFT)
    print()
    print("Fuse on OpenShift")
    print("-" * 40)
    print(f"Status  : {fuse.status.value}")
    print(f"Version : {fuse.version or 'N/A'}")


if __name__ == "__main__":
    asyncio.run(main("--kube" in sys.argv[1:]))
