"""
stagehand.products.fuse_on_openshift - Fuse on OpenShift
==========================================================

Installs the Fuse image streams, console templates and quickstart templates
into the shared ``openshift`` namespace.

Artifacts (fetched from the application-templates repository at the
configured product version, cached under one record):

    fis-image-streams.json           List of ImageStreams
    fuse-console-*.json, *.yml       console / apicurito Templates
    quickstarts/*-template.json      quickstart Templates

Every synchronized ImageStream and Template name is then added to the
samples registry so the samples operator leaves them alone.
"""

from __future__ import annotations

from stagehand.core.enums import ProductName
from stagehand.core.models import CacheRecord, ManifestDocument
from stagehand.products.base import ArtifactGroup, ProductReconciler
from stagehand.sync.artifact_cache import cache_key_for

CACHE_KEY = "fuse-on-openshift-templates"

IMAGE_STREAMS_FILE = "fis-image-streams.json"

CONSOLE_TEMPLATES = [
    "fuse-console-cluster-os4.json",
    "fuse-console-namespace-os4.json",
    "fuse-apicurito.yml",
]

QUICKSTART_TEMPLATES = [
    "eap-camel-amq-template.json",
    "eap-camel-cdi-template.json",
    "eap-camel-cxf-jaxrs-template.json",
    "eap-camel-cxf-jaxws-template.json",
    "eap-camel-jpa-template.json",
    "karaf-camel-amq-template.json",
    "karaf-camel-log-template.json",
    "karaf-camel-rest-sql-template.json",
    "karaf-cxf-rest-template.json",
    "spring-boot-camel-amq-template.json",
    "spring-boot-camel-config-template.json",
    "spring-boot-camel-drools-template.json",
    "spring-boot-camel-infinispan-template.json",
    "spring-boot-camel-rest-3scale-template.json",
    "spring-boot-camel-rest-sql-template.json",
    "spring-boot-camel-teiid-template.json",
    "spring-boot-camel-template.json",
    "spring-boot-camel-xa-template.json",
    "spring-boot-camel-xml-template.json",
    "spring-boot-cxf-jaxrs-template.json",
    "spring-boot-cxf-jaxws-template.json",
]

QUICKSTARTS_DIR = "quickstarts/"


def artifact_files() -> list[str]:
    """Every artifact path, relative to the versioned source root."""
    return (
        [IMAGE_STREAMS_FILE]
        + CONSOLE_TEMPLATES
        + [QUICKSTARTS_DIR + name for name in QUICKSTART_TEMPLATES]
    )


class FuseOnOpenshiftReconciler(ProductReconciler):
    """Reconciler for the Fuse on OpenShift image streams and templates."""

    product = ProductName.FUSE_ON_OPENSHIFT

    def artifact_groups(self) -> list[ArtifactGroup]:
        return [ArtifactGroup(cache_key=CACHE_KEY, files=artifact_files())]

    def documents(self, records: dict[str, CacheRecord]) -> list[ManifestDocument]:
        record = records[CACHE_KEY]
        # Image streams first; the sync engine orders by kind regardless.
        return [record.document(cache_key_for(path)) for path in artifact_files()]
