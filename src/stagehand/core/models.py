"""
stagehand.core.models - Resource Data Models
==============================================

This module defines the Pydantic models that flow through the resource
synchronization pipeline. Every component speaks in terms of these types
instead of passing untyped dicts around.

Model Hierarchy:
    ResourceIdentity  → Which object? ({kind, name, namespace} + apiVersion)
    ManifestDocument  → Raw manifest content, as fetched or cached
    Manifest          → One typed cluster resource: identity + canonical body
    CacheRecord       → Immutable bundle of fetched artifacts

Data Flow:
    ┌──────────────┐ bytes  ┌──────────────────┐ ManifestDocument ┌──────────────┐
    │ Artifact     │ ─────→ │ ExternalArtifact │ ───────────────→ │ Manifest     │
    │ Fetcher      │        │ Cache            │                  │ Loader       │
    └──────────────┘        └──────────────────┘                  └──────┬───────┘
                                     │ CacheRecord                       │ Manifest
                                     ↓                                   ↓
                              ┌──────────────┐                   ┌──────────────┐
                              │ ClusterClient│ ←──────────────── │ ResourceSync │
                              └──────────────┘   get/create/...  │ Engine       │
                                                                 └──────────────┘
"""

from __future__ import annotations

import base64
import copy
from typing import Any, Optional

from pydantic import BaseModel, Field

from stagehand.core.exceptions import ParseError


# =============================================================================
# Resource Identity
# =============================================================================
class ResourceIdentity(BaseModel):
    """Identity of one cluster object.

    The store key is ``(kind, name, namespace)``; ``api_version`` is carried
    along so real cluster backends can find the right API endpoint.
    A ``namespace`` of None means the object is cluster scoped.

    Example:
        >>> ResourceIdentity(api_version="v1", kind="ConfigMap", name="x", namespace="ns").key
        ('ConfigMap', 'x', 'ns')
    """

    model_config = {"frozen": True}

    api_version: str = Field(default="v1", description="API group/version")
    kind: str = Field(description="Resource kind")
    name: str = Field(description="Resource name")
    namespace: Optional[str] = Field(
        default=None,
        description="Namespace (None for cluster-scoped objects)",
    )

    @property
    def key(self) -> tuple[str, str, Optional[str]]:
        """The ``(kind, name, namespace)`` key the store is indexed by."""
        return (self.kind, self.name, self.namespace)

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> "ResourceIdentity":
        """Derive the identity of a cluster object dict."""
        metadata = obj.get("metadata") or {}
        return cls(
            api_version=obj.get("apiVersion", "v1"),
            kind=obj["kind"],
            name=metadata["name"],
            namespace=metadata.get("namespace"),
        )

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"


# =============================================================================
# Manifest Models
# =============================================================================
class ManifestDocument(BaseModel):
    """Raw manifest content as fetched from the artifact source.

    The filename's extension decides how the content is decoded
    (.yml/.yaml → YAML, anything else → JSON).
    """

    filename: str = Field(description="Artifact filename (base name)")
    content: bytes = Field(description="Raw file content")


class Manifest(BaseModel):
    """One cluster resource ready to be applied.

    The body is in canonical (JSON-compatible) form with namespace, owner
    reference and ownership label already stamped. The identity is derived
    from the body once and tracked alongside it.

    Attributes:
        identity: The resource's identity.
        body: Canonical object body.
        source: The artifact filename the manifest came from.
    """

    identity: ResourceIdentity
    body: dict[str, Any]
    source: str = Field(default="", description="Originating artifact filename")

    @property
    def labels(self) -> dict[str, str]:
        return (self.body.get("metadata") or {}).get("labels") or {}

    def to_object(self) -> dict[str, Any]:
        """A deep copy of the body, safe to hand to a cluster client."""
        return copy.deepcopy(self.body)


# =============================================================================
# Cache Record
# =============================================================================
# Cached artifacts are persisted as a ConfigMap. ConfigMap `data` only holds
# strings, so entries that are not valid UTF-8 go to `binaryData` as base64.
# =============================================================================
class CacheRecord(BaseModel):
    """Immutable bundle of fetched artifacts.

    Once a record exists it is complete: every file of the batch is present.

    Attributes:
        name: Cache key (the ConfigMap name).
        namespace: Namespace the record lives in.
        entries: Map of artifact base filename → raw bytes.
    """

    model_config = {"frozen": True}

    name: str
    namespace: str
    entries: dict[str, bytes] = Field(default_factory=dict)

    @property
    def identity(self) -> ResourceIdentity:
        return ResourceIdentity(
            api_version="v1",
            kind="ConfigMap",
            name=self.name,
            namespace=self.namespace,
        )

    def get(self, filename: str) -> bytes:
        """Return the content cached for ``filename``.

        Raises:
            KeyError: If the file was never part of this record.
        """
        return self.entries[filename]

    def document(self, filename: str) -> ManifestDocument:
        """Wrap a cached entry as a ManifestDocument.

        Raises:
            ParseError: If the record has no entry for ``filename``.
        """
        if filename not in self.entries:
            raise ParseError(
                message=(
                    f"cache record {self.namespace}/{self.name} "
                    f"has no entry for {filename}"
                ),
                source=filename,
                details={"cache_key": self.name},
            )
        return ManifestDocument(filename=filename, content=self.entries[filename])

    def to_object(self) -> dict[str, Any]:
        """Serialize to a ConfigMap object."""
        data: dict[str, str] = {}
        binary_data: dict[str, str] = {}
        for key, content in self.entries.items():
            try:
                data[key] = content.decode("utf-8")
            except UnicodeDecodeError:
                binary_data[key] = base64.b64encode(content).decode("ascii")

        obj: dict[str, Any] = {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "data": data,
        }
        if binary_data:
            obj["binaryData"] = binary_data
        return obj

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> "CacheRecord":
        """Deserialize from a ConfigMap object."""
        metadata = obj.get("metadata") or {}
        entries: dict[str, bytes] = {
            key: value.encode("utf-8")
            for key, value in (obj.get("data") or {}).items()
        }
        for key, value in (obj.get("binaryData") or {}).items():
            entries[key] = base64.b64decode(value)
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace", ""),
            entries=entries,
        )
