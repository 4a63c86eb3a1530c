"""
stagehand.sync.manifests - Manifest Loading
=============================================

Turns raw manifest content into typed Manifest objects ready to apply.

Pipeline per document:

    ManifestDocument (bytes, filename)
        │ 1. canonicalize: .yml/.yaml → YAML decode, otherwise JSON decode
        ↓
    mapping
        │ 2. deserialize: kind "List" → ResourceList.items, else one ResourceObject
        ↓
    ResourceObject(s)
        │ 3. stamp: metadata.namespace, ownership label, owner reference
        ↓
    Manifest(identity, body)

Any failure in steps 1-2 is a ParseError naming the source file. Lists are
decoded through a typed envelope schema, then each item is validated on its
own: a bad item is reported as "{filename}[{index}]" and the remaining items
still load (see ManifestLoader.load_each).
"""

from __future__ import annotations

import json
import posixpath
from typing import Any, Literal, Optional

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from stagehand.core.config import OwnershipLabelConfig
from stagehand.core.exceptions import ParseError
from stagehand.core.models import Manifest, ManifestDocument, ResourceIdentity

logger = structlog.get_logger()

YAML_EXTENSIONS = (".yml", ".yaml")


# =============================================================================
# Typed Schemas
# =============================================================================
# Only the fields the pipeline relies on are declared. Everything else is
# carried through untouched (extra="allow").
# =============================================================================
class ObjectMeta(BaseModel):
    model_config = {"extra": "allow"}

    name: str = Field(min_length=1)
    namespace: Optional[str] = None
    labels: dict[str, str] = Field(default_factory=dict)


class ResourceObject(BaseModel):
    """One cluster object as found in a manifest file."""

    model_config = {"extra": "allow", "populate_by_name": True}

    api_version: str = Field(alias="apiVersion", min_length=1)
    kind: str = Field(min_length=1)
    metadata: ObjectMeta

    def to_body(self) -> dict[str, Any]:
        # namespace/labels defaults are overwritten when the body is stamped.
        return self.model_dump(by_alias=True)


class ResourceList(BaseModel):
    """A ``kind: List`` manifest wrapping several objects.

    Items stay untyped here and are validated one by one, so a single bad
    item does not take its siblings down with it.
    """

    model_config = {"extra": "allow", "populate_by_name": True}

    api_version: str = Field(default="v1", alias="apiVersion")
    kind: Literal["List"]
    items: list[dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# Loader
# =============================================================================
def canonicalize(document: ManifestDocument) -> dict[str, Any]:
    """Decode a manifest into its canonical JSON-compatible mapping.

    Raises:
        ParseError: If the content is not valid JSON/YAML or not a mapping.
    """
    extension = posixpath.splitext(document.filename)[1].lower()
    try:
        if extension in YAML_EXTENSIONS:
            decoded = yaml.safe_load(document.content)
            # Round-trip through JSON so YAML-only types (dates, etc.) fail here.
            decoded = json.loads(json.dumps(decoded))
        else:
            decoded = json.loads(document.content)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        kind = "yaml" if extension in YAML_EXTENSIONS else "json"
        raise ParseError(
            message=f"failed to convert {kind} to json {document.filename}: {e}",
            source=document.filename,
        ) from e

    if not isinstance(decoded, dict):
        raise ParseError(
            message=f"failed to load resource {document.filename}: not an object",
            source=document.filename,
        )
    return decoded


class ManifestLoader:
    """Loads manifest documents into stamped, typed Manifests.

    Example:
        >>> loader = ManifestLoader(OwnershipLabelConfig())
        >>> manifests = loader.load(doc, "openshift", installation.owner_reference())
        >>> manifests[0].identity.kind
        'ImageStream'
    """

    def __init__(self, ownership_label: OwnershipLabelConfig) -> None:
        self._label = ownership_label
        self._logger = logger.bind(component="manifest_loader")

    @property
    def ownership_label(self) -> OwnershipLabelConfig:
        return self._label

    def load(
        self,
        document: ManifestDocument,
        namespace: str,
        owner: dict[str, Any],
    ) -> list[Manifest]:
        """Decode ``document`` into one Manifest per contained resource.

        Raises:
            ParseError: If the document, or any resource in it, cannot be
                decoded or does not match the resource schema.
        """
        manifests, errors = self.load_each(document, namespace, owner)
        if errors:
            raise errors[0]
        return manifests

    def load_each(
        self,
        document: ManifestDocument,
        namespace: str,
        owner: dict[str, Any],
    ) -> tuple[list[Manifest], list[ParseError]]:
        """Like load(), but a bad List item only costs that item.

        Returns:
            ``(manifests, errors)``. A document that cannot be decoded at all
            yields no manifests and a single error; otherwise each List item
            that fails validation yields one error with source
            ``"{filename}[{index}]"``.
        """
        try:
            decoded = canonicalize(document)
            if decoded.get("kind") == "List":
                entries = [
                    (f"{document.filename}[{index}]", item)
                    for index, item in enumerate(
                        ResourceList.model_validate(decoded).items
                    )
                ]
            else:
                entries = [(document.filename, decoded)]
        except ParseError as e:
            return [], [e]
        except ValidationError as e:
            return [], [self._schema_error(document.filename, e)]

        manifests: list[Manifest] = []
        errors: list[ParseError] = []
        for source, raw in entries:
            try:
                obj = ResourceObject.model_validate(raw)
            except ValidationError as e:
                errors.append(self._schema_error(source, e))
                continue
            manifests.append(self._stamp(obj, namespace, owner, document.filename))

        self._logger.debug(
            "manifest_loaded",
            source=document.filename,
            resources=len(manifests),
            invalid=len(errors),
        )
        return manifests, errors

    @staticmethod
    def _schema_error(source: str, e: ValidationError) -> ParseError:
        return ParseError(
            message=f"failed to load resource {source}: {e}",
            source=source,
            details={"errors": e.errors(include_url=False)},
        )

    def _stamp(
        self,
        obj: ResourceObject,
        namespace: str,
        owner: dict[str, Any],
        source: str,
    ) -> Manifest:
        body = obj.to_body()
        metadata = body.setdefault("metadata", {})
        metadata["namespace"] = namespace

        labels = dict(metadata.get("labels") or {})
        labels[self._label.key] = self._label.value
        metadata["labels"] = labels

        references = [
            ref for ref in metadata.get("ownerReferences") or []
            if ref.get("uid") != owner.get("uid")
        ]
        metadata["ownerReferences"] = references + [dict(owner)]

        return Manifest(
            identity=ResourceIdentity(
                api_version=obj.api_version,
                kind=obj.kind,
                name=obj.metadata.name,
                namespace=namespace,
            ),
            body=body,
            source=source,
        )
