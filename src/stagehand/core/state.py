"""
stagehand.core.state - Installation State Models
==================================================

This module defines the Installation aggregate and the status models that
track what every stage and product is DOING across reconciliation passes.
They are distinct from the resource models in models.py:

    models.py:  WHAT gets synchronized (manifests, identities, cache records)
    state.py:   HOW FAR the installation has got (phases per stage/product)

State Architecture:

    ┌───────────────────────┐
    │     Installation      │  aggregate root, one per cluster
    │  spec:  what to build │
    │  status:              │
    │    last_error         │
    │    stages ────────────┼──→ StageStatus (per StageName)
    └───────────────────────┘         │ phase (roll-up)
                                      └──→ ProductStatus (per ProductName)
                                              status: Phase

Lifecycle:
    - Installation: created once per cluster, mutated by the StageOrchestrator
      on every pass, never deleted here.
    - StageStatus: created the first time the orchestrator walks the stage.
    - ProductStatus: created zero-valued (status=NONE) the first time the
      product is referenced; afterwards only its reconciler writes it.

Unlike the resource models, these are mutated in place by the orchestrator
during a pass; the InstallationStore persists a snapshot after each pass.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from stagehand.core.enums import (
    InstallationType,
    Phase,
    PreflightStatus,
    ProductName,
    StageName,
)


INSTALLATION_API_VERSION = "integreatly.org/v1alpha1"
INSTALLATION_KIND = "Installation"


# =============================================================================
# Product Status
# =============================================================================
class ProductStatus(BaseModel):
    """Observed status of one product.

    Attributes:
        name: The product this status belongs to.
        operator_version: Operator version stamped after a successful pass.
        version: Product version stamped after a successful pass.
        host: Public host of the product, if it exposes one.
        type: Free-form product type tag.
        mobile: Whether the product is a mobile service.
        status: Phase returned by the product's reconciler on the last pass.
    """

    name: ProductName = Field(description="Product name")
    operator_version: str = Field(default="", description="Installed operator version")
    version: str = Field(default="", description="Installed product version")
    host: str = Field(default="", description="Public host of the product")
    type: str = Field(default="", description="Product type tag")
    mobile: bool = Field(default=False, description="Mobile service flag")
    status: Phase = Field(default=Phase.NONE, description="Product phase")


# =============================================================================
# Stage Status
# =============================================================================
class StageStatus(BaseModel):
    """Observed status of one installation stage.

    The phase is a roll-up: COMPLETED only when every product in the stage
    is COMPLETED, otherwise the phase of the first product that is not.
    """

    name: StageName = Field(description="Stage name")
    phase: Phase = Field(default=Phase.NONE, description="Rolled-up stage phase")
    products: dict[ProductName, ProductStatus] = Field(
        default_factory=dict,
        description="Map of product name → ProductStatus",
    )

    def roll_up(self, order: list[ProductName]) -> Phase:
        """Compute the stage phase from its products.

        Args:
            order: Product order used to pick the first non-completed product.

        Returns:
            COMPLETED if every listed product is COMPLETED, otherwise the
            phase of the first product (in ``order``) that is not.
        """
        for product in order:
            status = self.products.get(product)
            phase = status.status if status is not None else Phase.NONE
            if phase != Phase.COMPLETED:
                return phase
        return Phase.COMPLETED


# =============================================================================
# Installation Spec
# =============================================================================
class PullSecretSpec(BaseModel):
    """Reference to the image pull secret copied into product namespaces."""

    name: str = ""
    namespace: str = ""


class InstallationSpec(BaseModel):
    """Desired state of an installation."""

    type: InstallationType = Field(default=InstallationType.MANAGED)
    routing_subdomain: str = Field(default="")
    master_url: str = Field(default="")
    namespace_prefix: str = Field(default="")
    self_signed_certs: bool = Field(default=False)
    pull_secret: PullSecretSpec = Field(default_factory=PullSecretSpec)
    use_cluster_storage: bool = Field(default=False)
    smtp_secret: str = Field(
        default="",
        description="Secret in the installation namespace holding SMTP settings",
    )


# =============================================================================
# Installation Status
# =============================================================================
class InstallationStatus(BaseModel):
    """Observed state of an installation.

    Attributes:
        stages: Map of stage name → StageStatus. Stage ORDER is not kept
            here; it belongs to the registry table.
        preflight_status: Outcome of the pre-installation checks.
        preflight_message: Human-readable preflight detail.
        last_error: The most recent fatal error message ("" when healthy).
        github_oauth_enabled: Feature flag for GitHub OAuth.
        smtp_enabled: Feature flag for SMTP.
    """

    stages: dict[StageName, StageStatus] = Field(default_factory=dict)
    preflight_status: PreflightStatus = Field(default=PreflightStatus.IN_PROGRESS)
    preflight_message: str = Field(default="")
    last_error: str = Field(default="")
    github_oauth_enabled: bool = Field(default=False)
    smtp_enabled: bool = Field(default=False)


# =============================================================================
# Installation
# =============================================================================
class Installation(BaseModel):
    """The installation aggregate root.

    Example:
        >>> inst = Installation(name="rhmi", namespace="integreatly-operator")
        >>> status = inst.get_product_status(ProductName.FUSE_ON_OPENSHIFT)
        >>> status.status
        <Phase.NONE: ''>
    """

    name: str = Field(description="Installation resource name")
    namespace: str = Field(description="Namespace the installation lives in")
    uid: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Cluster-assigned unique id",
    )
    spec: InstallationSpec = Field(default_factory=InstallationSpec)
    status: InstallationStatus = Field(default_factory=InstallationStatus)

    def get_product_status(self, product: ProductName) -> ProductStatus:
        """Find a product's status in any stage.

        Returns:
            The stored ProductStatus, or a new zero-valued one (not yet
            attached to any stage) if the product has never been referenced.
        """
        for stage in self.status.stages.values():
            if product in stage.products:
                return stage.products[product]
        return ProductStatus(name=product)

    def get_stage_status(self, stage: StageName) -> Optional[StageStatus]:
        """Return the stored StageStatus, or None if the stage was never walked."""
        return self.status.stages.get(stage)

    def owner_reference(self) -> dict[str, Any]:
        """Owner back-reference stamped onto every managed resource."""
        return {
            "apiVersion": INSTALLATION_API_VERSION,
            "kind": INSTALLATION_KIND,
            "name": self.name,
            "uid": self.uid,
        }
