"""
stagehand.core.enums - Type-Safe Enumerations
===============================================

This module defines all enumeration types used throughout stagehand.
Enums provide type safety, prevent typos, and make the codebase self-documenting.

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: Phase.COMPLETED == "completed"
    - They have human-readable representations

Architecture Mapping:

    ┌─────────────────────────────────────────────────────────────────┐
    │  INSTALLATION                                                   │
    │    StageName: The ordered installation stages                   │
    │    Phase: Progress of an installation, stage or product         │
    │    InstallationType / PreflightStatus: Installation metadata    │
    ├─────────────────────────────────────────────────────────────────┤
    │  PRODUCTS                                                       │
    │    ProductName: Every independently versioned product           │
    ├─────────────────────────────────────────────────────────────────┤
    │  SYNCHRONIZATION                                                │
    │    RegistryCategory: Groups in the shared samples registry      │
    └─────────────────────────────────────────────────────────────────┘
"""

from enum import Enum


# =============================================================================
# Phase Enumeration
# =============================================================================
# The shared state machine that every product reconciler satisfies. The same
# values are rolled up into stage phases and the overall installation phase.
#
#   NONE → (ACCEPTED | CREATING_* | AWAITING_* | IN_PROGRESS) → COMPLETED
#                                                             ↘ FAILED
#
# COMPLETED and FAILED end a pass, but a later pass may move a product out
# of them again (e.g. after a configuration change).
# =============================================================================
class Phase(str, Enum):
    """Progress state of an installation, stage or product.

    Terminal (for a single pass):
        COMPLETED, FAILED

    Usage:
        >>> phase = Phase.COMPLETED
        >>> phase.is_terminal  # True
        >>> Phase.NONE.value  # ""
    """

    NONE = ""
    ACCEPTED = "accepted"
    CREATING_SUBSCRIPTION = "creating subscription"
    AWAITING_OPERATOR = "awaiting operator"
    CREATING_COMPONENTS = "creating components"
    AWAITING_COMPONENTS = "awaiting components"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True when a pass has nothing further to do for this phase."""
        return self in (Phase.COMPLETED, Phase.FAILED)


# =============================================================================
# Stage Name Enumeration
# =============================================================================
# The closed set of installation stages. Declaration order here is NOT the
# execution order: the registry table passed to the StageOrchestrator owns
# the ordering (see products/registry.py).
# =============================================================================
class StageName(str, Enum):
    """Named installation stages."""

    BOOTSTRAP = "bootstrap"
    CLOUD_RESOURCES = "cloud-resources"
    MONITORING = "monitoring"
    AUTHENTICATION = "authentication"
    PRODUCTS = "products"
    SOLUTION_EXPLORER = "solution-explorer"


# =============================================================================
# Product Name Enumeration
# =============================================================================
class ProductName(str, Enum):
    """Every product the installer knows how to reference.

    Only products with an entry in the registry table are actually
    reconciled; the rest can still appear in persisted status.
    """

    AMQ_STREAMS = "amqstreams"
    AMQ_ONLINE = "amqonline"
    SOLUTION_EXPLORER = "solution-explorer"
    RHSSO = "rhsso"
    RHSSO_USER = "rhssouser"
    CODEREADY_WORKSPACES = "codeready-workspaces"
    FUSE = "fuse"
    FUSE_ON_OPENSHIFT = "fuse-on-openshift"
    THREESCALE = "3scale"
    UPS = "ups"
    MONITORING = "monitoring"
    CLOUD_RESOURCES = "cloud-resources"


# =============================================================================
# Installation Metadata
# =============================================================================
class InstallationType(str, Enum):
    """Flavour of installation requested in the Installation spec."""

    WORKSHOP = "workshop"
    MANAGED = "managed"


class PreflightStatus(str, Enum):
    """Outcome of the pre-installation checks."""

    IN_PROGRESS = ""
    SUCCESS = "successful"
    FAILED = "failed"


# =============================================================================
# Registry Category Enumeration
# =============================================================================
# The shared samples registry keeps one list per category. The value is the
# category name used in logs and reports; `spec_field` is the list field on
# the registry object that holds the names.
# =============================================================================
class RegistryCategory(str, Enum):
    """Resource categories published to the shared samples registry."""

    IMAGE_STREAMS = "image-streams"
    TEMPLATES = "templates"

    @property
    def spec_field(self) -> str:
        """Name of the list field on the registry object's spec."""
        return {
            RegistryCategory.IMAGE_STREAMS: "skippedImagestreams",
            RegistryCategory.TEMPLATES: "skippedTemplates",
        }[self]
