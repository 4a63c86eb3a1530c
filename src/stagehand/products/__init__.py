"""
stagehand.products - Product Reconcilers
==========================================

    ProductReconciler          → the fixed per-product pipeline (base.py)
    FuseOnOpenshiftReconciler  → image streams + templates into "openshift"
    RegistryTable              → ordered stages → product registrations
"""

from stagehand.products.base import ArtifactGroup, ProductReconciler, ReconcilerContext
from stagehand.products.fuse_on_openshift import FuseOnOpenshiftReconciler
from stagehand.products.registry import (
    ProductRegistration,
    RegistryTable,
    StageDefinition,
    default_registry,
)

__all__ = [
    "ArtifactGroup",
    "FuseOnOpenshiftReconciler",
    "ProductReconciler",
    "ProductRegistration",
    "ReconcilerContext",
    "RegistryTable",
    "StageDefinition",
    "default_registry",
]
