"""
stagehand.products.registry - Stage and Product Registry Table
================================================================

The explicit, static table the StageOrchestrator walks. Stages are listed
in the order they must complete; each stage lists the products installed in
it and how to build their reconcilers.

    RegistryTable
      └── StageDefinition(PRODUCTS)
            └── ProductRegistration(FUSE_ON_OPENSHIFT, FuseOnOpenshiftReconciler)

Adding a product means adding a ProductRegistration here. There is no
discovery or plug-in mechanism.
"""

from __future__ import annotations

from typing import Callable, Optional

from pydantic import BaseModel, Field, model_validator

from stagehand.core.enums import ProductName, StageName
from stagehand.products.base import ProductReconciler, ReconcilerContext
from stagehand.products.fuse_on_openshift import FuseOnOpenshiftReconciler

ReconcilerFactory = Callable[[ReconcilerContext], ProductReconciler]


class ProductRegistration(BaseModel):
    """How to build the reconciler for one product."""

    name: ProductName
    factory: ReconcilerFactory = Field(description="Builds the product's reconciler")


class StageDefinition(BaseModel):
    """One installation stage and its products, in reconcile order."""

    name: StageName
    products: list[ProductRegistration] = Field(default_factory=list)

    @property
    def product_names(self) -> list[ProductName]:
        return [p.name for p in self.products]


class RegistryTable(BaseModel):
    """Ordered stages → product registrations.

    A product may appear in at most one stage, and a stage at most once.
    """

    stages: list[StageDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique(self) -> "RegistryTable":
        stage_names = [s.name for s in self.stages]
        if len(stage_names) != len(set(stage_names)):
            raise ValueError("a stage may only be registered once")
        products = [p for s in self.stages for p in s.product_names]
        if len(products) != len(set(products)):
            raise ValueError("a product may only be registered in one stage")
        return self

    def stage(self, name: StageName) -> Optional[StageDefinition]:
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def stage_of(self, product: ProductName) -> Optional[StageName]:
        for stage in self.stages:
            if product in stage.product_names:
                return stage.name
        return None


def default_registry() -> RegistryTable:
    """The stages and products this package installs."""
    return RegistryTable(
        stages=[
            StageDefinition(
                name=StageName.PRODUCTS,
                products=[
                    ProductRegistration(
                        name=ProductName.FUSE_ON_OPENSHIFT,
                        factory=FuseOnOpenshiftReconciler,
                    ),
                ],
            ),
        ]
    )
