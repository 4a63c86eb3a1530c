"""
Tests for stagehand.products.registry - RegistryTable
=======================================================
"""

import pytest
from pydantic import ValidationError

from stagehand.core.enums import ProductName, StageName
from stagehand.products.fuse_on_openshift import FuseOnOpenshiftReconciler
from stagehand.products.registry import (
    ProductRegistration,
    RegistryTable,
    StageDefinition,
    default_registry,
)


def _registration(name: ProductName) -> ProductRegistration:
    return ProductRegistration(name=name, factory=FuseOnOpenshiftReconciler)


class TestRegistryTable:
    def test_default_registry(self) -> None:
        registry = default_registry()

        assert [s.name for s in registry.stages] == [StageName.PRODUCTS]
        assert registry.stage(StageName.PRODUCTS).product_names == [
            ProductName.FUSE_ON_OPENSHIFT
        ]
        assert registry.stage_of(ProductName.FUSE_ON_OPENSHIFT) == StageName.PRODUCTS

    def test_unknown_lookups(self) -> None:
        registry = default_registry()
        assert registry.stage(StageName.BOOTSTRAP) is None
        assert registry.stage_of(ProductName.THREESCALE) is None

    def test_duplicate_stage_rejected(self) -> None:
        with pytest.raises(ValidationError, match="stage may only be registered once"):
            RegistryTable(stages=[
                StageDefinition(name=StageName.PRODUCTS),
                StageDefinition(name=StageName.PRODUCTS),
            ])

    def test_product_in_two_stages_rejected(self) -> None:
        with pytest.raises(ValidationError, match="one stage"):
            RegistryTable(stages=[
                StageDefinition(
                    name=StageName.BOOTSTRAP,
                    products=[_registration(ProductName.FUSE_ON_OPENSHIFT)],
                ),
                StageDefinition(
                    name=StageName.PRODUCTS,
                    products=[_registration(ProductName.FUSE_ON_OPENSHIFT)],
                ),
            ])

    def test_factory_must_be_callable(self) -> None:
        with pytest.raises(ValidationError):
            ProductRegistration(name=ProductName.FUSE, factory="not-callable")
