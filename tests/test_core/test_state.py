"""
Tests for stagehand.core.state and stagehand.core.enums
=========================================================

Verifies the Installation aggregate and the phase roll-up:
    - Phase values and terminal-ness
    - get_product_status() finds existing statuses or returns a fresh one
    - StageStatus.roll_up() picks the first non-completed product phase
    - owner_reference() carries the installation's identity
"""

import pytest

from stagehand.core.enums import Phase, ProductName, RegistryCategory, StageName
from stagehand.core.state import (
    INSTALLATION_API_VERSION,
    Installation,
    ProductStatus,
    StageStatus,
)


# =============================================================================
# Test: Phase
# =============================================================================
class TestPhase:
    """Tests for the Phase enum."""

    def test_none_is_empty_string(self) -> None:
        assert Phase.NONE.value == ""

    def test_multi_word_values(self) -> None:
        """Phase values are the human-readable strings persisted in status."""
        assert Phase.CREATING_SUBSCRIPTION == "creating subscription"
        assert Phase.IN_PROGRESS == "in progress"

    @pytest.mark.parametrize("phase", [Phase.COMPLETED, Phase.FAILED])
    def test_terminal_phases(self, phase: Phase) -> None:
        assert phase.is_terminal

    @pytest.mark.parametrize(
        "phase",
        [Phase.NONE, Phase.ACCEPTED, Phase.IN_PROGRESS, Phase.AWAITING_COMPONENTS],
    )
    def test_non_terminal_phases(self, phase: Phase) -> None:
        assert not phase.is_terminal


class TestRegistryCategory:
    def test_spec_fields(self) -> None:
        assert RegistryCategory.IMAGE_STREAMS.spec_field == "skippedImagestreams"
        assert RegistryCategory.TEMPLATES.spec_field == "skippedTemplates"


# =============================================================================
# Test: StageStatus roll-up
# =============================================================================
class TestStageRollUp:
    """A stage is COMPLETED only when every product in it is COMPLETED."""

    def _stage(self, **phases: Phase) -> StageStatus:
        products = {
            ProductName(name.replace("_", "-")): ProductStatus(
                name=ProductName(name.replace("_", "-")), status=phase
            )
            for name, phase in phases.items()
        }
        return StageStatus(name=StageName.PRODUCTS, products=products)

    def test_all_completed(self) -> None:
        stage = self._stage(fuse=Phase.COMPLETED, ups=Phase.COMPLETED)
        assert stage.roll_up([ProductName.FUSE, ProductName.UPS]) == Phase.COMPLETED

    def test_first_non_completed_wins(self) -> None:
        """Order decides which non-completed phase is reported."""
        stage = self._stage(
            fuse=Phase.COMPLETED,
            ups=Phase.IN_PROGRESS,
            rhsso=Phase.FAILED,
        )
        order = [ProductName.FUSE, ProductName.UPS, ProductName.RHSSO]
        assert stage.roll_up(order) == Phase.IN_PROGRESS
        assert stage.roll_up(list(reversed(order))) == Phase.FAILED

    def test_missing_product_counts_as_none(self) -> None:
        stage = self._stage(fuse=Phase.COMPLETED)
        assert stage.roll_up([ProductName.FUSE, ProductName.UPS]) == Phase.NONE

    def test_empty_stage_is_completed(self) -> None:
        assert StageStatus(name=StageName.BOOTSTRAP).roll_up([]) == Phase.COMPLETED


# =============================================================================
# Test: Installation
# =============================================================================
class TestInstallation:
    """Tests for the Installation aggregate root."""

    def test_unknown_product_gets_fresh_status(self) -> None:
        """A never-referenced product returns a zero-valued status."""
        inst = Installation(name="rhmi", namespace="ops")
        status = inst.get_product_status(ProductName.FUSE_ON_OPENSHIFT)

        assert status.name == ProductName.FUSE_ON_OPENSHIFT
        assert status.status == Phase.NONE
        assert status.version == ""
        assert inst.status.stages == {}, "lookup must not attach the fresh status"

    def test_existing_product_status_is_returned(self) -> None:
        """The stored status object itself comes back, from whichever stage holds it."""
        stored = ProductStatus(name=ProductName.FUSE_ON_OPENSHIFT, status=Phase.FAILED)
        inst = Installation(name="rhmi", namespace="ops")
        inst.status.stages[StageName.PRODUCTS] = StageStatus(
            name=StageName.PRODUCTS,
            products={ProductName.FUSE_ON_OPENSHIFT: stored},
        )

        assert inst.get_product_status(ProductName.FUSE_ON_OPENSHIFT) is stored

    def test_get_stage_status(self) -> None:
        inst = Installation(name="rhmi", namespace="ops")
        assert inst.get_stage_status(StageName.PRODUCTS) is None

    def test_uid_is_generated(self) -> None:
        a = Installation(name="a", namespace="ops")
        b = Installation(name="b", namespace="ops")
        assert a.uid and b.uid and a.uid != b.uid

    def test_owner_reference(self) -> None:
        inst = Installation(name="rhmi", namespace="ops", uid="uid-1")
        assert inst.owner_reference() == {
            "apiVersion": INSTALLATION_API_VERSION,
            "kind": "Installation",
            "name": "rhmi",
            "uid": "uid-1",
        }

    def test_snapshot_round_trip(self) -> None:
        """Status survives a JSON dump/load (how stores persist it)."""
        inst = Installation(name="rhmi", namespace="ops")
        inst.status.stages[StageName.PRODUCTS] = StageStatus(
            name=StageName.PRODUCTS,
            phase=Phase.COMPLETED,
            products={
                ProductName.FUSE_ON_OPENSHIFT: ProductStatus(
                    name=ProductName.FUSE_ON_OPENSHIFT,
                    status=Phase.COMPLETED,
                    version="master",
                ),
            },
        )

        restored = Installation.model_validate_json(inst.model_dump_json())

        status = restored.get_product_status(ProductName.FUSE_ON_OPENSHIFT)
        assert status.status == Phase.COMPLETED
        assert status.version == "master"
