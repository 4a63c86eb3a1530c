"""
stagehand.orchestration.stage_orchestrator - Staged Installation Walk
=======================================================================

The StageOrchestrator runs one reconciliation pass over an Installation.
It owns the product → stage → installation phase roll-up; the actual work
is done by the product reconcilers built from the registry table.

    ┌─────────────────────────────────────────────────────────────┐
    │                    StageOrchestrator                        │
    │                                                             │
    │  Stage 1 ──→ product A ──→ reconciler.reconcile() ─┐        │
    │          └─→ product B ──→ reconciler.reconcile() ─┤        │
    │                                                    ↓        │
    │              stage phase = roll-up of product phases        │
    │                                                             │
    │  ── not COMPLETED? stop here, return the stage phase ──     │
    │                                                             │
    │  Stage 2 ──→ ...                                            │
    │                                                             │
    │  every stage COMPLETED ──→ (COMPLETED, None), last_error="" │
    └─────────────────────────────────────────────────────────────┘

Pass Rules:
    1. Stages are walked in registry order. Later stages depend on earlier
       ones, so a stage that is not COMPLETED ends the walk.
    2. Within a stage every product is attempted, sequentially, even after
       a sibling fails.
    3. Each product's phase is whatever its reconciler returned this pass.
       A non-cancellation error is written to status.last_error.
    4. A product whose reconciler cannot be built (ConfigError) is FAILED.
    5. Nothing is retried here. An external control loop calls reconcile()
       again until it sees a terminal phase.

Usage:
    >>> orchestrator = StageOrchestrator(default_registry(), context)
    >>> phase, error = await orchestrator.reconcile(installation)
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from stagehand.core.enums import Phase, StageName
from stagehand.core.exceptions import ReconcileCancelled, StagehandError
from stagehand.core.state import Installation, ProductStatus, StageStatus
from stagehand.products.base import ReconcilerContext
from stagehand.products.registry import (
    ProductRegistration,
    RegistryTable,
    StageDefinition,
)

logger = structlog.get_logger()


class StageOrchestrator:
    """Walks the registry's stages and rolls product phases up.

    Attributes:
        _registry: Ordered stages → product registrations.
        _context: Collaborators handed to every reconciler factory.
    """

    def __init__(
        self,
        registry: RegistryTable,
        context: ReconcilerContext,
    ) -> None:
        self._registry = registry
        self._context = context
        self._logger = logger.bind(component="stage_orchestrator")

    @property
    def registry(self) -> RegistryTable:
        return self._registry

    # =========================================================================
    # Main Entry Point
    # =========================================================================
    async def reconcile(
        self,
        installation: Installation,
        cancel: Optional[asyncio.Event] = None,
    ) -> tuple[Phase, Optional[str]]:
        """Run one pass over ``installation``, mutating its status in place.

        Args:
            installation: The installation to reconcile.
            cancel: Optional cooperative cancellation signal.

        Returns:
            ``(phase, error)``: COMPLETED and None when every stage is
            complete, otherwise the phase of the first incomplete stage and
            the last error raised during this pass (None if there was none).
        """
        self._logger.info(
            "installation_reconcile_starting",
            installation=installation.name,
            stages=[s.name.value for s in self._registry.stages],
        )

        pass_error: Optional[str] = None
        for stage in self._registry.stages:
            stage_status = self._stage_status(installation, stage.name)

            for registration in stage.products:
                if cancel is not None and cancel.is_set():
                    cancelled = ReconcileCancelled(
                        message=f"cancelled before reconciling {registration.name.value}",
                    )
                    stage_status.phase = Phase.IN_PROGRESS
                    self._logger.info("installation_reconcile_cancelled")
                    return Phase.IN_PROGRESS, str(cancelled)

                product_status = self._product_status(
                    installation, stage_status, registration
                )
                phase, error = await self._reconcile_product(
                    registration, installation, product_status, cancel
                )
                product_status.status = phase

                if error is not None:
                    pass_error = str(error)
                    if not isinstance(error, ReconcileCancelled):
                        installation.status.last_error = pass_error

            stage_status.phase = stage_status.roll_up(stage.product_names)
            self._log_stage(stage, stage_status)

            if stage_status.phase != Phase.COMPLETED:
                return stage_status.phase, pass_error

        installation.status.last_error = ""
        self._logger.info(
            "installation_reconcile_completed",
            installation=installation.name,
        )
        return Phase.COMPLETED, None

    # =========================================================================
    # Internal helpers
    # =========================================================================
    async def _reconcile_product(
        self,
        registration: ProductRegistration,
        installation: Installation,
        product_status: ProductStatus,
        cancel: Optional[asyncio.Event],
    ) -> tuple[Phase, Optional[StagehandError]]:
        try:
            reconciler = registration.factory(self._context)
        except StagehandError as e:
            self._logger.error(
                "reconciler_construction_failed",
                product=registration.name.value,
                error_code=e.error_code,
                error=e.message,
            )
            return Phase.FAILED, e

        return await reconciler.reconcile(installation, product_status, cancel)

    @staticmethod
    def _stage_status(installation: Installation, name: StageName) -> StageStatus:
        stage_status = installation.status.stages.get(name)
        if stage_status is None:
            stage_status = StageStatus(name=name)
            installation.status.stages[name] = stage_status
        return stage_status

    @staticmethod
    def _product_status(
        installation: Installation,
        stage_status: StageStatus,
        registration: ProductRegistration,
    ) -> ProductStatus:
        product_status = stage_status.products.get(registration.name)
        if product_status is None:
            product_status = installation.get_product_status(registration.name)
            stage_status.products[registration.name] = product_status
        return product_status

    def _log_stage(self, stage: StageDefinition, stage_status: StageStatus) -> None:
        self._logger.info(
            "stage_reconciled",
            stage=stage.name.value,
            phase=stage_status.phase.value,
            products={
                name.value: status.status.value
                for name, status in stage_status.products.items()
            },
        )
