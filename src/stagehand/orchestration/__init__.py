"""
stagehand.orchestration - Orchestration Layer
===============================================

    - StageOrchestrator:  Walks stages in order and rolls up phases
    - InstallationStore:  Persists Installation snapshots between passes
"""

from stagehand.orchestration.installation_store import (
    InMemoryInstallationStore,
    InstallationStore,
)
from stagehand.orchestration.stage_orchestrator import StageOrchestrator

__all__ = [
    "InMemoryInstallationStore",
    "InstallationStore",
    "StageOrchestrator",
]
