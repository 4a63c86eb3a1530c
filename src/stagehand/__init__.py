"""
Stagehand - Staged Product Installation Reconciler
====================================================

Stagehand installs and upgrades independently versioned products onto a
cluster. Each product walks a shared phase state machine; products are
grouped into ordered stages whose phases roll up into the installation's.

Architecture Layers (top to bottom):
    1. Orchestration   - StageOrchestrator, InstallationStore
    2. Products        - ProductReconciler implementations, registry table
    3. Sync            - artifact cache, manifest loading, ownership-safe apply
    4. Infrastructure  - cluster store and HTTP artifact source

Quick Start:
    >>> from stagehand import Stagehand
    >>> async with Stagehand() as stagehand:
    ...     phase, error = await stagehand.reconcile(installation)
"""

# =============================================================================
# Package Version
# =============================================================================
# Single source of truth for the package version; pyproject.toml reads it.
# =============================================================================
__version__ = "0.1.0"

from stagehand.facade import Stagehand

__all__ = ["Stagehand", "__version__"]
