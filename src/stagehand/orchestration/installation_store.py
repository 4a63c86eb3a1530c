"""
stagehand.orchestration.installation_store - Installation Persistence
=======================================================================

Keeps the Installation snapshot between reconciliation passes. The facade
saves a snapshot after every pass; the next pass can start from it.

    ┌──────────────┐   save(installation)   ┌────────────────────┐
    │  Stagehand   │ ─────────────────────→ │ InstallationStore  │
    │  (facade)    │ ←───────────────────── │                    │
    └──────────────┘   get(namespace, name) └────────────────────┘

Key Schema:
    (namespace, name) → Installation

Implementations:
    - InstallationStore (ABC):      Abstract interface
    - InMemoryInstallationStore:    Dict-based for dev/testing
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from stagehand.core.state import Installation

logger = logging.getLogger(__name__)


class InstallationStore(ABC):
    """Abstract base class for installation persistence.

    Example:
        >>> async def checkpoint(store: InstallationStore, inst: Installation):
        ...     await store.save(inst)
        ...     restored = await store.get(inst.namespace, inst.name)
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the storage backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the storage backend."""

    @abstractmethod
    async def save(self, installation: Installation) -> None:
        """Save or overwrite an installation snapshot (last write wins)."""

    @abstractmethod
    async def get(self, namespace: str, name: str) -> Optional[Installation]:
        """Return the stored snapshot, or None if there is none."""

    @abstractmethod
    async def delete(self, namespace: str, name: str) -> bool:
        """Delete a snapshot.

        Returns:
            True if a snapshot was found and deleted, False otherwise.
        """

    @abstractmethod
    async def list_installations(self) -> list[Installation]:
        """Return every stored snapshot."""


# =============================================================================
# InMemoryInstallationStore Implementation
# =============================================================================
# Snapshots are deep copies: the orchestrator mutates the live Installation
# during a pass, which must not leak into what was saved.
# =============================================================================
class InMemoryInstallationStore(InstallationStore):
    """In-memory installation store. Data is lost when the process ends."""

    def __init__(self) -> None:
        self._installations: dict[tuple[str, str], Installation] = {}
        self._connected: bool = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        logger.info("InMemoryInstallationStore connected")

    async def disconnect(self) -> None:
        """Clear all snapshots and mark as disconnected."""
        self._installations.clear()
        self._connected = False
        logger.info("InMemoryInstallationStore disconnected")

    async def save(self, installation: Installation) -> None:
        key = (installation.namespace, installation.name)
        self._installations[key] = installation.model_copy(deep=True)
        logger.debug(
            "Saved installation: %s/%s (last_error=%r)",
            installation.namespace,
            installation.name,
            installation.status.last_error,
        )

    async def get(self, namespace: str, name: str) -> Optional[Installation]:
        stored = self._installations.get((namespace, name))
        return stored.model_copy(deep=True) if stored is not None else None

    async def delete(self, namespace: str, name: str) -> bool:
        if (namespace, name) in self._installations:
            del self._installations[(namespace, name)]
            logger.debug("Deleted installation: %s/%s", namespace, name)
            return True
        return False

    async def list_installations(self) -> list[Installation]:
        return [i.model_copy(deep=True) for i in self._installations.values()]
