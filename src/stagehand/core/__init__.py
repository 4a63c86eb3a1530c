"""
stagehand.core - Foundation Layer
===================================

The building blocks every other module depends on:

    - config:      StagehandConfig, ProductConfig, ConfigProvider
    - enums:       Phase, StageName, ProductName, RegistryCategory, ...
    - models:      ResourceIdentity, Manifest, ManifestDocument, CacheRecord
    - state:       Installation, StageStatus, ProductStatus
    - exceptions:  StagehandError hierarchy

Dependency Rule:
    core/ depends on nothing else in the stagehand package.
"""

from stagehand.core.config import (
    ConfigProvider,
    OwnershipLabelConfig,
    ProductConfig,
    SettingsConfigProvider,
    StagehandConfig,
)
from stagehand.core.enums import (
    InstallationType,
    Phase,
    PreflightStatus,
    ProductName,
    RegistryCategory,
    StageName,
)
from stagehand.core.exceptions import (
    CacheCreateError,
    ClusterError,
    ConfigError,
    CoordinationError,
    FetchError,
    ParseError,
    ReconcileCancelled,
    ResourceConflict,
    ResourceSyncError,
    StagehandError,
)
from stagehand.core.models import (
    CacheRecord,
    Manifest,
    ManifestDocument,
    ResourceIdentity,
)
from stagehand.core.state import Installation, ProductStatus, StageStatus

__all__ = [
    # Config
    "ConfigProvider",
    "OwnershipLabelConfig",
    "ProductConfig",
    "SettingsConfigProvider",
    "StagehandConfig",
    # Enums
    "InstallationType",
    "Phase",
    "PreflightStatus",
    "ProductName",
    "RegistryCategory",
    "StageName",
    # Models
    "CacheRecord",
    "Manifest",
    "ManifestDocument",
    "ResourceIdentity",
    # State
    "Installation",
    "ProductStatus",
    "StageStatus",
    # Exceptions
    "StagehandError",
    "CacheCreateError",
    "ClusterError",
    "ConfigError",
    "CoordinationError",
    "FetchError",
    "ParseError",
    "ReconcileCancelled",
    "ResourceConflict",
    "ResourceSyncError",
]
