"""
stagehand.core.config - Configuration Management
==================================================

This module provides the configuration system for stagehand. Configuration
can be loaded from multiple sources with the following priority (highest first):

    1. Explicit constructor arguments
    2. Environment variables (prefixed with STAGEHAND_)
    3. YAML configuration file (stagehand.yaml)
    4. Default values defined in the models below

Architecture Context:
    Configuration flows DOWN through the system. The top-level StagehandConfig
    is created once and handed to the facade, which wraps it in a
    ConfigProvider for the product reconcilers:

        StagehandConfig
            ├── OwnershipLabelConfig   → ManifestLoader, ResourceSyncEngine
            ├── ArtifactSourceConfig   → ArtifactSource, HttpArtifactFetcher
            └── products[...]          → ConfigProvider → ProductReconcilers

Usage:
    # Load from environment variables:
    config = StagehandConfig()

    # Load from YAML file:
    config = load_config("stagehand.yaml")

    # Per-product configuration:
    provider = SettingsConfigProvider(config)
    fuse = provider.read(ProductName.FUSE_ON_OPENSHIFT)

Environment Variables:
    STAGEHAND_LOG_LEVEL=DEBUG
    STAGEHAND_OPERATOR_NAMESPACE=redhat-rhmi-operator
    STAGEHAND_ARTIFACTS__TIMEOUT_SECONDS=60
    STAGEHAND_OWNERSHIP_LABEL__KEY=integreatly
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Literal, Optional

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from stagehand.core.enums import ProductName
from stagehand.core.exceptions import ConfigError


# =============================================================================
# Desired Versions
# =============================================================================
# Versions the installer targets when the configuration does not pin one.
# There is no reliable way to discover these from the cluster, so they are
# fixed per release of this package.
# =============================================================================
DEFAULT_PRODUCT_VERSIONS: dict[ProductName, str] = {
    ProductName.AMQ_ONLINE: "1.3.1",
    ProductName.AMQ_STREAMS: "1.1.0",
    ProductName.CODEREADY_WORKSPACES: "2.0.0.GA",
    ProductName.FUSE_ON_OPENSHIFT: "master",
    ProductName.MONITORING: "1.0.2",
    ProductName.THREESCALE: "2.7",
    ProductName.UPS: "2.3.2",
    ProductName.CLOUD_RESOURCES: "0.7.1",
    ProductName.FUSE: "7.5",
}

DEFAULT_OPERATOR_VERSIONS: dict[ProductName, str] = {
    ProductName.AMQ_STREAMS: "1.1.0",
    ProductName.AMQ_ONLINE: "1.3.1",
    ProductName.MONITORING: "1.0.2",
    ProductName.SOLUTION_EXPLORER: "0.0.44",
    ProductName.RHSSO: "8.0.1",
    ProductName.RHSSO_USER: "8.0.1",
    ProductName.CODEREADY_WORKSPACES: "2.0.0",
    ProductName.FUSE: "1.5.0",
    ProductName.THREESCALE: "0.4.0",
    ProductName.UPS: "0.4.1",
    ProductName.CLOUD_RESOURCES: "0.7.1",
}

# Products that install into a shared, well-known namespace instead of
# "{namespace_prefix}{product}".
DEFAULT_NAMESPACES: dict[ProductName, str] = {
    ProductName.FUSE_ON_OPENSHIFT: "openshift",
}

_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


# =============================================================================
# Ownership Label Configuration
# =============================================================================
# The label every managed resource carries. A live resource with this exact
# key/value pair is left untouched; one without it is reclaimed.
# =============================================================================
class OwnershipLabelConfig(BaseModel):
    """The ownership marker stamped onto managed resources.

    Attributes:
        key: Label key.
        value: Label value that asserts ownership.
    """

    key: str = Field(
        default="integreatly",
        min_length=1,
        description="Ownership label key",
    )
    value: str = Field(
        default="true",
        description="Ownership label value",
    )

    def as_selector(self) -> dict[str, str]:
        """Return the label as a {key: value} selector dict."""
        return {self.key: self.value}


# =============================================================================
# Artifact Source Configuration
# =============================================================================
class ArtifactSourceConfig(BaseModel):
    """Where remote artifacts are downloaded from.

    URLs are built as ``{base_url}{version}/{filename}``.

    Attributes:
        base_url: URL prefix, ending with a slash.
        timeout_seconds: Per-request timeout for artifact downloads.
    """

    base_url: str = Field(
        default="https://raw.githubusercontent.com/jboss-fuse/application-templates/",
        description="Base URL for artifact downloads",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="HTTP timeout in seconds for a single artifact download",
    )


# =============================================================================
# Product Configuration
# =============================================================================
class ProductConfig(BaseModel):
    """Per-product configuration handed to a product reconciler.

    Empty strings mean "not set"; the ConfigProvider fills defaults.

    Attributes:
        namespace: Namespace the product's resources are created in.
        product_version: Desired product version (also the artifact version).
        operator_version: Desired operator version, if the product has one.
        host: Public host of the product, if it exposes one.
    """

    namespace: str = Field(default="", description="Target namespace")
    product_version: str = Field(default="", description="Desired product version")
    operator_version: str = Field(default="", description="Desired operator version")
    host: str = Field(default="", description="Public host of the product")


# =============================================================================
# Main Configuration
# =============================================================================
# Environment Variable Mapping:
#   STAGEHAND_LOG_LEVEL              → config.log_level
#   STAGEHAND_OPERATOR_NAMESPACE     → config.operator_namespace
#   STAGEHAND_ARTIFACTS__BASE_URL    → config.artifacts.base_url
# =============================================================================
class StagehandConfig(BaseSettings):
    """Top-level configuration for stagehand.

    Attributes:
        environment: Deployment environment.
        log_level: Logging level for structlog output.
        operator_namespace: Namespace the installer itself runs in. Artifact
            cache records live here.
        namespace_prefix: Prefix for per-product namespaces.
        ownership_label: Marker label for managed resources.
        artifacts: Remote artifact source settings.
        products: Per-product overrides keyed by product name
            (e.g. "fuse-on-openshift").

    Example:
        >>> config = StagehandConfig(
        ...     operator_namespace="rhmi-operator",
        ...     products={"fuse-on-openshift": ProductConfig(product_version="application-templates-2.1.0")},
        ... )
    """

    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    operator_namespace: str = Field(
        default="integreatly-operator",
        min_length=1,
        description="Namespace the installer runs in (holds artifact caches)",
    )
    namespace_prefix: str = Field(
        default="integreatly-",
        description="Prefix used to derive per-product namespaces",
    )
    ownership_label: OwnershipLabelConfig = Field(
        default_factory=OwnershipLabelConfig,
        description="Label marking resources managed by this installer",
    )
    artifacts: ArtifactSourceConfig = Field(
        default_factory=ArtifactSourceConfig,
        description="Remote artifact source configuration",
    )
    products: dict[str, ProductConfig] = Field(
        default_factory=dict,
        description="Per-product configuration overrides",
    )

    model_config = {
        "env_prefix": "STAGEHAND_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> StagehandConfig:
    """Load stagehand configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'stagehand.yaml' in the current directory, falling back to
            defaults + environment variables.

    Returns:
        A fully validated StagehandConfig instance.

    Raises:
        FileNotFoundError: If an explicit path is provided but doesn't exist.
        ConfigError: If the file is not valid YAML or fails validation.
    """
    if path is None:
        default_path = Path("stagehand.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"failed to parse configuration file {path}: {e}",
                    error_code="CONFIG_PARSE_ERROR",
                ) from e
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    try:
        return StagehandConfig(**yaml_data)
    except ValidationError as e:
        raise ConfigError(
            message=f"invalid configuration in {path}: {e}",
            details={"errors": e.errors(include_url=False)},
        ) from e


def get_default_config() -> StagehandConfig:
    """Create a StagehandConfig with all defaults (plus any set env vars)."""
    return StagehandConfig()


def configure_logging(config: StagehandConfig) -> None:
    """Configure structlog to drop events below ``config.log_level``."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


# =============================================================================
# Config Provider
# =============================================================================
# The seam between configuration storage and product reconcilers. A product
# reconciler calls read() once when it is constructed and validate() at the
# start of every pass.
# =============================================================================
class ConfigProvider(ABC):
    """Supplies validated per-product configuration.

    Example:
        >>> provider = SettingsConfigProvider(StagehandConfig())
        >>> cfg = provider.read(ProductName.FUSE_ON_OPENSHIFT)
        >>> cfg.namespace
        'openshift'
    """

    @property
    @abstractmethod
    def operator_namespace(self) -> str:
        """Namespace the installer itself runs in."""

    @abstractmethod
    def read(self, product: ProductName) -> ProductConfig:
        """Return the product's configuration with defaults applied.

        Raises:
            ConfigError: If the configuration cannot be produced or is invalid.
        """

    def validate(self, product: ProductName, config: ProductConfig) -> None:
        """Check a product configuration.

        Raises:
            ConfigError: If the namespace or product version is unusable.
        """
        if not config.namespace:
            raise ConfigError(
                message=f"{product.value} config is not valid: namespace is empty",
                product=product.value,
            )
        if len(config.namespace) > 63 or not _DNS_LABEL.match(config.namespace):
            raise ConfigError(
                message=(
                    f"{product.value} config is not valid: "
                    f"namespace {config.namespace!r} is not a DNS-1123 label"
                ),
                product=product.value,
            )
        if not config.product_version:
            raise ConfigError(
                message=f"{product.value} config is not valid: product version is empty",
                product=product.value,
            )


class SettingsConfigProvider(ConfigProvider):
    """ConfigProvider backed by a StagehandConfig instance."""

    def __init__(self, config: StagehandConfig) -> None:
        self._config = config

    @property
    def operator_namespace(self) -> str:
        return self._config.operator_namespace

    def read(self, product: ProductName) -> ProductConfig:
        configured = self._config.products.get(product.value, ProductConfig())

        updates: dict[str, str] = {}
        if not configured.namespace:
            updates["namespace"] = DEFAULT_NAMESPACES.get(
                product, f"{self._config.namespace_prefix}{product.value}"
            )
        if not configured.product_version:
            updates["product_version"] = DEFAULT_PRODUCT_VERSIONS.get(product, "")
        if not configured.operator_version:
            updates["operator_version"] = DEFAULT_OPERATOR_VERSIONS.get(product, "")

        config = configured.model_copy(update=updates)
        self.validate(product, config)
        return config
