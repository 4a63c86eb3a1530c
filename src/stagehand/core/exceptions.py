"""
stagehand.core.exceptions - Custom Exception Hierarchy
========================================================

This module defines a structured exception hierarchy for stagehand.
Instead of catching generic Exception everywhere, components raise and catch
specific exception types that carry contextual information.

Exception Hierarchy:
    StagehandError (base)
        ├── ConfigError            - Invalid or missing product configuration
        ├── FetchError             - Remote artifact could not be downloaded
        ├── CacheCreateError       - Artifact cache record could not be written
        ├── ParseError             - Manifest content could not be decoded
        ├── ResourceConflict       - Ownership reclaim left a resource absent
        ├── ResourceSyncError      - One or more resources in a batch failed
        ├── CoordinationError      - Shared registry update failed
        ├── ClusterError           - Cluster store call failed
        └── ReconcileCancelled     - The pass was cancelled cooperatively

Error Handling Flow:
    Sync step raises FetchError / ParseError / ...
        → ProductReconciler catches StagehandError
        → returns (Phase.FAILED, error)
        → StageOrchestrator writes str(error) into status.last_error
        → external scheduler runs another pass later

Usage:
    >>> from stagehand.core.exceptions import FetchError
    >>> raise FetchError(
    ...     message="failed to fetch fis-image-streams.json",
    ...     filename="fis-image-streams.json",
    ...     url="https://example.com/master/fis-image-streams.json",
    ...     status_code=500,
    ... )
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
# All stagehand exceptions inherit from this base class. Product reconcilers
# catch it at their boundary and turn it into a FAILED phase:
#
#   try:
#       await self._run_steps(...)
#   except StagehandError as e:
#       return Phase.FAILED, e
# =============================================================================
class StagehandError(Exception):
    """Base exception for all stagehand errors.

    Attributes:
        message: Human-readable error description, including the operation
            and the resource it was applied to.
        error_code: Machine-readable error code (UPPER_SNAKE_CASE).
        details: Arbitrary dict with additional debugging context.

    Example:
        >>> try:
        ...     await engine.sync(documents, "openshift", owner)
        ... except StagehandError as e:
        ...     print(f"[{e.error_code}] {e.message}")
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
# Fatal: retrying without an external configuration change cannot succeed.
# =============================================================================
class ConfigError(StagehandError):
    """Raised when a product's configuration is missing or invalid.

    Example:
        >>> raise ConfigError(
        ...     message="fuse-on-openshift config is not valid: namespace is empty",
        ...     product="fuse-on-openshift",
        ... )
    """

    def __init__(
        self,
        message: str,
        product: Optional[str] = None,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if product:
            enriched_details["product"] = product

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.product = product


# =============================================================================
# Fetch Error
# =============================================================================
# Transient: the cache stays empty, so the next pass re-fetches the whole
# batch from scratch.
# =============================================================================
class FetchError(StagehandError):
    """Raised when an artifact cannot be downloaded.

    Carries enough context to tell which file of the batch broke it.

    Attributes:
        filename: The artifact filename as listed by the product.
        url: The resolved download URL.
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(
        self,
        message: str,
        filename: str,
        url: str,
        status_code: Optional[int] = None,
        error_code: str = "FETCH_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["filename"] = filename
        enriched_details["url"] = url
        if status_code is not None:
            enriched_details["status_code"] = status_code

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.filename = filename
        self.url = url
        self.status_code = status_code


class CacheCreateError(StagehandError):
    """Raised when a cache record cannot be assembled or written."""

    def __init__(
        self,
        message: str,
        cache_key: str,
        namespace: str,
        error_code: str = "CACHE_CREATE_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["cache_key"] = cache_key
        enriched_details["namespace"] = namespace

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.cache_key = cache_key
        self.namespace = namespace


# =============================================================================
# Parse Error
# =============================================================================
# Fatal for the artifact it names. Sibling resources in the same batch are
# still applied, but the pass ends FAILED.
# =============================================================================
class ParseError(StagehandError):
    """Raised when manifest content cannot be converted or deserialized."""

    def __init__(
        self,
        message: str,
        source: str,
        error_code: str = "PARSE_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["source"] = source

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.source = source


# =============================================================================
# Resource Errors
# =============================================================================
class ResourceConflict(StagehandError):
    """Raised when an unowned resource was deleted but could not be recreated.

    The resource is left absent until the next pass creates it. Ownership
    conflicts that reclaim cleanly never surface as this error.
    """

    def __init__(
        self,
        message: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        error_code: str = "RESOURCE_CONFLICT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["kind"] = kind
        enriched_details["name"] = name
        enriched_details["namespace"] = namespace

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.kind = kind
        self.name = name
        self.namespace = namespace


class ResourceSyncError(StagehandError):
    """Raised after a batch sync in which one or more resources failed.

    Attributes:
        failures: The per-resource errors, in the order they happened.
    """

    def __init__(
        self,
        message: str,
        failures: list[StagehandError],
        error_code: str = "RESOURCE_SYNC_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["failures"] = [f.to_dict() for f in failures]

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.failures = failures


class CoordinationError(StagehandError):
    """Raised when the shared registry object cannot be read or updated.

    A missing registry object is NOT an error.
    """

    def __init__(
        self,
        message: str,
        category: str,
        error_code: str = "COORDINATION_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["category"] = category

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.category = category


class ClusterError(StagehandError):
    """Raised when a cluster store call (get/create/delete/update/list) fails."""

    def __init__(
        self,
        message: str,
        error_code: str = "CLUSTER_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ReconcileCancelled(StagehandError):
    """Raised when the cancellation signal is set at a step boundary."""

    def __init__(
        self,
        message: str = "reconciliation cancelled",
        error_code: str = "RECONCILE_CANCELLED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)
