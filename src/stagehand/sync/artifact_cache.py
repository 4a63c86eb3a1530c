"""
stagehand.sync.artifact_cache - External Artifact Cache
=========================================================

Fetches a batch of named artifacts from a remote source exactly once per
installation lifetime and persists them as ONE immutable cache record
(a ConfigMap in the operator namespace).

Algorithm (ensure):

    get record by key ──── hit ───→ return it unchanged (no network I/O)
          │
         miss
          ↓
    for each filename:            ┌─ any failure aborts the WHOLE batch,
      check cancellation          │  nothing is written
      url = resolver(file, ver)   │
      content = fetch(url) ───────┘
          ↓
    assemble all entries (keys are base names: "quickstarts/a.json" → "a.json")
          ↓
    single create call ──→ CacheRecord

All-or-nothing: a record that exists is complete, so callers never check
individual keys for presence. A failed batch leaves the cache empty and the
next pass starts fetching from the first file again.

Cached records are never refreshed here. Changing the desired version does
not invalidate an existing record.
"""

from __future__ import annotations

import asyncio
import posixpath
from typing import Callable, Optional

import structlog

from stagehand.core.exceptions import (
    CacheCreateError,
    ClusterError,
    ReconcileCancelled,
)
from stagehand.core.models import CacheRecord, ResourceIdentity
from stagehand.infrastructure.artifact_source import ArtifactFetcher
from stagehand.infrastructure.cluster import ClusterClient

logger = structlog.get_logger()

SourceResolver = Callable[[str, str], str]


def cache_key_for(filename: str) -> str:
    """Key an artifact is stored under: its base name without path prefix."""
    return posixpath.basename(filename)


class ExternalArtifactCache:
    """Fetch-once, immutable artifact cache.

    Attributes:
        _cluster: Store the cache records are persisted in.
        _fetcher: Downloads artifacts.
        _namespace: Namespace cache records live in.

    Example:
        >>> cache = ExternalArtifactCache(cluster, fetcher, namespace="integreatly-operator")
        >>> record = await cache.ensure(
        ...     "fuse-on-openshift-templates",
        ...     ["fis-image-streams.json", "quickstarts/karaf-cxf-rest-template.json"],
        ...     ArtifactSource(base_url),
        ...     version="master",
        ... )
        >>> record.get("karaf-cxf-rest-template.json")
    """

    def __init__(
        self,
        cluster: ClusterClient,
        fetcher: ArtifactFetcher,
        namespace: str,
    ) -> None:
        self._cluster = cluster
        self._fetcher = fetcher
        self._namespace = namespace
        self._logger = logger.bind(component="artifact_cache", namespace=namespace)

    @property
    def namespace(self) -> str:
        return self._namespace

    async def get(self, cache_key: str) -> Optional[CacheRecord]:
        """Return the cache record for ``cache_key`` if it exists."""
        identity = ResourceIdentity(
            api_version="v1",
            kind="ConfigMap",
            name=cache_key,
            namespace=self._namespace,
        )
        obj = await self._cluster.get(identity)
        return CacheRecord.from_object(obj) if obj is not None else None

    async def ensure(
        self,
        cache_key: str,
        file_list: list[str],
        source_resolver: SourceResolver,
        version: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> CacheRecord:
        """Return the cache record, fetching and creating it on a miss.

        Args:
            cache_key: Name of the cache record.
            file_list: Artifacts that make up the batch. Each one is required.
            source_resolver: ``(filename, version) -> url``.
            version: Desired version passed to the resolver.
            cancel: Optional cancellation signal, checked before each fetch.

        Returns:
            The complete CacheRecord.

        Raises:
            FetchError: If any artifact cannot be downloaded.
            CacheCreateError: If two files share a base name, or the assembled
                record cannot be written.
            ReconcileCancelled: If ``cancel`` is set between fetches.
            ClusterError: If the cache lookup itself fails.
        """
        existing = await self.get(cache_key)
        if existing is not None:
            self._logger.debug("artifact_cache_hit", cache_key=cache_key)
            return existing

        self._logger.info(
            "artifact_cache_miss",
            cache_key=cache_key,
            file_count=len(file_list),
            version=version,
        )

        keys = [cache_key_for(filename) for filename in file_list]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise CacheCreateError(
                message=(
                    f"cannot cache {cache_key} in {self._namespace} namespace: "
                    f"artifacts share a base name: {', '.join(duplicates)}"
                ),
                cache_key=cache_key,
                namespace=self._namespace,
                details={"duplicates": duplicates},
            )

        entries: dict[str, bytes] = {}
        for filename in file_list:
            if cancel is not None and cancel.is_set():
                raise ReconcileCancelled(
                    message=f"cancelled while fetching artifacts for {cache_key}",
                    details={"cache_key": cache_key, "next_file": filename},
                )
            url = source_resolver(filename, version)
            entries[cache_key_for(filename)] = await self._fetcher.fetch(filename, url)

        record = CacheRecord(
            name=cache_key,
            namespace=self._namespace,
            entries=entries,
        )
        try:
            await self._cluster.create(record.to_object())
        except ClusterError as e:
            raise CacheCreateError(
                message=(
                    f"failed to create configmap {cache_key} "
                    f"in {self._namespace} namespace: {e.message}"
                ),
                cache_key=cache_key,
                namespace=self._namespace,
            ) from e

        self._logger.info(
            "artifact_cache_created",
            cache_key=cache_key,
            entries=len(entries),
        )
        return record
