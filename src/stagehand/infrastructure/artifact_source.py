"""
stagehand.infrastructure.artifact_source - Remote Artifact Source
===================================================================

Resolves artifact URLs and downloads artifact content over HTTP.

URL Template:
    {base_url}{version}/{filename}

    e.g. https://raw.githubusercontent.com/jboss-fuse/application-templates/
         master/quickstarts/spring-boot-camel-template.json

Success is HTTP 200 with a readable body. Any other status, and any
transport failure, is a FetchError naming the file, the URL and the status
or transport error.

Implementations:
    - ArtifactFetcher (ABC):  Abstract interface
    - HttpArtifactFetcher:    httpx.AsyncClient based
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx
import structlog

from stagehand.core.config import ArtifactSourceConfig
from stagehand.core.exceptions import FetchError

logger = structlog.get_logger()


# =============================================================================
# URL Resolution
# =============================================================================
class ArtifactSource:
    """Builds download URLs from the configured base URL.

    An instance is callable, so it can be handed directly to
    ExternalArtifactCache.ensure() as the source resolver.

    Example:
        >>> source = ArtifactSource("https://example.com/templates/")
        >>> source("fis-image-streams.json", "master")
        'https://example.com/templates/master/fis-image-streams.json'
    """

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"

    @classmethod
    def from_config(cls, config: ArtifactSourceConfig) -> "ArtifactSource":
        return cls(config.base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    def resolve(self, filename: str, version: str) -> str:
        """Return the download URL of ``filename`` at ``version``."""
        return f"{self._base_url}{version}/{filename}"

    def __call__(self, filename: str, version: str) -> str:
        return self.resolve(filename, version)


# =============================================================================
# Fetchers
# =============================================================================
class ArtifactFetcher(ABC):
    """Downloads one artifact."""

    @abstractmethod
    async def fetch(self, filename: str, url: str) -> bytes:
        """Download ``url`` and return its body.

        Args:
            filename: The artifact name (for error context).
            url: The resolved download URL.

        Raises:
            FetchError: On a non-200 response or a transport failure.
        """

    async def close(self) -> None:
        """Release any held connections."""


class HttpArtifactFetcher(ArtifactFetcher):
    """Blocking-per-request HTTP GET fetcher built on httpx.

    Attributes:
        _timeout: Per-request timeout in seconds.
        _transport: Optional httpx transport (tests pass httpx.MockTransport).
        _client: Lazily created AsyncClient, reused across fetches.

    Example:
        >>> fetcher = HttpArtifactFetcher(timeout=30.0)
        >>> content = await fetcher.fetch("x.json", "https://example.com/master/x.json")
        >>> await fetcher.close()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._logger = logger.bind(component="http_artifact_fetcher")

    @classmethod
    def from_config(
        cls,
        config: ArtifactSourceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HttpArtifactFetcher":
        return cls(timeout=config.timeout_seconds, transport=transport)

    async def fetch(self, filename: str, url: str) -> bytes:
        client = self._get_client()
        self._logger.debug("artifact_fetching", filename=filename, url=url)

        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(
                message=f"failed to get file content of {filename} from {url}: {e}",
                filename=filename,
                url=url,
                details={"transport_error": type(e).__name__},
            ) from e

        if response.status_code != httpx.codes.OK:
            raise FetchError(
                message=(
                    f"failed to get file content of {filename} from {url}. "
                    f"Status: {response.status_code}"
                ),
                filename=filename,
                url=url,
                status_code=response.status_code,
            )

        return response.content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client
