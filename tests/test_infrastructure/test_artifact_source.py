"""
Tests for stagehand.infrastructure.artifact_source
====================================================

URL resolution and HTTP fetching, with httpx.MockTransport standing in for
the remote template repository.
"""

import httpx
import pytest

from stagehand.core.config import ArtifactSourceConfig
from stagehand.core.exceptions import FetchError
from stagehand.infrastructure.artifact_source import ArtifactSource, HttpArtifactFetcher


class TestArtifactSource:
    """Tests for URL resolution."""

    def test_resolve(self) -> None:
        source = ArtifactSource("https://example.com/templates/")
        assert source.resolve("quickstarts/a.json", "master") == (
            "https://example.com/templates/master/quickstarts/a.json"
        )

    def test_trailing_slash_added(self) -> None:
        assert ArtifactSource("https://example.com/t").base_url == "https://example.com/t/"

    def test_callable_as_resolver(self) -> None:
        source = ArtifactSource.from_config(ArtifactSourceConfig())
        assert source("fis-image-streams.json", "application-templates-2.1.0") == (
            "https://raw.githubusercontent.com/jboss-fuse/application-templates/"
            "application-templates-2.1.0/fis-image-streams.json"
        )


class TestHttpArtifactFetcher:
    """Tests for HttpArtifactFetcher."""

    async def test_fetch_returns_body(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"{}"))
        fetcher = HttpArtifactFetcher(transport=transport)

        content = await fetcher.fetch("a.json", "https://example.com/master/a.json")

        assert content == b"{}"
        await fetcher.close()

    async def test_non_200_raises_with_status(self) -> None:
        """Any status other than 200 fails, naming the file, URL and status."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        fetcher = HttpArtifactFetcher(transport=transport)
        url = "https://example.com/master/a.json"

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("a.json", url)

        error = exc_info.value
        assert error.filename == "a.json"
        assert error.url == url
        assert error.status_code == 500
        assert "Status: 500" in error.message
        await fetcher.close()

    async def test_204_is_not_success(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(204))
        fetcher = HttpArtifactFetcher(transport=transport)

        with pytest.raises(FetchError):
            await fetcher.fetch("a.json", "https://example.com/master/a.json")
        await fetcher.close()

    async def test_transport_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = HttpArtifactFetcher(transport=httpx.MockTransport(handler))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("a.json", "https://example.com/master/a.json")

        assert exc_info.value.status_code is None
        assert exc_info.value.details["transport_error"] == "ConnectError"
        await fetcher.close()

    async def test_client_is_reused_and_closed(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200, content=b"x")

        fetcher = HttpArtifactFetcher.from_config(
            ArtifactSourceConfig(timeout_seconds=5),
            transport=httpx.MockTransport(handler),
        )
        await fetcher.fetch("a", "https://example.com/a")
        await fetcher.fetch("b", "https://example.com/b")
        await fetcher.close()
        await fetcher.close()

        assert calls == ["/a", "/b"]
