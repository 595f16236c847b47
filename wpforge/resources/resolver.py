"""
Resource Resolver.

Turns a ResourceReference into concrete content without touching the
target filesystem. Archive-shaped references resolve to an ArchiveFile,
directory-shaped references to a Directory; writing either one is the
installer's job, so the same resolver serves plugins, themes, and plain
file writes.

Fetch failures are reported as ResourceFetchError and never retried;
retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

import httpx

from wpforge.blueprint.resources import (
    GitDirectoryReference,
    LiteralDirectoryReference,
    LiteralReference,
    ResourceReference,
    UrlReference,
    WordPressOrgPluginReference,
    WordPressOrgThemeReference,
)
from wpforge.errors import ResourceFetchError

from .content import ArchiveFile, Content, Directory, normalize_tree
from .git import GitDirectoryFetcher

if TYPE_CHECKING:
    from wpforge.config.schemas import AppSettings

logger = logging.getLogger(__name__)


class ResourceResolver:
    """
    Resolves resource references into content.

    The HTTP client can be passed in (tests use ``httpx.MockTransport``);
    otherwise one is created on first use and closed by ``close()``.

    Example:
        async with ResourceResolver() as resolver:
            archive = await resolver.resolve(
                UrlReference(url="https://example.com/hello.zip")
            )
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        git: GitDirectoryFetcher | None = None,
        timeout: float = 30.0,
        user_agent: str = "wpforge/0.1.0",
    ):
        self._client = http_client
        self._owns_client = http_client is None
        self._git = git or GitDirectoryFetcher()
        self._timeout = timeout
        self._user_agent = user_agent

    @classmethod
    def from_settings(cls, settings: AppSettings, **kwargs) -> ResourceResolver:
        """Resolver configured from AppSettings."""
        return cls(
            git=GitDirectoryFetcher(settings.git_executable),
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
            **kwargs,
        )

    async def __aenter__(self) -> ResourceResolver:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def resolve(self, ref: ResourceReference) -> Content:
        """
        Resolve a reference into an ArchiveFile or a Directory.

        Raises:
            ResourceFetchError: Network, HTTP, or repository failure
        """
        if isinstance(ref, UrlReference):
            return await self._fetch_archive(ref.url, fallback_name="plugin.zip")
        if isinstance(ref, WordPressOrgPluginReference):
            return await self._fetch_archive(ref.locator, fallback_name=f"{ref.slug}.zip")
        if isinstance(ref, WordPressOrgThemeReference):
            return await self._fetch_archive(ref.locator, fallback_name=f"{ref.slug}.zip")
        if isinstance(ref, GitDirectoryReference):
            return await self._git.fetch(ref.url, ref=ref.ref, path=ref.path)
        if isinstance(ref, LiteralReference):
            data = ref.contents.encode("utf-8") if isinstance(ref.contents, str) else ref.contents
            return ArchiveFile(name=ref.name, data=data)
        if isinstance(ref, LiteralDirectoryReference):
            try:
                files = normalize_tree(ref.files)
            except ValueError as e:
                raise ResourceFetchError(f"Invalid literal directory '{ref.name}': {e}") from e
            return Directory(name=ref.name, files=files)
        raise ResourceFetchError(f"Unsupported resource type: {type(ref).__name__}")

    async def _fetch_archive(self, url: str, *, fallback_name: str) -> ArchiveFile:
        logger.info(f"Downloading {url[:80]}")
        client = await self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ResourceFetchError(
                f"Could not download {url}",
                locator=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ResourceFetchError(f"Could not download {url}: {e}", locator=url) from e

        archive = ArchiveFile(name=file_name_from_url(url, fallback_name), data=response.content)
        logger.info(f"Downloaded {archive!r}")
        return archive


def file_name_from_url(url: str, fallback: str = "plugin.zip") -> str:
    """Last path segment of a URL, or ``fallback`` when there is none."""
    path = unquote(urlparse(url).path)
    return path.rstrip("/").rsplit("/", 1)[-1] or fallback
