"""Fetchers retrieving raw translation documents.

A fetcher is any callable taking a url and returning the document text.
Failures propagate as exceptions; retry and timeout policy belong here, not
in the loader.
"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx

from localization.logging import get_module_logger

logger = get_module_logger()

Fetcher = Callable[[str], Awaitable[str]]

FILE_SCHEME = "file://"


class HttpFetcher:
    """Fetches translation documents over HTTP with an httpx AsyncClient.

    Non-2xx responses raise httpx.HTTPStatusError.

    Attributes:
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        self._logger = logger.bind(component="http_fetcher")

    async def __call__(self, url: str) -> str:
        response = await self._client.get(url, timeout=self.timeout)
        response.raise_for_status()
        self._logger.debug(
            "fetched_translation_document",
            url=url,
            status_code=response.status_code,
            size=len(response.content),
        )
        return response.text

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()


class FileFetcher:
    """Reads translation documents from the local filesystem.

    Accepts plain paths and file:// urls. Reads run in a worker thread.
    """

    async def __call__(self, url: str) -> str:
        path = Path(url[len(FILE_SCHEME) :] if url.startswith(FILE_SCHEME) else url)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")


def create_fetcher(
    prefix: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0,
) -> Fetcher:
    """Pick the fetcher matching a translation prefix.

    Args:
        prefix: Translation prefix, e.g. "https://cdn/locale-" or "./i18n/locale-".
        client: Optional shared httpx client for HTTP prefixes.
        timeout: HTTP timeout in seconds.

    Returns:
        HttpFetcher for http(s) prefixes, FileFetcher otherwise.
    """
    if prefix.startswith(("http://", "https://")):
        return HttpFetcher(client=client, timeout=timeout)
    return FileFetcher()
