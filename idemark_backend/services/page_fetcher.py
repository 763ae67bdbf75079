# Idemark v1.0.0 - Page Fetcher
"""
Outbound HTTP for the import pipeline.
Every call uses a browser-like identity and a bounded timeout; transport
failures and timeouts surface as FetchError. No retries at this layer.
"""
from __future__ import annotations

from typing import Dict, Optional

import httpx

from idemark_backend.core.config import get_settings
from idemark_backend.core.errors import FetchError
from idemark_backend.core.logging import get_logger
from idemark_backend.models import FetchResult

logger = get_logger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class PageFetcher:
    """
    Thin async wrapper around a shared httpx.AsyncClient.

    Example:
        async with PageFetcher() as fetcher:
            page = await fetcher.fetch("https://www.idestrim.site/")
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        settings = get_settings()
        self.timeout = timeout or settings.fetch_timeout
        self.user_agent = user_agent or settings.fetch_user_agent
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "PageFetcher":
        self._get_client()
        return self

    async def __aexit__(self, *args) -> bool:
        await self.close()
        return False

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """
        Issue a GET and return the response whatever its status.

        Raises:
            FetchError: On timeout or transport failure.
        """
        request_headers = {"User-Agent": self.user_agent}
        if headers:
            request_headers.update(headers)

        try:
            response = await self._get_client().get(
                url, headers=request_headers, timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out after {self.timeout}s fetching {url}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        logger.debug(f"GET {url} -> {response.status_code}")
        return response

    async def fetch(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        accept: str = HTML_ACCEPT,
    ) -> FetchResult:
        """
        Fetch a document as text.

        Args:
            url: Absolute URL to fetch.
            headers: Extra request headers.
            accept: Value for the Accept header (HTML by default).

        Returns:
            FetchResult with the final URL, status code and body text.

        Raises:
            FetchError: On timeout, transport failure, or non-2xx status.
        """
        request_headers = {"Accept": accept}
        if headers:
            request_headers.update(headers)

        response = await self.get(url, headers=request_headers)
        if not response.is_success:
            raise FetchError(
                f"GET {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return FetchResult(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
        )
