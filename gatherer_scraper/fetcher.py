"""HTTP document fetcher: retrieves catalog pages and parses them as HTML."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from gatherer_scraper.config import CatalogConfig
from gatherer_scraper.errors import FetchError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class DocumentFetcher:
    """Fetches catalog pages one at a time with throttling and retry."""

    def __init__(self, catalog: Optional[CatalogConfig] = None) -> None:
        self._catalog = catalog or CatalogConfig()
        self._rate_limit = self._catalog.rate_limit_ms / 1000.0
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._catalog.timeout,
                follow_redirects=True,
                headers={"User-Agent": self._catalog.user_agent},
            )
        return self._client

    async def _throttle(self) -> None:
        if self._rate_limit > 0:
            await asyncio.sleep(self._rate_limit)

    async def fetch(self, url: str) -> BeautifulSoup:
        """Return the parsed document at ``url``.

        Raises FetchError once all attempts are exhausted or the server
        answers with a non-retryable error status.
        """
        html = await self._get_text(url)
        return BeautifulSoup(html, "html.parser")

    async def _get_text(self, url: str) -> str:
        client = self._get_client()
        max_retries = self._catalog.max_retries
        last_error = "no attempts made"

        for attempt in range(1, max_retries + 1):
            await self._throttle()
            try:
                resp = await client.get(url)
            except httpx.TransportError as exc:
                last_error = f"{type(exc).__name__}: {exc}"
            else:
                if resp.status_code not in RETRYABLE_STATUS:
                    try:
                        resp.raise_for_status()
                    except httpx.HTTPStatusError as exc:
                        raise FetchError(url, f"HTTP {resp.status_code}") from exc
                    logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
                    return resp.text
                last_error = f"HTTP {resp.status_code}"

            if attempt < max_retries:
                delay = self._catalog.backoff_base * (2 ** (attempt - 1))
                logger.debug(
                    "Retry %d/%d for %s (%.1fs): %s",
                    attempt,
                    max_retries,
                    url,
                    delay,
                    last_error,
                )
                if delay > 0:
                    await asyncio.sleep(delay)

        logger.warning("Giving up on %s after %d attempts: %s", url, max_retries, last_error)
        raise FetchError(url, f"failed after {max_retries} attempts: {last_error}")

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
