"""Listing paginator: walks a set's search results and yields card links."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Iterator, Optional
from urllib.parse import quote_plus, urljoin

from bs4 import BeautifulSoup

from gatherer_scraper.errors import CrawlError, FetchError
from gatherer_scraper.fetcher import DocumentFetcher
from gatherer_scraper.models import CardLink, CardSet

logger = logging.getLogger(__name__)

CARD_CONTAINER = ".cardItem"
TITLE_LINK = ".cardTitle a"
OTHER_PRINTING_LINK = ".setVersions .otherSetSection a"
PAGING_LINK = "#ctl00_ctl00_ctl00_MainContent_SubContent_topPagingControlsContainer a"
NEXT_GLYPH = ">"


def listing_url(base_url: str, set_name: str) -> str:
    """Return the first search-result page for a set, sorted by color."""
    return (
        f"{base_url.rstrip('/')}/Pages/Search/Default.aspx"
        f"?sort=color+&set=[%22{quote_plus(set_name)}%22]"
    )


def page_links(document: BeautifulSoup, page_url: str, set_name: str) -> Iterator[CardLink]:
    """Yield every detail link on one listing page that belongs to ``set_name``.

    For each card the title link comes first, followed by any other
    printings whose set image names the current set. A printing matching
    the current set may point at the same detail page as the title link;
    both are yielded.
    """
    for container in document.select(CARD_CONTAINER):
        for anchor in container.select(TITLE_LINK):
            href = anchor.get("href")
            if href:
                yield CardLink(urljoin(page_url, href), True)

        for anchor in container.select(OTHER_PRINTING_LINK):
            image = anchor.find("img")
            if image is None:
                continue
            href = anchor.get("href")
            if href and set_name in (image.get("alt") or ""):
                yield CardLink(urljoin(page_url, href), True)


def next_page_url(document: BeautifulSoup, page_url: str) -> Optional[str]:
    """Return the next listing page, or None on the last page.

    A forward control that resolves back to ``page_url`` counts as the
    last page.
    """
    for anchor in document.select(PAGING_LINK):
        if not anchor.get_text().strip().endswith(NEXT_GLYPH):
            continue
        href = anchor.get("href")
        if not href:
            return None
        candidate = urljoin(page_url, href)
        return candidate if candidate != page_url else None
    return None


class ListingPaginator:
    """Walks every result page of one set."""

    def __init__(self, fetcher: DocumentFetcher, base_url: str) -> None:
        self._fetcher = fetcher
        self._base_url = base_url

    async def collect_links(self, card_set: CardSet) -> AsyncIterator[CardLink]:
        """Lazily yield the detail links of ``card_set``, page by page.

        Raises CrawlError when a listing page cannot be fetched; links from
        earlier pages have already been yielded by then.
        """
        url: Optional[str] = listing_url(self._base_url, card_set.name)
        page = 0

        while url is not None:
            try:
                document = await self._fetcher.fetch(url)
            except FetchError as exc:
                raise CrawlError(card_set.name, url) from exc

            page += 1
            count = 0
            for link in page_links(document, url, card_set.name):
                count += 1
                yield link
            logger.debug("Set %s: page %d -> %d links", card_set.name, page, count)

            url = next_page_url(document, url)
