"""Set registry: decides which card sets a run will process."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup

from gatherer_scraper.errors import DiscoveryError, FetchError
from gatherer_scraper.fetcher import DocumentFetcher
from gatherer_scraper.models import CardSet

logger = logging.getLogger(__name__)

SET_SELECTOR = "select#ctl00_ctl00_MainContent_Content_SearchControls_setAddText option"


def sets_from_names(names: Iterable[str]) -> List[CardSet]:
    """Build a CardSet per trimmed, non-blank name, keeping order and duplicates."""
    sets: List[CardSet] = []
    for name in names:
        if name is None:
            continue
        name = name.strip()
        if name:
            sets.append(CardSet(name=name))
    return sets


def parse_set_names(document: BeautifulSoup) -> List[str]:
    """Return the value of every set-selector option, in document order."""
    names: List[str] = []
    for option in document.select(SET_SELECTOR):
        value = option.get("value")
        if value and value.strip():
            names.append(value.strip())
    return names


async def resolve_sets(
    fetcher: DocumentFetcher,
    landing_url: str,
    explicit_names: Optional[List[str]] = None,
) -> List[CardSet]:
    """Return the sets to process.

    Explicit names win; otherwise every set offered by the catalog's
    set selector is discovered from the landing page.
    """
    if explicit_names:
        sets = sets_from_names(explicit_names)
        logger.info("Using %d explicitly requested sets", len(sets))
        return sets

    try:
        document = await fetcher.fetch(landing_url)
    except FetchError as exc:
        raise DiscoveryError(landing_url) from exc

    sets = sets_from_names(parse_set_names(document))
    logger.info("Discovered %d sets from %s", len(sets), landing_url)
    return sets
