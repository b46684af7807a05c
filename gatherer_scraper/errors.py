"""Exception hierarchy for the scrape pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class GathererError(Exception):
    """Base class for all scraper failures."""


class FetchError(GathererError):
    """A page could not be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class DiscoveryError(GathererError):
    """The catalog landing page could not be fetched. Fatal for the run."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Set discovery failed: could not fetch {url}")
        self.url = url


class CrawlError(GathererError):
    """A listing page could not be fetched; the set's pagination stops."""

    def __init__(self, set_name: str, url: str) -> None:
        super().__init__(f"Crawl of set '{set_name}' aborted at {url}")
        self.set_name = set_name
        self.url = url


class ExtractError(GathererError):
    """A card detail page could not be fetched."""

    def __init__(self, url: str, set_name: Optional[str] = None) -> None:
        where = f" (set '{set_name}')" if set_name else ""
        super().__init__(f"Card extraction failed for {url}{where}")
        self.url = url
        self.set_name = set_name


class WriteError(GathererError):
    """The staged or final output file could not be written."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        super().__init__(f"Could not write {path}: {reason}")
        self.path = Path(path)
        self.reason = reason
