"""Card extractor: turns a card detail page into a Card record.

Every field is read through a table of ``field -> (selector, reader)``.
A selector that matches nothing leaves the field as "", so a missing
region is never an error.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from gatherer_scraper.errors import ExtractError, FetchError
from gatherer_scraper.fetcher import DocumentFetcher
from gatherer_scraper.models import Card

logger = logging.getLogger(__name__)

ROW = "#ctl00_ctl00_ctl00_MainContent_SubContent_SubContent_"

LOYALTY_MARKER = re.compile(r"Loyalty:")
POWER_TOUGHNESS_MARKER = re.compile(r"P/T:")
PLANESWALKER = "Planeswalker"

SYMBOL_ASSET = "/assets/symbols/{name}.png"
SYMBOL_NAME = re.compile(r"name=([^&]*)")
LONG_DASH = re.compile(r"\s*\u2014\s*")

Reader = Callable[[List[Tag]], str]


def _text(nodes: List[Tag]) -> str:
    return "".join(node.get_text() for node in nodes).strip()


def _inner_html(nodes: List[Tag]) -> str:
    return "".join(str(child) for node in nodes for child in node.contents).strip()


def _multiverse_id(nodes: List[Tag]) -> str:
    action = nodes[0].get("action") or ""
    if "=" not in action:
        return ""
    return action.rsplit("=", 1)[1].strip()


def _mana_cost(nodes: List[Tag]) -> str:
    return ";".join(img.get("alt") or "" for img in nodes)


def _card_type(nodes: List[Tag]) -> str:
    text = _text(nodes).replace("\n", "").replace('"', "")
    return LONG_DASH.sub(" &mdash; ", text)


def _rewrite_symbols(fragment: BeautifulSoup) -> None:
    for img in fragment.find_all("img"):
        match = SYMBOL_NAME.search(img.get("src") or "")
        if match:
            img["src"] = SYMBOL_ASSET.format(name=match.group(1))
        if "align" in img.attrs:
            del img["align"]


def _emphasis(html: str) -> str:
    return html.replace("<i>", "<em>").replace("</i>", "</em>")


def _text_box(nodes: List[Tag], strip_newlines: bool) -> str:
    fragment = BeautifulSoup(_inner_html(nodes), "html.parser")
    _rewrite_symbols(fragment)
    html = "".join(box.decode_contents() for box in fragment.find_all("div", class_="cardtextbox"))
    if strip_newlines:
        html = html.replace("\n", "")
    return _emphasis(html)


def _card_text(nodes: List[Tag]) -> str:
    return _text_box(nodes, strip_newlines=True)


def _flavor_text(nodes: List[Tag]) -> str:
    return _text_box(nodes, strip_newlines=False)


FIELDS: Dict[str, Tuple[str, Reader]] = {
    "multiverse_id": ("#aspnetForm", _multiverse_id),
    "name": (ROW + "nameRow .value", _text),
    "mana_cost": (ROW + "manaRow .value img", _mana_cost),
    "converted_mana_cost": (ROW + "cmcRow .value", _text),
    "card_type": (ROW + "typeRow .value", _card_type),
    "card_text": (ROW + "textRow .value", _card_text),
    "flavor_text": (ROW + "flavorRow .value", _flavor_text),
    "rarity": (ROW + "rarityRow .value", _text),
    "card_number": (ROW + "numberRow .value", _text),
    "artist": (ROW + "artistRow .value", _text),
}

STAT_LABEL = ROW + "ptRow .label"
STAT_VALUE = ROW + "ptRow .value"
SET_SYMBOL_LINK = ROW + "currentSetSymbol a"


def read_fields(document: BeautifulSoup) -> Dict[str, str]:
    """Evaluate the field table against a detail page."""
    values: Dict[str, str] = {}
    for field_name, (selector, reader) in FIELDS.items():
        nodes = document.select(selector)
        values[field_name] = reader(nodes) if nodes else ""
    return values


def read_stats(document: BeautifulSoup, card_type: str) -> Dict[str, str]:
    """Return power/toughness or loyalty, depending on the card type.

    Planeswalkers only ever get loyalty; every other type only ever gets
    power and toughness.
    """
    labels = document.select(STAT_LABEL)
    values = document.select(STAT_VALUE)
    if not labels or not values:
        return {}

    label = _text(labels)
    value = _text(values)
    if PLANESWALKER in card_type:
        if LOYALTY_MARKER.search(label):
            return {"loyalty": value}
        return {}

    if POWER_TOUGHNESS_MARKER.search(label):
        parts = value.split("/")
        toughness = parts[1] if len(parts) > 1 else ""
        return {"power": parts[0].strip(), "toughness": toughness.strip()}
    return {}


def read_set_name(document: BeautifulSoup) -> str:
    links = document.select(SET_SYMBOL_LINK)
    if len(links) < 2:
        return ""
    return links[1].get_text().strip()


class CardExtractor:
    """Builds Card records from detail pages."""

    def __init__(self, fetcher: Optional[DocumentFetcher] = None, verbose: bool = False) -> None:
        self._fetcher = fetcher
        self._verbose = verbose

    def extract(self, document: BeautifulSoup) -> Card:
        """Read every field of one detail page. Never raises for absent regions."""
        values = read_fields(document)
        values.update(read_stats(document, values["card_type"]))
        card = Card(**values)

        if self._verbose:
            set_name = read_set_name(document)
            logger.info(
                'Retrieved card %s "%s"%s',
                card.multiverse_id,
                card.name,
                f" ({set_name})" if set_name else "",
            )
        return card

    async def extract_url(self, url: str, set_name: Optional[str] = None) -> Card:
        """Fetch a detail page and extract it.

        Raises ExtractError when the page could not be fetched.
        """
        if self._fetcher is None:
            raise RuntimeError("CardExtractor was created without a fetcher")
        try:
            document = await self._fetcher.fetch(url)
        except FetchError as exc:
            raise ExtractError(url, set_name) from exc
        return self.extract(document)
