"""Shared fixtures: HTML builders shaped like Gatherer pages."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from bs4 import BeautifulSoup

from gatherer_scraper.config import AppConfig, CatalogConfig, OutputConfig

BASE_URL = "http://gatherer.wizards.com"
ROW = "ctl00_ctl00_ctl00_MainContent_SubContent_SubContent_"
PAGING = "ctl00_ctl00_ctl00_MainContent_SubContent_topPagingControlsContainer"


def _row(row_id: str, value_html: str, label: str = "") -> str:
    return (
        f'<div class="row" id="{ROW}{row_id}">'
        f'<div class="label">{label}</div>'
        f'<div class="value">{value_html}</div>'
        f"</div>"
    )


def detail_html(
    multiverse_id: Optional[str] = "12345",
    name: Optional[str] = "O'Ran",
    mana: Optional[Sequence[str]] = ("2", "Blue"),
    cmc: Optional[str] = "3",
    card_type: Optional[str] = "Creature  — Bird",
    text: Optional[str] = '<div class="cardtextbox">Flying</div>',
    flavor: Optional[str] = None,
    stat: Optional[Tuple[str, str]] = ("P/T:", "2 / 3"),
    rarity: Optional[str] = "Common",
    number: Optional[str] = "12",
    artist: Optional[str] = "Jane Doe",
    set_name: Optional[str] = "Alliances",
) -> str:
    """Build a card detail page; any region passed as None is left out."""
    rows: List[str] = []
    if name is not None:
        rows.append(_row("nameRow", f"\n   {name}\n", "Card Name:"))
    if mana is not None:
        imgs = "".join(
            f'<img src="/Handlers/Image.ashx?size=medium&amp;name={m}&amp;type=symbol" alt="{m}" align="absbottom" />'
            for m in mana
        )
        rows.append(_row("manaRow", imgs, "Mana Cost:"))
    if cmc is not None:
        rows.append(_row("cmcRow", f" {cmc} ", "Converted Mana Cost:"))
    if card_type is not None:
        rows.append(_row("typeRow", f"\n  {card_type}\n", "Types:"))
    if text is not None:
        rows.append(_row("textRow", text, "Card Text:"))
    if flavor is not None:
        rows.append(_row("flavorRow", flavor, "Flavor Text:"))
    if stat is not None:
        rows.append(_row("ptRow", stat[1], stat[0]))
    if rarity is not None:
        rows.append(_row("rarityRow", f"<span>{rarity}</span>", "Rarity:"))
    if number is not None:
        rows.append(_row("numberRow", number, "Card Number:"))
    if artist is not None:
        rows.append(_row("artistRow", f'<a href="#">{artist}</a>', "Artist:"))
    if set_name is not None:
        rows.append(
            f'<div id="{ROW}currentSetSymbol">'
            f'<a href="#"><img alt="{set_name} (Common)" /></a>'
            f'<a href="#">{set_name}</a>'
            f"</div>"
        )

    form = ""
    if multiverse_id is not None:
        form = f' id="aspnetForm" action="Details.aspx?multiverseid={multiverse_id}"'
    return f"<html><body><form{form}>{''.join(rows)}</form></body></html>"


def listing_html(
    cards: Sequence[Dict],
    next_href: Optional[str] = None,
    prev_href: Optional[str] = None,
) -> str:
    """Build a search result page.

    Each card is a dict with ``href`` and optional ``others``, a list of
    ``(href, alt)`` pairs; an alt of None renders a text-only entry.
    """
    items: List[str] = []
    for card in cards:
        others = ""
        for href, alt in card.get("others", []):
            if alt is None:
                others += f'<a href="{href}">text only</a>'
            else:
                others += f'<a href="{href}"><img src="/x.png" alt="{alt}" /></a>'
        items.append(
            '<tr class="cardItem">'
            f'<td><span class="cardTitle"><a href="{card["href"]}">Card</a></span></td>'
            f'<td class="setVersions"><div class="otherSetSection">{others}</div></td>'
            "</tr>"
        )

    paging = ""
    if prev_href:
        paging += f'<a href="{prev_href}">&nbsp;&lt;</a>'
    paging += '<a href="#" class="selected">1</a>'
    if next_href:
        paging += f'<a href="{next_href}">&nbsp;&gt;</a>'
        paging += f'<a href="{next_href}">&nbsp;&gt;&gt;</a>'

    return (
        "<html><body>"
        f'<div id="{PAGING}">{paging}</div>'
        f"<table>{''.join(items)}</table>"
        "</body></html>"
    )


def landing_html(values: Sequence[Optional[str]]) -> str:
    options = "".join(
        "<option></option>" if v is None else f'<option value="{v}">{v}</option>'
        for v in values
    )
    return (
        "<html><body>"
        f'<select id="ctl00_ctl00_MainContent_Content_SearchControls_setAddText">{options}</select>'
        "</body></html>"
    )


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


@pytest.fixture
def catalog():
    return CatalogConfig(base_url=BASE_URL, rate_limit_ms=0, max_retries=1, backoff_base=0)


@pytest.fixture
def app_config(tmp_path, catalog):
    return AppConfig(catalog=catalog, output=OutputConfig(directory=str(tmp_path / "output")))
