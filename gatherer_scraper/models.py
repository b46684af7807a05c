"""Data models for card sets, cards, and the mutable run policy."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import List, NamedTuple


@dataclass
class Card:
    """One printing of a card as read from its detail page.

    Every field is a string and defaults to "" when the page has no
    region for it.
    """

    multiverse_id: str = ""
    name: str = ""
    mana_cost: str = ""  # e.g. "2;Blue;Blue"
    converted_mana_cost: str = ""
    card_type: str = ""
    card_text: str = ""  # HTML fragment
    flavor_text: str = ""  # HTML fragment
    power: str = ""  # String: can be *, X, 1+*, etc.
    toughness: str = ""
    loyalty: str = ""
    rarity: str = ""
    card_number: str = ""
    artist: str = ""


# Column order of the CARDS insert statement.
CARD_COLUMNS: List[str] = [f.name for f in fields(Card)]


@dataclass
class CardSet:
    """A named card set and the cards collected for it."""

    name: str
    cards: List[Card] = field(default_factory=list)


class CardLink(NamedTuple):
    """A detail-page link discovered on a listing page."""

    url: str
    is_primary: bool


@dataclass
class RunPolicy:
    """Collision policy shared by reference across one run.

    The writer flips ``force`` on when the user answers "all" and sets
    ``quit_requested`` when the user answers "quit".
    """

    force: bool = False
    skip: bool = False
    pretend: bool = False
    quit_requested: bool = False
