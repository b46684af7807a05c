"""SQL rendering of card sets and cards, plus output file naming."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List

from gatherer_scraper.models import CARD_COLUMNS, Card, CardSet

LEADING_DIGITS = re.compile(r"^\s*([+-]?\d+)")

# Letters with no Unicode decomposition
TRANSLITERATIONS = {
    "æ": "ae",
    "Æ": "AE",
    "œ": "oe",
    "Œ": "OE",
    "ø": "o",
    "Ø": "O",
    "ß": "ss",
}
FALLBACK_SLUG = "set"


def escape(value: str) -> str:
    """Double every single quote and trim surrounding whitespace."""
    return (value or "").replace("'", "''").strip()


def multiverse_sort_key(card: Card) -> int:
    """Numeric value of a multiverse id; anything non-numeric counts as 0."""
    match = LEADING_DIGITS.match(card.multiverse_id or "")
    return int(match.group(1)) if match else 0


def render_sets(sets: Iterable[CardSet]) -> str:
    lines = [
        f"INSERT INTO CARD_SETS (name) VALUES ('{escape(card_set.name)}');"
        for card_set in sets
    ]
    return "".join(line + "\n" for line in lines)


def render_card(card: Card) -> str:
    values = ", ".join(f"'{escape(getattr(card, column))}'" for column in CARD_COLUMNS)
    return f"INSERT INTO CARDS ({', '.join(CARD_COLUMNS)}) VALUES ({values});"


def render_cards(card_set: CardSet) -> str:
    """Render a set's cards ordered by multiverse id (stable on ties)."""
    ordered: List[Card] = sorted(card_set.cards, key=multiverse_sort_key)
    return "".join(render_card(card) + "\n" for card in ordered)


def slugify(value: str) -> str:
    """Lowercase ASCII slug with runs of other characters collapsed to '-'."""
    value = "".join(TRANSLITERATIONS.get(c, c) for c in value)
    value = "".join(
        c for c in unicodedata.normalize("NFKD", value) if unicodedata.category(c) != "Mn"
    )
    value = re.sub(r"[^a-z0-9\-_]+", "-", value.lower())
    value = re.sub(r"-{2,}", "-", value)
    return value.strip("-")


def set_file_name(set_name: str) -> str:
    """Return the output file name for a set, e.g. "Urza's Saga" -> "urzas_saga.sql"."""
    slug = slugify(set_name.replace("'", "")) or FALLBACK_SLUG
    return f"{slug.replace('-', '_')}.sql"
