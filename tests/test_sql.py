"""Tests for SQL rendering and output file naming."""

import pytest

from gatherer_scraper.models import Card, CardSet
from gatherer_scraper.sql import (
    escape,
    render_card,
    render_cards,
    render_sets,
    set_file_name,
    slugify,
)


def test_escape_doubles_quotes_and_trims():
    assert escape("  O'Ran ") == "O''Ran"
    assert escape("") == ""


@pytest.mark.parametrize("text", ["O'Ran", "'", "Urza's 'Saga'", "no quotes"])
def test_every_quote_is_doubled(text):
    rendered = render_sets([CardSet(name=text)])
    literal = rendered[rendered.index("VALUES (") + len("VALUES ("):rendered.rindex(");")]
    assert literal.count("'") == 2 * text.count("'") + 2
    assert literal[1:-1].replace("''", "").count("'") == 0


def test_render_sets_keeps_registry_order():
    sql = render_sets([CardSet(name="Mirage"), CardSet(name="Alliances"), CardSet(name="Urza's Saga")])
    assert sql.splitlines() == [
        "INSERT INTO CARD_SETS (name) VALUES ('Mirage');",
        "INSERT INTO CARD_SETS (name) VALUES ('Alliances');",
        "INSERT INTO CARD_SETS (name) VALUES ('Urza''s Saga');",
    ]
    assert sql.endswith("\n")


def test_render_sets_empty():
    assert render_sets([]) == ""


def test_render_card_column_order():
    card = Card(
        multiverse_id="12345",
        name="O'Ran",
        mana_cost="2;Blue",
        converted_mana_cost="3",
        card_type="Creature &mdash; Bird",
        card_text="Flying",
        flavor_text="<em>Caw.</em>",
        power="2",
        toughness="3",
        rarity="Common",
        card_number="12",
        artist="Jane Doe",
    )
    assert render_card(card) == (
        "INSERT INTO CARDS (multiverse_id, name, mana_cost, converted_mana_cost, "
        "card_type, card_text, flavor_text, power, toughness, loyalty, rarity, "
        "card_number, artist) VALUES ('12345', 'O''Ran', '2;Blue', '3', "
        "'Creature &mdash; Bird', 'Flying', '<em>Caw.</em>', '2', '3', '', "
        "'Common', '12', 'Jane Doe');"
    )


def test_render_cards_sorted_by_numeric_multiverse_id():
    card_set = CardSet(
        name="Alliances",
        cards=[Card(multiverse_id=m, name=f"card-{m}") for m in ["120", "45", "", "7"]],
    )
    lines = render_cards(card_set).splitlines()
    order = [line.split("VALUES ('")[1].split("'")[0] for line in lines]
    assert order == ["", "7", "45", "120"]


def test_render_cards_is_stable_on_ties():
    card_set = CardSet(
        name="Alliances",
        cards=[
            Card(multiverse_id="abc", name="first"),
            Card(multiverse_id="5", name="five"),
            Card(multiverse_id="", name="second"),
        ],
    )
    lines = render_cards(card_set).splitlines()
    names = [line.split("', '")[1] for line in lines]
    assert names == ["first", "second", "five"]


def test_render_cards_does_not_reorder_the_set():
    cards = [Card(multiverse_id="2"), Card(multiverse_id="1")]
    card_set = CardSet(name="Mirage", cards=list(cards))
    render_cards(card_set)
    assert card_set.cards == cards


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Alliances", "alliances.sql"),
        ("Future Sight", "future_sight.sql"),
        ("Urza's Saga", "urzas_saga.sql"),
        ("Ravnica: City of Guilds", "ravnica_city_of_guilds.sql"),
        ("Duel Decks: Elspeth vs. Tezzeret", "duel_decks_elspeth_vs_tezzeret.sql"),
        ("Magic 2010", "magic_2010.sql"),
        ("Conspiracy—Take the Crown", "conspiracy_take_the_crown.sql"),
        ("Æther Saga", "aether_saga.sql"),
        ("!!!", "set.sql"),
    ],
)
def test_set_file_name(name, expected):
    assert set_file_name(name) == expected


def test_slugify_strips_accents():
    assert slugify("Pokémon Déjà Vu") == "pokemon-deja-vu"


def test_slugify_transliterates_ligatures():
    assert slugify("Æther Straße Œuvre") == "aether-strasse-oeuvre"
