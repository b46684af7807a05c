"""Tests for set resolution and discovery."""

import pytest
import respx
import httpx

from gatherer_scraper.errors import DiscoveryError
from gatherer_scraper.fetcher import DocumentFetcher
from gatherer_scraper.registry import parse_set_names, resolve_sets, sets_from_names

from conftest import BASE_URL, landing_html, soup

LANDING = f"{BASE_URL}/Pages/Default.aspx"


def test_sets_from_names_drops_blank_entries():
    sets = sets_from_names(["Alliances", "", "Future Sight"])
    assert [s.name for s in sets] == ["Alliances", "Future Sight"]
    assert all(s.cards == [] for s in sets)


def test_sets_from_names_trims_and_keeps_duplicates():
    sets = sets_from_names([" Alliances ", "   ", "Alliances"])
    assert [s.name for s in sets] == ["Alliances", "Alliances"]


def test_parse_set_names_skips_options_without_value():
    document = soup(landing_html([None, "", "Alara Reborn", " Alliances ", "Zendikar"]))
    assert parse_set_names(document) == ["Alara Reborn", "Alliances", "Zendikar"]


async def test_resolve_sets_prefers_explicit_names(catalog):
    # No HTTP mock: the landing page must not be requested.
    fetcher = DocumentFetcher(catalog)
    sets = await resolve_sets(fetcher, LANDING, ["Alliances", "", "Future Sight"])
    assert [s.name for s in sets] == ["Alliances", "Future Sight"]
    await fetcher.close()


@respx.mock(base_url=BASE_URL)
async def test_resolve_sets_discovers_from_landing_page(respx_mock, catalog):
    respx_mock.get("/Pages/Default.aspx").mock(return_value=httpx.Response(
        200, text=landing_html([None, "Alara Reborn", "Alliances"]),
    ))
    fetcher = DocumentFetcher(catalog)
    sets = await resolve_sets(fetcher, LANDING)
    assert [s.name for s in sets] == ["Alara Reborn", "Alliances"]
    await fetcher.close()


@respx.mock(base_url=BASE_URL)
async def test_resolve_sets_discovery_failure(respx_mock, catalog):
    respx_mock.get("/Pages/Default.aspx").mock(return_value=httpx.Response(500))
    fetcher = DocumentFetcher(catalog)
    with pytest.raises(DiscoveryError) as info:
        await resolve_sets(fetcher, LANDING, [])
    assert info.value.url == LANDING
    await fetcher.close()
