"""Tests for deck input dispatch (URL vs text)."""

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from cardsurfer.models.deck import DeckCard, ParsedDeck
from cardsurfer.models.failure import DeckNotFoundError, InvalidUrlError
from cardsurfer.providers.base import DeckProvider
from cardsurfer.services.deck_parser import parse_deck_input


class TestParseDeckInput:
    async def test_plain_text(self) -> None:
        deck = await parse_deck_input("  4x Sol Ring\n0 Nothing\n  ")

        assert deck.deck_name == "Imported Deck"
        assert deck.format == "unknown"
        assert [(c.name, c.quantity) for c in deck.cards] == [("Sol Ring", 4)]
        assert len(deck.errors) == 1

    @respx.mock
    async def test_moxfield_url(self) -> None:
        respx.get("https://api2.moxfield.com/v3/decks/all/deck42").mock(
            return_value=httpx.Response(
                200,
                json={
                    "name": "Elves",
                    "format": "legacy",
                    "mainboard": {"x": {"quantity": 4, "card": {"name": "Llanowar Elves"}}},
                },
            )
        )

        deck = await parse_deck_input("  https://www.moxfield.com/decks/deck42  ")

        assert deck.deck_name == "Elves"
        assert deck.cards == [DeckCard(name="Llanowar Elves", quantity=4, board="mainboard")]
        assert deck.errors == []

    @respx.mock
    async def test_archidekt_not_found(self) -> None:
        respx.get("https://archidekt.com/api/decks/99/").mock(return_value=httpx.Response(404))

        with pytest.raises(DeckNotFoundError):
            await parse_deck_input("https://archidekt.com/decks/99")

    async def test_invalid_provider_url(self) -> None:
        with pytest.raises(InvalidUrlError):
            await parse_deck_input("https://www.moxfield.com/decks/")

    async def test_custom_providers(self) -> None:
        fetch = AsyncMock(return_value=ParsedDeck(deck_name="From Test Provider"))
        provider = DeckProvider(name="Test", url_marker="decks.example/", fetch=fetch)

        deck = await parse_deck_input("https://decks.example/7", providers=[provider])

        assert deck.deck_name == "From Test Provider"
        fetch.assert_awaited_once_with("https://decks.example/7", None)

    async def test_empty_provider_list_treats_url_as_text(self) -> None:
        deck = await parse_deck_input("https://www.moxfield.com/decks/abc", providers=[])

        assert deck.deck_name == "Imported Deck"
        assert len(deck.cards) == 1
