"""
Archidekt deck import.

Deck URLs look like https://archidekt.com/decks/<NUMERIC_ID>. The public API
returns a flat card list where each entry carries a quantity and a category
(Commander, Sideboard, ...).
"""

import logging
import re
from typing import Any

import httpx

from cardsurfer.models.deck import DEFAULT_BOARD, DeckCard, ParsedDeck
from cardsurfer.models.failure import InvalidUrlError
from cardsurfer.providers.base import (
    UNKNOWN_FORMAT,
    UNNAMED_DECK,
    DeckProvider,
    fetch_deck_json,
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Archidekt"

ARCHIDEKT_URL_PATTERN = re.compile(r"archidekt\.com/decks/(\d+)")

ARCHIDEKT_API = "https://archidekt.com/api/decks/{deck_id}/"


def extract_deck_id(url: str) -> str:
    """Deck id from an Archidekt deck URL."""
    match = ARCHIDEKT_URL_PATTERN.search(url)
    if not match:
        raise InvalidUrlError(
            "Invalid Archidekt URL. Expected format: https://archidekt.com/decks/123456"
        )
    return match.group(1)


def _entry_board(entry: dict[str, Any]) -> str:
    if entry.get("category"):
        return str(entry["category"])
    categories = entry.get("categories") or []
    return str(categories[0]) if categories else DEFAULT_BOARD


def _deck_format(deck: dict[str, Any]) -> str:
    deck_format = deck.get("format")
    if isinstance(deck_format, dict):
        return deck_format.get("name") or UNKNOWN_FORMAT
    return str(deck_format) if deck_format else UNKNOWN_FORMAT


def parse_archidekt_deck(deck: dict[str, Any]) -> ParsedDeck:
    """Flatten an Archidekt deck response into a ParsedDeck."""
    cards: list[DeckCard] = []

    for entry in deck.get("cards") or []:
        card = entry.get("card") or {}
        oracle = card.get("oracleCard") or {}
        cards.append(
            DeckCard(
                name=oracle.get("name") or card.get("name") or "Unknown",
                quantity=entry.get("quantity") or 1,
                board=_entry_board(entry),
            )
        )

    return ParsedDeck(
        cards=cards,
        deck_name=deck.get("name") or UNNAMED_DECK,
        format=_deck_format(deck),
    )


async def parse_archidekt_url(url: str, client: httpx.AsyncClient | None = None) -> ParsedDeck:
    """
    Fetch and parse a public Archidekt deck.

    Raises:
        InvalidUrlError: If the URL has no numeric deck id
        DeckNotFoundError: If Archidekt returns 404
        UpstreamError: On other API failures
    """
    deck_id = extract_deck_id(url)
    logger.info("Archidekt deck ID: %s", deck_id)

    data = await fetch_deck_json(ARCHIDEKT_API.format(deck_id=deck_id), PROVIDER_NAME, client)
    deck = parse_archidekt_deck(data)

    logger.info("Archidekt deck %r (%s): %d cards", deck.deck_name, deck.format, len(deck.cards))
    return deck


archidekt_provider = DeckProvider(
    name=PROVIDER_NAME,
    url_marker="archidekt.com/decks/",
    fetch=parse_archidekt_url,
)
