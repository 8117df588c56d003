"""
Moxfield deck import.

Deck URLs look like https://www.moxfield.com/decks/<DECK_ID>. The public API
returns cards grouped into boards (mainboard, sideboard, commanders,
companions), each a mapping of card key -> {"quantity", "card": {"name"}}.
Newer responses nest the boards as boards.<board>.cards.
"""

import logging
import re
from typing import Any

import httpx

from cardsurfer.models.deck import DeckCard, ParsedDeck
from cardsurfer.models.failure import InvalidUrlError
from cardsurfer.providers.base import (
    UNKNOWN_FORMAT,
    UNNAMED_DECK,
    DeckProvider,
    fetch_deck_json,
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Moxfield"

MOXFIELD_URL_PATTERN = re.compile(r"moxfield\.com/decks/([a-zA-Z0-9_-]+)")

MOXFIELD_API = "https://api2.moxfield.com/v3/decks/all/{deck_id}"

BOARDS = ("mainboard", "sideboard", "commanders", "companions")


def extract_deck_id(url: str) -> str:
    """Deck id from a Moxfield deck URL."""
    match = MOXFIELD_URL_PATTERN.search(url)
    if not match:
        raise InvalidUrlError(
            "Invalid Moxfield URL. Expected format: https://www.moxfield.com/decks/DECK_ID"
        )
    return match.group(1)


def _board_entries(deck: dict[str, Any], board: str) -> dict[str, Any]:
    nested = (deck.get("boards") or {}).get(board)
    if nested:
        return nested.get("cards") or {}
    return deck.get(board) or {}


def parse_moxfield_deck(deck: dict[str, Any]) -> ParsedDeck:
    """Flatten a Moxfield deck response into a ParsedDeck."""
    cards: list[DeckCard] = []

    for board in BOARDS:
        entries = _board_entries(deck, board)
        if entries:
            logger.info("Moxfield board %r: %d cards", board, len(entries))

        for key, entry in entries.items():
            card = entry.get("card") or {}
            cards.append(
                DeckCard(
                    name=card.get("name") or key,
                    quantity=entry.get("quantity") or 1,
                    board=board,
                )
            )

    return ParsedDeck(
        cards=cards,
        deck_name=deck.get("name") or UNNAMED_DECK,
        format=deck.get("format") or UNKNOWN_FORMAT,
    )


async def parse_moxfield_url(url: str, client: httpx.AsyncClient | None = None) -> ParsedDeck:
    """
    Fetch and parse a public Moxfield deck.

    Raises:
        InvalidUrlError: If the URL has no deck id
        DeckNotFoundError: If Moxfield returns 404
        UpstreamError: On other API failures
    """
    deck_id = extract_deck_id(url)
    logger.info("Moxfield deck ID: %s", deck_id)

    data = await fetch_deck_json(MOXFIELD_API.format(deck_id=deck_id), PROVIDER_NAME, client)
    deck = parse_moxfield_deck(data)

    logger.info("Moxfield deck %r (%s): %d cards", deck.deck_name, deck.format, len(deck.cards))
    return deck


moxfield_provider = DeckProvider(
    name=PROVIDER_NAME,
    url_marker="moxfield.com/decks/",
    fetch=parse_moxfield_url,
)
