"""
Deck list input dispatch.

Accepts either a deck URL from a registered provider (Moxfield, Archidekt)
or a plain-text deck list, and returns a ParsedDeck either way.
"""

import logging

import httpx

from cardsurfer.models.deck import ParsedDeck
from cardsurfer.parsers.deck_text import parse_text_deck_list
from cardsurfer.providers import DeckProvider, find_provider

logger = logging.getLogger(__name__)

TEXT_DECK_NAME = "Imported Deck"
TEXT_DECK_FORMAT = "unknown"


async def parse_deck_input(
    text: str,
    client: httpx.AsyncClient | None = None,
    providers: list[DeckProvider] | None = None,
) -> ParsedDeck:
    """
    Parse a deck list from a provider URL or free text.

    Args:
        text: Deck URL or deck list text
        client: Optional httpx client for provider API calls
        providers: Providers to consult instead of the registered ones

    Returns:
        ParsedDeck. errors is always empty for URL imports.

    Raises:
        InvalidUrlError, DeckNotFoundError, UpstreamError: From URL providers
    """
    trimmed = text.strip()
    logger.info("Auto-detecting input type (length: %d)", len(trimmed))

    if providers is None:
        provider = find_provider(trimmed)
    else:
        provider = next((p for p in providers if p.matches(trimmed)), None)

    if provider:
        logger.info("Detected %s URL", provider.name)
        return await provider.fetch(trimmed, client)

    logger.info("Treating input as plain text deck list")
    parsed = parse_text_deck_list(trimmed)
    return ParsedDeck(
        cards=parsed.cards,
        errors=parsed.errors,
        deck_name=TEXT_DECK_NAME,
        format=TEXT_DECK_FORMAT,
    )
