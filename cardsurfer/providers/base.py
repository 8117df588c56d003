"""
Shared plumbing for third-party deck-list providers.

A provider recognizes its deck URLs, extracts the deck id, calls the
provider's public read API, and flattens the response into DeckCards.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from cardsurfer.models.deck import ParsedDeck
from cardsurfer.models.failure import DeckNotFoundError, UpstreamError

logger = logging.getLogger(__name__)

USER_AGENT = "CardsurferDeckBuilder/1.0"

UNNAMED_DECK = "Unnamed Deck"
UNKNOWN_FORMAT = "unknown"

DeckFetcher = Callable[[str, httpx.AsyncClient | None], Awaitable[ParsedDeck]]


@dataclass(frozen=True)
class DeckProvider:
    """
    A deck-building site whose public deck URLs can be imported.

    Attributes:
        name: Display name used in messages ("Moxfield")
        url_marker: Substring that identifies the provider's deck URLs
        fetch: Coroutine that resolves a URL into a ParsedDeck
    """

    name: str
    url_marker: str
    fetch: DeckFetcher

    def matches(self, text: str) -> bool:
        return self.url_marker in text


async def fetch_deck_json(
    api_url: str,
    provider: str,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    GET a provider's deck API and decode the JSON body.

    Raises:
        DeckNotFoundError: On 404 (deck missing or private)
        UpstreamError: On any other failure
    """
    logger.info("Fetching from %s API: %s", provider, api_url)
    headers = {"User-Agent": USER_AGENT}

    try:
        if client:
            response = await client.get(api_url, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as http:
                response = await http.get(api_url, headers=headers)
    except httpx.RequestError as e:
        raise UpstreamError(f"Failed to fetch deck from {provider}: {e}") from e

    logger.info("%s API response status: %d", provider, response.status_code)

    if response.status_code == 404:
        raise DeckNotFoundError(provider)

    if not response.is_success:
        logger.error("%s API error: %s", provider, response.text)
        raise UpstreamError(
            f"Failed to fetch deck from {provider}: {response.status_code}",
            status=response.status_code,
            body=response.text,
        )

    try:
        data: dict[str, Any] = response.json()
    except ValueError as e:
        raise UpstreamError(f"{provider} returned a malformed deck response") from e
    return data
