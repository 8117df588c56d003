"""
Deck API endpoints.

Parse deck lists (text or provider URL), match them against inventory, and
auto-select a printing per card.
"""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.api.schemas import (
    ERROR_RESPONSES,
    CamelModel,
    CardEntry,
    CardRequest,
    LineErrorResponse,
    MatchResultResponse,
    SelectedMatchResponse,
)
from cardsurfer.db.database import get_session
from cardsurfer.services.deck_matcher import (
    get_best_condition_for_each,
    get_cheapest_for_each,
    match_deck_list,
)
from cardsurfer.services.deck_parser import parse_deck_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deck", tags=["deck"], responses=ERROR_RESPONSES)

Strategy = Literal["cheapest", "best-condition"]


class DeckInputRequest(CamelModel):
    """Request model for parsing or importing a deck."""

    input: str = Field(
        ...,
        min_length=1,
        description="Deck list text, or a Moxfield/Archidekt deck URL",
        examples=["4x Sol Ring\n1 Fell the Profane // Fell the Profane"],
    )


class DeckParseResponse(CamelModel):
    """Response model for a parsed deck."""

    cards: list[CardEntry]
    errors: list[LineErrorResponse]
    deck_name: str
    format: str


class MatchRequest(CamelModel):
    """Request model for matching cards; entries may be bare names."""

    cards: list[CardRequest | str]


class MatchResponse(CamelModel):
    results: list[MatchResultResponse]


class ImportResponse(CamelModel):
    """Response model for parse + match in one call."""

    deck_name: str
    format: str
    results: list[MatchResultResponse]
    parse_errors: list[LineErrorResponse]


class AutoSelectRequest(CamelModel):
    cards: list[CardRequest | str]
    strategy: str | None = Field(
        default="cheapest",
        description='"cheapest" or "best-condition"; anything else means cheapest',
    )


class AutoSelectResponse(CamelModel):
    results: list[SelectedMatchResponse]
    strategy: Strategy


def _as_card_requests(cards: list[CardRequest | str]) -> list[CardRequest]:
    return [CardRequest(name=card) if isinstance(card, str) else card for card in cards]


@router.post("/parse", response_model=DeckParseResponse)
async def parse_deck(request: DeckInputRequest) -> DeckParseResponse:
    """
    Parse a deck list without matching it against inventory.

    Returns 400 for invalid or unknown deck URLs.
    """
    parsed = await parse_deck_input(request.input)
    logger.info("Parsed %d cards from %r", len(parsed.cards), parsed.deck_name)

    return DeckParseResponse(
        cards=[CardEntry.from_card(card) for card in parsed.cards],
        errors=[LineErrorResponse.from_error(error) for error in parsed.errors],
        deck_name=parsed.deck_name,
        format=parsed.format,
    )


@router.post("/match", response_model=MatchResponse)
async def match_deck(
    request: MatchRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MatchResponse:
    """
    Match card names against in-stock inventory.

    Returns one result per requested card, in request order.
    """
    cards = _as_card_requests(request.cards)
    matches = await match_deck_list(session, [card.name for card in cards])

    return MatchResponse(
        results=[
            MatchResultResponse.from_match(match, quantity=card.quantity)
            for match, card in zip(matches, cards, strict=True)
        ]
    )


@router.post("/import", response_model=ImportResponse)
async def import_deck(
    request: DeckInputRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """
    Parse a deck list (text or URL) and match it against inventory.

    Results carry the parsed quantity and board of each entry.
    """
    parsed = await parse_deck_input(request.input)
    matches = await match_deck_list(session, [card.name for card in parsed.cards])

    results = [
        MatchResultResponse.from_match(match, quantity=card.quantity, board=card.board)
        for match, card in zip(matches, parsed.cards, strict=True)
    ]

    found = sum(1 for result in results if result.found)
    logger.info("Import of %r: %d/%d cards in stock", parsed.deck_name, found, len(results))

    return ImportResponse(
        deck_name=parsed.deck_name,
        format=parsed.format,
        results=results,
        parse_errors=[LineErrorResponse.from_error(error) for error in parsed.errors],
    )


@router.post("/auto-select", response_model=AutoSelectResponse)
async def auto_select(
    request: AutoSelectRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AutoSelectResponse:
    """
    Pick one printing per card.

    Strategies:
    - cheapest: lowest price, any condition or set (default)
    - best-condition: best condition, cheapest among equals
    """
    cards = _as_card_requests(request.cards)
    names = [card.name for card in cards]

    strategy: Strategy
    if request.strategy == "best-condition":
        strategy = "best-condition"
        matches = await get_best_condition_for_each(session, names)
    else:
        strategy = "cheapest"
        matches = await get_cheapest_for_each(session, names)

    return AutoSelectResponse(
        results=[
            SelectedMatchResponse.from_selection(match, quantity=card.quantity)
            for match, card in zip(matches, cards, strict=True)
        ],
        strategy=strategy,
    )
