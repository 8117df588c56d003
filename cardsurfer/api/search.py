"""
Card search endpoint (autocomplete).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.api.schemas import ERROR_RESPONSES, CamelModel
from cardsurfer.db.database import get_session
from cardsurfer.services.deck_matcher import DEFAULT_SEARCH_LIMIT, search_cards

router = APIRouter(tags=["search"], responses=ERROR_RESPONSES)

MIN_QUERY_LENGTH = 2


class SearchHitResponse(CamelModel):
    """One (card, set) group in stock."""

    card_name: str
    set_name: str | None = None
    image_url: str | None = None
    min_price: float
    total_quantity: int


class SearchResponse(CamelModel):
    results: list[SearchHitResponse]


@router.get("/search", response_model=SearchResponse)
async def search(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str | None, Query(description="Part of a card name")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_SEARCH_LIMIT,
) -> SearchResponse:
    """
    Search in-stock cards by partial name.

    Returns 400 if the query is shorter than 2 characters.
    """
    if not q or len(q) < MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Search query must be at least {MIN_QUERY_LENGTH} characters",
        )

    hits = await search_cards(session, q, limit=limit)
    return SearchResponse(
        results=[
            SearchHitResponse(
                card_name=hit.card_name,
                set_name=hit.set_name,
                image_url=hit.image_url,
                min_price=hit.min_price,
                total_quantity=hit.total_quantity,
            )
            for hit in hits
        ]
    )
