"""
Deck matching against local inventory.

Given the card names of a deck list, finds every in-stock variant across all
printings. Names are matched case-insensitively; results come back in the
caller's order and casing, one per requested name (duplicates included).
"""

import logging

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.models.db import ProductDB, VariantDB
from cardsurfer.models.inventory import CONDITION_ORDER, MatchResult, Printing, SearchHit

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20

# SQL mirror of inventory.condition_rank: Near Mint=1 ... Damaged=5, anything else 6
CONDITION_RANK = case(
    {condition: rank for rank, condition in enumerate(CONDITION_ORDER, start=1)},
    value=VariantDB.condition,
    else_=len(CONDITION_ORDER) + 1,
)


def normalize_name(name: str) -> str:
    """Lookup key for a card name: trimmed and lower-cased."""
    return name.strip().lower()


async def match_deck_list(session: AsyncSession, card_names: list[str]) -> list[MatchResult]:
    """
    Find all in-stock printings for each requested card name.

    Printings within a card are ordered by price ascending, then condition
    (Near Mint first).

    Args:
        session: Database session
        card_names: Requested names, in deck order (duplicates allowed)

    Returns:
        One MatchResult per input name, in input order. Names with no stock
        get found=False and an empty printings list.
    """
    if not card_names:
        logger.info("No card names provided, returning empty")
        return []

    logger.info("Matching %d cards against inventory", len(card_names))

    normalized = sorted({normalize_name(name) for name in card_names})

    result = await session.execute(
        select(
            ProductDB.card_name,
            ProductDB.set_name,
            ProductDB.title,
            ProductDB.image_url,
            ProductDB.product_url,
            ProductDB.handle,
            VariantDB.shopify_variant_id,
            VariantDB.condition,
            VariantDB.finish,
            VariantDB.price,
            VariantDB.quantity,
            VariantDB.sku,
        )
        .join(VariantDB, VariantDB.shopify_product_id == ProductDB.shopify_product_id)
        .where(func.lower(ProductDB.card_name).in_(normalized))
        .where(VariantDB.quantity > 0)
        .order_by(ProductDB.card_name, VariantDB.price.asc(), CONDITION_RANK)
    )
    rows = result.all()
    logger.info("Database returned %d matching variants", len(rows))

    # Group by lower-cased card name, keeping the stored casing of the first row
    grouped: dict[str, tuple[str, list[Printing]]] = {}
    for row in rows:
        key = row.card_name.lower()
        if key not in grouped:
            grouped[key] = (row.card_name, [])
        grouped[key][1].append(
            Printing(
                set_name=row.set_name,
                title=row.title,
                image_url=row.image_url,
                product_url=row.product_url,
                handle=row.handle,
                variant_id=str(row.shopify_variant_id),
                condition=row.condition,
                finish=row.finish,
                price=float(row.price) if row.price is not None else 0.0,
                quantity=row.quantity,
                sku=row.sku,
            )
        )

    results: list[MatchResult] = []
    for name in card_names:
        requested = name.strip()
        group = grouped.get(normalize_name(name))
        if group:
            card_name, printings = group
            results.append(
                MatchResult(
                    requested=requested,
                    found=True,
                    card_name=card_name,
                    printings=list(printings),
                )
            )
        else:
            results.append(MatchResult(requested=requested, found=False, card_name=requested))

    missing = [r.requested for r in results if not r.found]
    logger.info("Results: %d found, %d not in stock", len(results) - len(missing), len(missing))
    if missing:
        logger.info("Missing cards: %s", ", ".join(missing))

    return results


async def get_cheapest_for_each(session: AsyncSession, card_names: list[str]) -> list[MatchResult]:
    """Select the cheapest in-stock printing (any condition, any set) per card."""
    logger.info("Auto-selecting cheapest for %d cards", len(card_names))
    matches = await match_deck_list(session, card_names)

    # Printings are already sorted by price, then condition
    return [
        match.with_selection(match.printings[0] if match.printings else None)
        for match in matches
    ]


async def get_best_condition_for_each(
    session: AsyncSession, card_names: list[str]
) -> list[MatchResult]:
    """
    Select the best-condition printing per card, cheapest among equals.

    A Near Mint copy wins over any cheaper played copy.
    """
    logger.info("Auto-selecting best condition for %d cards", len(card_names))
    matches = await match_deck_list(session, card_names)

    selected: list[MatchResult] = []
    for match in matches:
        if not match.printings:
            selected.append(match.with_selection(None))
            continue
        ordered = sorted(match.printings, key=lambda p: (p.condition_rank, p.price))
        selected.append(match.with_selection(ordered[0]))

    return selected


async def search_cards(
    session: AsyncSession, term: str, limit: int = DEFAULT_SEARCH_LIMIT
) -> list[SearchHit]:
    """
    Autocomplete search: in-stock cards whose name contains term.

    Groups by (card name, set name, image) with the lowest price and total
    stock per group, ordered by card name.
    """
    logger.info("Searching for cards matching %r (limit: %d)", term, limit)

    result = await session.execute(
        select(
            ProductDB.card_name,
            ProductDB.set_name,
            ProductDB.image_url,
            func.min(VariantDB.price).label("min_price"),
            func.sum(VariantDB.quantity).label("total_quantity"),
        )
        .join(VariantDB, VariantDB.shopify_product_id == ProductDB.shopify_product_id)
        .where(func.lower(ProductDB.card_name).contains(term.lower(), autoescape=True))
        .where(VariantDB.quantity > 0)
        .group_by(ProductDB.card_name, ProductDB.set_name, ProductDB.image_url)
        .order_by(ProductDB.card_name)
        .limit(limit)
    )

    hits = [
        SearchHit(
            card_name=row.card_name,
            set_name=row.set_name,
            image_url=row.image_url,
            min_price=float(row.min_price) if row.min_price is not None else 0.0,
            total_quantity=int(row.total_quantity or 0),
        )
        for row in result.all()
    ]
    logger.info("Search returned %d results", len(hits))
    return hits
