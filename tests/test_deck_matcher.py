"""Tests for matching deck lists against inventory."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.services.deck_matcher import (
    get_best_condition_for_each,
    get_cheapest_for_each,
    match_deck_list,
    search_cards,
)


@pytest.fixture
async def stocked(seed) -> None:
    """Sol Ring in two sets, a played-only Counterspell, and a sold-out card."""
    await seed(1, "Sol Ring", "Commander Masters", [(11, "Near Mint", "5.00", 1)])
    await seed(
        2,
        "Sol Ring",
        "Commander Legends",
        [(21, "Lightly Played", "3.00", 2), (22, "Near Mint", "3.00", 1)],
    )
    await seed(
        3,
        "Counterspell",
        "Modern Horizons 2",
        [(31, "Near Mint", "10.00", 1), (32, "Lightly Played", "1.00", 4)],
    )
    await seed(4, "Black Lotus", "Alpha", [(41, "Damaged", "9000.00", 0)])


@pytest.mark.usefixtures("stocked")
class TestMatchDeckList:
    async def test_printings_ordered_by_price_then_condition(
        self, session: AsyncSession
    ) -> None:
        [result] = await match_deck_list(session, ["Sol Ring"])

        assert result.found is True
        assert [(p.price, p.condition) for p in result.printings] == [
            (3.00, "Near Mint"),
            (3.00, "Lightly Played"),
            (5.00, "Near Mint"),
        ]

    async def test_printing_details(self, session: AsyncSession) -> None:
        [result] = await match_deck_list(session, ["Counterspell"])

        cheapest = result.printings[0]
        assert cheapest.set_name == "Modern Horizons 2"
        assert cheapest.title == "Counterspell (Modern Horizons 2)"
        assert cheapest.variant_id == "32"
        assert cheapest.quantity == 4
        assert cheapest.finish == "Regular"
        assert cheapest.product_url == "https://cardsurfer.com/products/3"

    async def test_case_insensitive_keeps_requested_casing(self, session: AsyncSession) -> None:
        [result] = await match_deck_list(session, ["  sol RING "])

        assert result.found is True
        assert result.requested == "sol RING"
        assert result.card_name == "Sol Ring"

    async def test_one_result_per_input_in_order(self, session: AsyncSession) -> None:
        names = ["Counterspell", "Nonexistent Card", "sol ring", "Counterspell"]

        results = await match_deck_list(session, names)

        assert [r.requested for r in results] == names
        assert [r.found for r in results] == [True, False, True, True]

    async def test_not_found_result(self, session: AsyncSession) -> None:
        [result] = await match_deck_list(session, ["Nonexistent Card"])

        assert result.found is False
        assert result.card_name == "Nonexistent Card"
        assert result.printings == []

    async def test_out_of_stock_card_not_found(self, session: AsyncSession) -> None:
        [result] = await match_deck_list(session, ["Black Lotus"])

        assert result.found is False

    async def test_empty_input(self, session: AsyncSession) -> None:
        assert await match_deck_list(session, []) == []


@pytest.mark.usefixtures("stocked")
class TestAutoSelect:
    async def test_cheapest(self, session: AsyncSession) -> None:
        results = await get_cheapest_for_each(session, ["Sol Ring", "Counterspell"])

        assert results[0].selected is not None
        assert results[0].selected.variant_id == "22"
        assert results[1].selected is not None
        assert results[1].selected.price == 1.00

    async def test_best_condition_beats_price(self, session: AsyncSession) -> None:
        """Near Mint at $10 wins over Lightly Played at $1."""
        [result] = await get_best_condition_for_each(session, ["Counterspell"])

        assert result.selected is not None
        assert result.selected.condition == "Near Mint"
        assert result.selected.price == 10.00

    async def test_best_condition_cheapest_among_equals(self, session: AsyncSession) -> None:
        [result] = await get_best_condition_for_each(session, ["Sol Ring"])

        assert result.selected is not None
        assert result.selected.variant_id == "22"

    async def test_not_found_has_no_selection(self, session: AsyncSession) -> None:
        cheapest = await get_cheapest_for_each(session, ["Nonexistent Card"])
        best = await get_best_condition_for_each(session, ["Nonexistent Card"])

        assert cheapest[0].selected is None
        assert best[0].selected is None

    async def test_selection_keeps_all_printings(self, session: AsyncSession) -> None:
        [result] = await get_cheapest_for_each(session, ["Sol Ring"])

        assert len(result.printings) == 3


@pytest.mark.usefixtures("stocked")
class TestSearchCards:
    async def test_groups_by_set(self, session: AsyncSession) -> None:
        hits = await search_cards(session, "sol")

        assert {(h.card_name, h.set_name) for h in hits} == {
            ("Sol Ring", "Commander Legends"),
            ("Sol Ring", "Commander Masters"),
        }

        legends = next(h for h in hits if h.set_name == "Commander Legends")
        assert legends.min_price == 3.00
        assert legends.total_quantity == 3

    async def test_substring_match(self, session: AsyncSession) -> None:
        hits = await search_cards(session, "SPELL")

        assert [h.card_name for h in hits] == ["Counterspell"]

    async def test_excludes_out_of_stock(self, session: AsyncSession) -> None:
        assert await search_cards(session, "lotus") == []

    async def test_limit(self, session: AsyncSession) -> None:
        hits = await search_cards(session, "sol", limit=1)

        assert len(hits) == 1

    async def test_wildcards_are_literal(self, session: AsyncSession) -> None:
        assert await search_cards(session, "%") == []
