from cardsurfer.services.deck_matcher import (
    get_best_condition_for_each,
    get_cheapest_for_each,
    match_deck_list,
    search_cards,
)
from cardsurfer.services.deck_parser import parse_deck_input
from cardsurfer.services.inventory_sync import InventorySyncer
from cardsurfer.services.shopify_auth import ShopifyTokenCache
from cardsurfer.services.shopify_client import ShopifyClient

__all__ = [
    "InventorySyncer",
    "ShopifyClient",
    "ShopifyTokenCache",
    "get_best_condition_for_each",
    "get_cheapest_for_each",
    "match_deck_list",
    "parse_deck_input",
    "search_cards",
]
