from cardsurfer.parsers.deck_text import front_face, parse_text_deck_list
from cardsurfer.parsers.shopify_product import (
    build_product_url,
    extract_numeric_id,
    parse_product_title,
    parse_variant_options,
    storefront_base_url,
)

__all__ = [
    "build_product_url",
    "extract_numeric_id",
    "front_face",
    "parse_product_title",
    "parse_text_deck_list",
    "parse_variant_options",
    "storefront_base_url",
]
