"""
Parsers for Shopify catalog data.

CardCatalyst listings use the product title format "Card Name (Set Name)" and
two variant option axes: Condition (Near Mint, Lightly Played, ...) and
Finish (Regular, Foil).

Example:
    "Fell the Profane (Modern Horizons 3)"
        -> card_name="Fell the Profane", set_name="Modern Horizons 3"
"""

import logging
import re
from decimal import Decimal, InvalidOperation

from cardsurfer.models.inventory import (
    ParsedTitle,
    RawProduct,
    RawVariant,
    VariantOptions,
)

logger = logging.getLogger(__name__)

# Pattern: "Card Name (Set Name)" - the last parenthesized segment is the set
# Groups: (card_name, set_name)
TITLE_PATTERN = re.compile(r"^(.+?)\s*\(([^)]+)\)\s*$")

# Pattern: "gid://shopify/Product/123456" -> "123456"
GLOBAL_ID_PATTERN = re.compile(r"/(\d+)$")

CONDITION_OPTION_NAMES = frozenset({"condition", "conditions"})
FINISH_OPTION_NAMES = frozenset({"finish", "style", "type"})


def parse_product_title(title: str) -> ParsedTitle:
    """
    Split a product title into card name and set name.

    Falls back to the whole title as the card name (set_name None) when the
    title has no trailing parenthesized set.
    """
    match = TITLE_PATTERN.match(title)
    if match:
        card_name, set_name = match.groups()
        return ParsedTitle(card_name=card_name.strip(), set_name=set_name.strip())

    logger.warning("Could not parse title %r - using full title as card name", title)
    return ParsedTitle(card_name=title.strip(), set_name=None)


def parse_variant_options(variant: RawVariant) -> VariantOptions:
    """
    Read condition and finish from a variant's selected options.

    Option names are matched case-insensitively; unknown options are ignored.
    If two options map to the same axis, the later one wins.
    """
    condition: str | None = None
    finish: str | None = None

    for option in variant.get("selectedOptions") or []:
        name = option["name"].lower()
        if name in CONDITION_OPTION_NAMES:
            condition = option["value"]
        elif name in FINISH_OPTION_NAMES:
            finish = option["value"]

    return VariantOptions(condition=condition, finish=finish)


def extract_numeric_id(global_id: str) -> int | None:
    """Extract the trailing numeric id from a Shopify GraphQL global id."""
    match = GLOBAL_ID_PATTERN.search(global_id or "")
    return int(match.group(1)) if match else None


def storefront_base_url(store_domain: str) -> str:
    """
    Derive the public storefront URL from a myshopify domain.

    "cardsurfer.myshopify.com" -> "https://cardsurfer.com"
    """
    return f"https://{store_domain.replace('.myshopify.com', '')}.com"


def build_product_url(storefront_url: str, handle: str | None) -> str | None:
    """Canonical product page URL, or None for products without a handle."""
    if not handle:
        return None
    return f"{storefront_url.rstrip('/')}/products/{handle}"


def featured_image_url(product: RawProduct) -> str | None:
    image = product.get("featuredImage")
    return image.get("url") if image else None


def parse_price(value: str | None) -> Decimal | None:
    """Parse a Shopify money string ("12.50"); None if absent or malformed."""
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Could not parse price %r", value)
        return None


def stock_quantity(value: int | None) -> int:
    # Shopify reports oversold stock as negative
    return max(int(value or 0), 0)
