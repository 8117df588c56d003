from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import TypedDict


class SyncStatus(str, Enum):
    """Lifecycle of a sync_log row."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Fixed quality ordering, best first. Anything else ranks after Damaged.
CONDITION_ORDER: tuple[str, ...] = (
    "Near Mint",
    "Lightly Played",
    "Moderately Played",
    "Heavily Played",
    "Damaged",
)


def condition_rank(condition: str | None) -> int:
    """Rank a condition (1 = Near Mint ... 5 = Damaged, 6 = unknown)."""
    if condition in CONDITION_ORDER:
        return CONDITION_ORDER.index(condition) + 1
    return len(CONDITION_ORDER) + 1


# --- Raw Shopify GraphQL shapes ---


class RawOption(TypedDict):
    name: str
    value: str


class RawVariant(TypedDict, total=False):
    id: str
    title: str
    price: str | None
    inventoryQuantity: int | None
    sku: str | None
    selectedOptions: list[RawOption]


class RawVariantEdge(TypedDict):
    node: RawVariant


class RawVariantConnection(TypedDict):
    edges: list[RawVariantEdge]


class RawImage(TypedDict):
    url: str


class RawProduct(TypedDict, total=False):
    """A product node as returned by the Admin API products query."""

    id: str
    title: str
    handle: str
    featuredImage: RawImage | None
    variants: RawVariantConnection


# --- Parsed records ---


@dataclass(frozen=True)
class ParsedTitle:
    """Card and set name derived from a product title."""

    card_name: str
    set_name: str | None = None


@dataclass(frozen=True)
class VariantOptions:
    """Condition and finish derived from a variant's selected options."""

    condition: str | None = None
    finish: str | None = None


@dataclass
class ProductRecord:
    """Normalized product row ready to upsert."""

    shopify_product_id: int
    title: str
    card_name: str
    set_name: str | None
    handle: str | None
    image_url: str | None
    product_url: str | None


@dataclass
class VariantRecord:
    """Normalized variant row ready to upsert."""

    shopify_variant_id: int
    shopify_product_id: int
    condition: str | None
    finish: str | None
    price: Decimal | None
    quantity: int
    sku: str | None


@dataclass
class SyncResult:
    """Outcome of a successful inventory sync."""

    product_count: int
    variant_count: int
    removed_count: int
    elapsed_seconds: float


# --- Matching ---


@dataclass
class Printing:
    """
    One stocked variant of a card.

    Attributes:
        set_name: Set the printing is from (None if unknown)
        title: Full product title
        variant_id: Shopify variant id (string, to survive JSON number limits)
        price: Unit price
        quantity: Units in stock
    """

    set_name: str | None
    title: str
    image_url: str | None
    product_url: str | None
    handle: str | None
    variant_id: str
    condition: str | None
    finish: str | None
    price: float
    quantity: int
    sku: str | None

    @property
    def condition_rank(self) -> int:
        return condition_rank(self.condition)


@dataclass
class MatchResult:
    """
    Inventory availability for one requested card name.

    requested keeps the caller's casing; card_name is the stored casing when
    found. printings are ordered by price, then condition.
    """

    requested: str
    found: bool
    card_name: str
    printings: list[Printing] = field(default_factory=list)
    selected: Printing | None = None

    def with_selection(self, selected: Printing | None) -> "MatchResult":
        """Copy of this result with a chosen printing."""
        return replace(self, selected=selected)


@dataclass
class SearchHit:
    """Autocomplete row: one (card, set, image) group."""

    card_name: str
    set_name: str | None
    image_url: str | None
    min_price: float
    total_quantity: int


@dataclass
class InventoryStats:
    """Totals over in-stock variants."""

    product_count: int = 0
    variant_count: int = 0
    total_stock: int = 0
