from cardsurfer.models.deck import DeckCard, LineError, ParsedDeck, TextParseResult
from cardsurfer.models.failure import (
    ConfigurationError,
    DeckNotFoundError,
    FailureKind,
    InvalidUrlError,
    KnownError,
    SyncError,
    SyncInProgressError,
    UpstreamAuthError,
    UpstreamError,
)
from cardsurfer.models.inventory import (
    CONDITION_ORDER,
    InventoryStats,
    MatchResult,
    ParsedTitle,
    Printing,
    ProductRecord,
    RawProduct,
    SearchHit,
    SyncResult,
    SyncStatus,
    VariantOptions,
    VariantRecord,
    condition_rank,
)

__all__ = [
    "CONDITION_ORDER",
    "ConfigurationError",
    "DeckCard",
    "DeckNotFoundError",
    "FailureKind",
    "InvalidUrlError",
    "InventoryStats",
    "KnownError",
    "LineError",
    "MatchResult",
    "ParsedDeck",
    "ParsedTitle",
    "Printing",
    "ProductRecord",
    "RawProduct",
    "SearchHit",
    "SyncError",
    "SyncInProgressError",
    "SyncResult",
    "SyncStatus",
    "TextParseResult",
    "UpstreamAuthError",
    "UpstreamError",
    "VariantOptions",
    "VariantRecord",
    "condition_rank",
]
