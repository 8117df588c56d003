from dataclasses import dataclass, field

DEFAULT_BOARD = "mainboard"


@dataclass
class DeckCard:
    """
    One parsed deck-list entry.

    Attributes:
        name: Card name (front face only for double-faced cards)
        quantity: Requested copies, always positive
        board: Deck section the entry came from (mainboard, sideboard, ...)
    """

    name: str
    quantity: int
    board: str = DEFAULT_BOARD


@dataclass
class LineError:
    """A deck-text line that could not be turned into a card."""

    line: int  # 1-based
    text: str
    reason: str


@dataclass
class TextParseResult:
    """Cards and per-line errors from a plain-text deck list."""

    cards: list[DeckCard] = field(default_factory=list)
    errors: list[LineError] = field(default_factory=list)


@dataclass
class ParsedDeck:
    """A deck list from any source (text or provider URL)."""

    cards: list[DeckCard] = field(default_factory=list)
    errors: list[LineError] = field(default_factory=list)
    deck_name: str = "Imported Deck"
    format: str = "unknown"

    def total_cards(self) -> int:
        """Total copies across all entries."""
        return sum(card.quantity for card in self.cards)
