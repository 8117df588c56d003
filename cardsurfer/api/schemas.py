"""
Shared API models.

The frontend consumes camelCase JSON, so every model serializes by alias
(FastAPI does this for response models) and accepts either spelling on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cardsurfer.models.deck import DEFAULT_BOARD, DeckCard, LineError
from cardsurfer.models.inventory import MatchResult, Printing


class CamelModel(BaseModel):
    """Base model with camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CardEntry(CamelModel):
    """A deck-list entry."""

    name: str
    quantity: int = 1
    board: str = DEFAULT_BOARD

    @classmethod
    def from_card(cls, card: DeckCard) -> "CardEntry":
        return cls(name=card.name, quantity=card.quantity, board=card.board)


class CardRequest(CamelModel):
    """A card to match: name plus the copies wanted."""

    name: str = Field(..., min_length=1)
    quantity: int = 1

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, v: Any) -> Any:
        """Missing or non-positive quantities mean one copy."""
        if v is None or (isinstance(v, int | float) and v < 1):
            return 1
        return v


class LineErrorResponse(CamelModel):
    """A deck-text line that could not be parsed."""

    line: int
    text: str
    reason: str

    @classmethod
    def from_error(cls, error: LineError) -> "LineErrorResponse":
        return cls(line=error.line, text=error.text, reason=error.reason)


class PrintingResponse(CamelModel):
    """One stocked variant of a card."""

    set_name: str | None = None
    title: str
    image_url: str | None = None
    product_url: str | None = None
    handle: str | None = None
    variant_id: str
    condition: str | None = None
    finish: str | None = None
    price: float
    quantity: int
    sku: str | None = None

    @classmethod
    def from_printing(cls, printing: Printing) -> "PrintingResponse":
        return cls(
            set_name=printing.set_name,
            title=printing.title,
            image_url=printing.image_url,
            product_url=printing.product_url,
            handle=printing.handle,
            variant_id=printing.variant_id,
            condition=printing.condition,
            finish=printing.finish,
            price=printing.price,
            quantity=printing.quantity,
            sku=printing.sku,
        )


class MatchResultResponse(CamelModel):
    """Inventory availability for one requested card, with the requested quantity."""

    requested: str
    found: bool
    card_name: str
    printings: list[PrintingResponse] = Field(default_factory=list)
    quantity: int = 1
    board: str | None = None

    @classmethod
    def from_match(
        cls, match: MatchResult, quantity: int = 1, board: str | None = None
    ) -> "MatchResultResponse":
        return cls(
            requested=match.requested,
            found=match.found,
            card_name=match.card_name,
            printings=[PrintingResponse.from_printing(p) for p in match.printings],
            quantity=quantity,
            board=board,
        )


class SelectedMatchResponse(MatchResultResponse):
    """A match with the printing chosen by an auto-select strategy."""

    selected: PrintingResponse | None = None

    @classmethod
    def from_selection(cls, match: MatchResult, quantity: int = 1) -> "SelectedMatchResponse":
        base = MatchResultResponse.from_match(match, quantity=quantity)
        return cls(
            **base.model_dump(),
            selected=PrintingResponse.from_printing(match.selected) if match.selected else None,
        )


class ErrorResponse(BaseModel):
    """Error body for every non-2xx answer."""

    error: str


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid request or deck URL"},
    500: {"model": ErrorResponse, "description": "Upstream or internal failure"},
}
