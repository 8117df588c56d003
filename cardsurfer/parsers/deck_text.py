"""
Parser for plain-text deck lists.

Supported line formats:
    4 Lightning Bolt
    4x Sol Ring
    1 Fell the Profane // Fell the Profane     (front face is kept)
    1 Sol Ring (CMM) *F* #123                  (set code, foil marker, collector number)
    Sol Ring                                   (no quantity: one copy)

Section headers (Deck, Sideboard, Commander, Companion, Maybeboard, About,
optionally with a trailing colon) and comment lines starting with // or #
are skipped. A header switches the board for the entries that follow it.
"""

import logging
import re

from cardsurfer.models.deck import DEFAULT_BOARD, DeckCard, LineError, TextParseResult

logger = logging.getLogger(__name__)

# Pattern: "4x Card Name (SET) *F* #123" - everything after the name is optional
# Groups: (quantity, card_name)
QUANTITY_LINE_PATTERN = re.compile(
    r"^(\d+)\s*x?\s+(.+?)(?:\s*[(\[]\w+[)\]])?(?:\s+\*\w+\*)?(?:\s+#\S+)?$",
    re.IGNORECASE,
)

# Pattern: "Sideboard", "COMMANDER:", "maybeboard"
SECTION_HEADER_PATTERN = re.compile(
    r"^(deck|mainboard|sideboard|commanders?|companions?|maybeboard|about):?\s*$",
    re.IGNORECASE,
)

# Trailing collector number left inside the name, e.g. "Sol Ring (123)"
COLLECTOR_NUMBER_PATTERN = re.compile(r"\s*\(\d+\)\s*$")

COMMENT_PREFIXES = ("//", "#")

SPLIT_CARD_SEPARATOR = " // "

# Header keyword -> board name used for following entries
SECTION_BOARDS: dict[str, str | None] = {
    "deck": DEFAULT_BOARD,
    "mainboard": DEFAULT_BOARD,
    "sideboard": "sideboard",
    "commander": "commanders",
    "commanders": "commanders",
    "companion": "companions",
    "companions": "companions",
    "maybeboard": "maybeboard",
    "about": None,  # deck metadata, board unchanged
}


def front_face(name: str) -> str:
    """Front face of a double-faced or split card name."""
    if SPLIT_CARD_SEPARATOR in name:
        return name.split(SPLIT_CARD_SEPARATOR)[0].strip()
    return name


def _section_board(line: str) -> str | None:
    """
    Classify a skippable line.

    Returns the board a section header switches to, "" for comments and headers
    that keep the current board, or None when the line is not skippable.
    """
    if line.startswith(COMMENT_PREFIXES):
        return ""

    match = SECTION_HEADER_PATTERN.match(line)
    if match:
        return SECTION_BOARDS[match.group(1).lower()] or ""

    return None


def parse_text_deck_list(text: str) -> TextParseResult:
    """
    Parse a plain-text deck list.

    Never aborts on a bad line: each unparseable line becomes a LineError
    and parsing continues.

    Args:
        text: Raw deck list (one entry per line)

    Returns:
        TextParseResult with parsed cards in input order and line errors
    """
    result = TextParseResult()
    board = DEFAULT_BOARD
    lines = text.split("\n")

    logger.info("Parsing text deck list (%d lines)", len(lines))

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()

        if not line:
            continue

        section = _section_board(line)
        if section is not None:
            board = section or board
            logger.debug("Skipping header line %d: %r", line_number, line)
            continue

        match = QUANTITY_LINE_PATTERN.match(line)
        if match:
            quantity = int(match.group(1))
            name = front_face(match.group(2).strip())
            name = COLLECTOR_NUMBER_PATTERN.sub("", name).strip()

            if name and quantity > 0:
                result.cards.append(DeckCard(name=name, quantity=quantity, board=board))
            else:
                result.errors.append(
                    LineError(
                        line=line_number,
                        text=line,
                        reason="Invalid quantity or empty card name",
                    )
                )
            continue

        # No quantity: a bare card name counts as one copy
        if len(line) > 1 and not line.isdigit():
            result.cards.append(DeckCard(name=front_face(line), quantity=1, board=board))
        else:
            result.errors.append(
                LineError(line=line_number, text=line, reason="Could not parse line")
            )

    logger.info("Parsed %d cards from text (%d errors)", len(result.cards), len(result.errors))
    if result.errors:
        logger.info("Parse errors: %s", [(e.line, e.text) for e in result.errors])

    return result
