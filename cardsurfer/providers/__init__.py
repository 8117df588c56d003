from cardsurfer.providers.archidekt import archidekt_provider, parse_archidekt_url
from cardsurfer.providers.base import DeckProvider
from cardsurfer.providers.moxfield import moxfield_provider, parse_moxfield_url

# Consulted in order; the first provider whose URL marker appears in the input wins
DECK_PROVIDERS: list[DeckProvider] = [moxfield_provider, archidekt_provider]


def find_provider(text: str) -> DeckProvider | None:
    """Provider whose deck URLs appear in text, if any."""
    return next((provider for provider in DECK_PROVIDERS if provider.matches(text)), None)


__all__ = [
    "DECK_PROVIDERS",
    "DeckProvider",
    "archidekt_provider",
    "find_provider",
    "moxfield_provider",
    "parse_archidekt_url",
    "parse_moxfield_url",
]
