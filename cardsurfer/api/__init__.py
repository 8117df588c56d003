from cardsurfer.api.deck import router as deck_router
from cardsurfer.api.health import router as health_router
from cardsurfer.api.search import router as search_router
from cardsurfer.api.sync import router as sync_router

__all__ = [
    "deck_router",
    "health_router",
    "search_router",
    "sync_router",
]
