from cardsurfer.db.database import get_session, init_db
from cardsurfer.db.operations import (
    create_sync_run,
    delete_stale_products,
    finish_sync_run,
    get_inventory_stats,
    get_latest_sync_run,
    get_product,
    get_variant,
    upsert_product,
    upsert_variant,
)

__all__ = [
    "create_sync_run",
    "delete_stale_products",
    "finish_sync_run",
    "get_inventory_stats",
    "get_latest_sync_run",
    "get_product",
    "get_session",
    "get_variant",
    "init_db",
    "upsert_product",
    "upsert_variant",
]
