"""
Scheduled job to sync Shopify inventory.

Runs an initial sync at startup and then re-syncs on a fixed interval.
Can also be run as a standalone script for a one-off sync.
"""

import asyncio
import logging
from datetime import timedelta
from functools import lru_cache

from cardsurfer.config import settings
from cardsurfer.db.database import async_session_factory, init_db
from cardsurfer.models.failure import SyncError, SyncInProgressError
from cardsurfer.models.inventory import SyncResult
from cardsurfer.parsers.shopify_product import storefront_base_url
from cardsurfer.services.inventory_sync import InventorySyncer
from cardsurfer.services.shopify_auth import ShopifyTokenCache
from cardsurfer.services.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)


def build_syncer() -> InventorySyncer:
    """Wire a syncer from application settings."""
    token_cache = ShopifyTokenCache(
        client_id=settings.shopify_client_id,
        client_secret=settings.shopify_client_secret,
        store_domain=settings.shopify_store_domain,
        refresh_margin=timedelta(seconds=settings.token_refresh_margin_seconds),
    )
    client = ShopifyClient(
        token_cache,
        api_version=settings.shopify_api_version,
        page_delay=settings.sync_page_delay_seconds,
    )
    storefront_url = settings.storefront_url or storefront_base_url(
        settings.shopify_store_domain
    )
    return InventorySyncer(client, async_session_factory, storefront_url)


@lru_cache
def get_syncer() -> InventorySyncer:
    """
    Process-wide syncer shared by the scheduler and the HTTP trigger.

    Sharing one instance is what makes overlapping triggers single-flight.
    """
    return build_syncer()


async def run_sync_once(syncer: InventorySyncer, source: str = "manual") -> SyncResult | None:
    """
    Run one sync and log the outcome.

    Failures are already recorded in sync_log by the syncer; here they are
    only logged so a scheduler keeps running.

    Returns:
        SyncResult, or None if the sync failed or another sync was running
    """
    logger.info("[%s] Running inventory sync...", source)

    try:
        result = await syncer.sync_inventory()
    except SyncInProgressError:
        logger.warning("[%s] Skipping sync: another sync is still running", source)
        return None
    except SyncError as e:
        logger.error("[%s] Sync failed (will retry on schedule): %s", source, e)
        return None

    logger.info(
        "[%s] Sync complete: %d products, %d variants in %.1fs",
        source,
        result.product_count,
        result.variant_count,
        result.elapsed_seconds,
    )
    return result


async def run_sync_guarded(syncer: InventorySyncer, source: str) -> SyncResult | None:
    """Run one sync; every failure is logged and none is raised to the scheduler."""
    try:
        return await run_sync_once(syncer, source=source)
    except Exception:
        logger.exception("[%s] Unexpected sync error (will retry on schedule)", source)
        return None


async def run_periodic_sync(
    syncer: InventorySyncer,
    interval_minutes: int,
    run_immediately: bool = True,
) -> None:
    """
    Sync forever on a fixed interval until cancelled.

    Args:
        syncer: Syncer to run
        interval_minutes: Minutes between sync starts
        run_immediately: Run the first sync now instead of after one interval
    """
    logger.info("Inventory sync scheduled every %d minutes", interval_minutes)

    if run_immediately:
        await run_sync_guarded(syncer, source="startup")

    while True:
        await asyncio.sleep(interval_minutes * 60)
        await run_sync_guarded(syncer, source="scheduled")


async def run_cli_sync() -> None:
    """Create tables if needed and run a single sync; failures propagate."""
    await init_db()
    await get_syncer().sync_inventory()


def main() -> None:
    """CLI entry point for running one inventory sync."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_cli_sync())


if __name__ == "__main__":
    main()
