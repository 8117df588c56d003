"""
Inventory sync.

Pulls the full Shopify catalog and mirrors it into the local database for
fast deck matching:

1. Open a sync_log row (status running) in its own transaction.
2. Fetch every product page from Shopify. No transaction is held here.
3. In one transaction: upsert products and their variants in fetch order,
   then delete every product Shopify no longer lists.
4. Commit, or roll back everything on failure.
5. Close the sync_log row as completed or failed.

Reconciliation is by absence: each run is a full replace, not an incremental
diff. Runs are single-flight per syncer; a second call while one is running
raises SyncInProgressError instead of writing concurrently.
"""

import asyncio
import logging
import time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardsurfer.db.operations import (
    create_sync_run,
    delete_stale_products,
    finish_sync_run,
    upsert_product,
    upsert_variant,
)
from cardsurfer.models.failure import SyncError, SyncInProgressError
from cardsurfer.models.inventory import (
    ProductRecord,
    RawProduct,
    SyncResult,
    SyncStatus,
    VariantRecord,
)
from cardsurfer.parsers.shopify_product import (
    build_product_url,
    extract_numeric_id,
    featured_image_url,
    parse_price,
    parse_product_title,
    parse_variant_options,
    stock_quantity,
)
from cardsurfer.services.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)


def product_record(raw: RawProduct, product_id: int, storefront_url: str) -> ProductRecord:
    """Normalize a raw product node into a row to upsert."""
    title = raw.get("title") or ""
    parsed = parse_product_title(title)
    handle = raw.get("handle")
    return ProductRecord(
        shopify_product_id=product_id,
        title=title,
        card_name=parsed.card_name or title,
        set_name=parsed.set_name,
        handle=handle,
        image_url=featured_image_url(raw),
        product_url=build_product_url(storefront_url, handle),
    )


class InventorySyncer:
    """Runs full-catalog syncs from one Shopify store into the database."""

    def __init__(
        self,
        client: ShopifyClient,
        session_factory: async_sessionmaker[AsyncSession],
        storefront_url: str,
    ) -> None:
        self.client = client
        self.session_factory = session_factory
        self.storefront_url = storefront_url
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def sync_inventory(self) -> SyncResult:
        """
        Run one full sync.

        Returns:
            SyncResult with product/variant counts and elapsed seconds

        Raises:
            SyncInProgressError: If another sync on this syncer has not finished
            SyncError: If opening the run, fetching or writing failed (cause
                chained). The failure is recorded in sync_log when the
                database allows it, and no partial writes survive.
        """
        if self._lock.locked():
            raise SyncInProgressError()

        async with self._lock:
            return await self._run()

    async def _run(self) -> SyncResult:
        try:
            run_id = await self._open_run()
        except Exception as e:
            logger.exception("====== Sync FAILED: could not open sync run ======")
            raise SyncError(str(e) or repr(e)) from e
        started = time.monotonic()

        logger.info("====== Starting inventory sync (run %d) ======", run_id)

        try:
            products = await self.client.fetch_all_products()
            logger.info("Fetched %d total products from Shopify", len(products))

            async with self.session_factory() as session:
                try:
                    product_count, variant_count, removed = await self._write_catalog(
                        session, products
                    )
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except Exception as e:
            logger.exception("====== Sync FAILED (run %d) ======", run_id)
            try:
                await self._close_run(run_id, SyncStatus.FAILED, error_message=str(e) or repr(e))
            except Exception:
                logger.exception("Could not record failure of sync run %d", run_id)
            raise SyncError(str(e) or repr(e), sync_run_id=run_id) from e

        elapsed = round(time.monotonic() - started, 1)
        try:
            await self._close_run(run_id, SyncStatus.COMPLETED, product_count, variant_count)
        except Exception:
            # The catalog is already committed
            logger.exception("Could not record completion of sync run %d", run_id)

        logger.info(
            "====== Sync complete: %d products, %d variants, %d removed in %.1fs ======",
            product_count,
            variant_count,
            removed,
            elapsed,
        )
        return SyncResult(
            product_count=product_count,
            variant_count=variant_count,
            removed_count=removed,
            elapsed_seconds=elapsed,
        )

    async def _write_catalog(
        self, session: AsyncSession, products: list[RawProduct]
    ) -> tuple[int, int, int]:
        """Upsert all products and variants, then delete stale products."""
        product_count = 0
        variant_count = 0
        seen_ids: set[int] = set()

        for raw in products:
            product_id = extract_numeric_id(raw.get("id", ""))
            if product_id is None:
                logger.warning("Could not extract numeric ID from: %s", raw.get("id"))
                continue

            seen_ids.add(product_id)
            await upsert_product(session, product_record(raw, product_id, self.storefront_url))
            product_count += 1

            for edge in (raw.get("variants") or {}).get("edges", []):
                variant = edge["node"]
                variant_id = extract_numeric_id(variant.get("id", ""))
                if variant_id is None:
                    logger.warning("Could not extract numeric ID from: %s", variant.get("id"))
                    continue

                options = parse_variant_options(variant)
                await upsert_variant(
                    session,
                    VariantRecord(
                        shopify_variant_id=variant_id,
                        shopify_product_id=product_id,
                        condition=options.condition,
                        finish=options.finish,
                        price=parse_price(variant.get("price")),
                        quantity=stock_quantity(variant.get("inventoryQuantity")),
                        sku=variant.get("sku"),
                    ),
                )
                variant_count += 1

        if not seen_ids:
            logger.warning("No products resolved from Shopify - skipping stale product removal")
            return product_count, variant_count, 0

        removed = await delete_stale_products(session, seen_ids)
        logger.info("Removed %d stale products from database", removed)
        return product_count, variant_count, removed

    async def _open_run(self) -> int:
        async with self.session_factory() as session:
            run = await create_sync_run(session)
            await session.commit()
            return run.id

    async def _close_run(
        self,
        run_id: int,
        status: SyncStatus,
        products_synced: int = 0,
        variants_synced: int = 0,
        error_message: str | None = None,
    ) -> None:
        async with self.session_factory() as session:
            await finish_sync_run(
                session,
                run_id,
                status,
                products_synced=products_synced,
                variants_synced=variants_synced,
                error_message=error_message,
            )
            await session.commit()
