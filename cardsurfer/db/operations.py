"""
Database CRUD operations.

Provides async functions for upserting the synced catalog, removing stale
products, and reading/writing the sync audit log.
"""

from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.models.db import ProductDB, SyncRunDB, VariantDB
from cardsurfer.models.inventory import (
    InventoryStats,
    ProductRecord,
    SyncStatus,
    VariantRecord,
)

# Ids per DELETE statement (keeps bound parameter counts modest)
DELETE_CHUNK_SIZE = 500

# --- Catalog Operations ---


async def get_product(session: AsyncSession, shopify_product_id: int) -> ProductDB | None:
    """Get a product by its Shopify id."""
    result = await session.execute(
        select(ProductDB).where(ProductDB.shopify_product_id == shopify_product_id)
    )
    return result.scalar_one_or_none()


async def get_variant(session: AsyncSession, shopify_variant_id: int) -> VariantDB | None:
    """Get a variant by its Shopify id."""
    result = await session.execute(
        select(VariantDB).where(VariantDB.shopify_variant_id == shopify_variant_id)
    )
    return result.scalar_one_or_none()


async def upsert_product(session: AsyncSession, record: ProductRecord) -> ProductDB:
    """
    Insert or update a product keyed on its Shopify id.

    All mutable fields are overwritten and updated_at is refreshed even when
    nothing else changed.
    """
    now = datetime.now(UTC)
    existing = await get_product(session, record.shopify_product_id)

    if existing:
        existing.title = record.title
        existing.card_name = record.card_name
        existing.set_name = record.set_name
        existing.handle = record.handle
        existing.image_url = record.image_url
        existing.product_url = record.product_url
        existing.updated_at = now
        await session.flush()
        return existing

    product = ProductDB(
        shopify_product_id=record.shopify_product_id,
        title=record.title,
        card_name=record.card_name,
        set_name=record.set_name,
        handle=record.handle,
        image_url=record.image_url,
        product_url=record.product_url,
        updated_at=now,
    )
    session.add(product)
    await session.flush()
    return product


async def upsert_variant(session: AsyncSession, record: VariantRecord) -> VariantDB:
    """
    Insert or update a variant keyed on its Shopify id.

    The parent product must already be written in this session.
    """
    now = datetime.now(UTC)
    existing = await get_variant(session, record.shopify_variant_id)

    if existing:
        existing.shopify_product_id = record.shopify_product_id
        existing.condition = record.condition
        existing.finish = record.finish
        existing.price = record.price
        existing.quantity = record.quantity
        existing.sku = record.sku
        existing.updated_at = now
        await session.flush()
        return existing

    variant = VariantDB(
        shopify_variant_id=record.shopify_variant_id,
        shopify_product_id=record.shopify_product_id,
        condition=record.condition,
        finish=record.finish,
        price=record.price,
        quantity=record.quantity,
        sku=record.sku,
        updated_at=now,
    )
    session.add(variant)
    await session.flush()
    return variant


async def delete_stale_products(session: AsyncSession, keep_ids: set[int]) -> int:
    """
    Delete every product whose Shopify id is not in keep_ids.

    Variants go with their product through the ON DELETE CASCADE foreign key.
    Returns the number of deleted products.
    """
    result = await session.execute(select(ProductDB.shopify_product_id))
    stale = sorted(set(result.scalars().all()) - keep_ids)

    for start in range(0, len(stale), DELETE_CHUNK_SIZE):
        chunk = stale[start : start + DELETE_CHUNK_SIZE]
        await session.execute(delete(ProductDB).where(ProductDB.shopify_product_id.in_(chunk)))

    return len(stale)


async def get_inventory_stats(session: AsyncSession) -> InventoryStats:
    """Count products, variants, and units across in-stock variants."""
    result = await session.execute(
        select(
            func.count(func.distinct(VariantDB.shopify_product_id)),
            func.count(VariantDB.id),
            func.coalesce(func.sum(VariantDB.quantity), 0),
        ).where(VariantDB.quantity > 0)
    )
    product_count, variant_count, total_stock = result.one()
    return InventoryStats(
        product_count=int(product_count),
        variant_count=int(variant_count),
        total_stock=int(total_stock),
    )


# --- Sync Log Operations ---


async def create_sync_run(session: AsyncSession) -> SyncRunDB:
    """Open a new sync_log row with status running."""
    run = SyncRunDB(status=SyncStatus.RUNNING.value, started_at=datetime.now(UTC))
    session.add(run)
    await session.flush()
    return run


async def finish_sync_run(
    session: AsyncSession,
    run_id: int,
    status: SyncStatus,
    products_synced: int = 0,
    variants_synced: int = 0,
    error_message: str | None = None,
) -> SyncRunDB:
    """
    Record the terminal state of a sync run.

    Always stamps finished_at.
    """
    run = await session.get(SyncRunDB, run_id)
    if run is None:
        msg = f"Sync run {run_id} not found"
        raise RuntimeError(msg)

    run.status = status.value
    run.products_synced = products_synced
    run.variants_synced = variants_synced
    run.error_message = error_message
    run.finished_at = datetime.now(UTC)
    await session.flush()
    return run


async def get_latest_sync_run(session: AsyncSession) -> SyncRunDB | None:
    """Most recently started sync run, or None if no sync has ever run."""
    result = await session.execute(
        select(SyncRunDB).order_by(SyncRunDB.started_at.desc(), SyncRunDB.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()
