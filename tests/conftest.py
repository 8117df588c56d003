from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cardsurfer.db.database import build_engine, drop_db, get_session, init_db
from cardsurfer.db.operations import upsert_product, upsert_variant
from cardsurfer.main import app
from cardsurfer.models.inventory import ProductRecord, RawProduct, VariantRecord


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine for testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await drop_db(engine)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def make_raw_product(
    product_id: int,
    title: str,
    variants: list[tuple[int, str, str, int]],
    handle: str | None = None,
) -> RawProduct:
    """
    Build a products-query node.

    variants: (variant_id, condition, price, inventory_quantity) tuples
    """
    return {
        "id": f"gid://shopify/Product/{product_id}",
        "title": title,
        "handle": handle or title.lower().replace(" ", "-"),
        "featuredImage": {"url": f"https://cdn.shopify.com/{product_id}.jpg"},
        "variants": {
            "edges": [
                {
                    "node": {
                        "id": f"gid://shopify/ProductVariant/{variant_id}",
                        "title": f"{condition} / Regular",
                        "price": price,
                        "inventoryQuantity": quantity,
                        "sku": f"SKU-{variant_id}",
                        "selectedOptions": [
                            {"name": "Condition", "value": condition},
                            {"name": "Finish", "value": "Regular"},
                        ],
                    }
                }
                for variant_id, condition, price, quantity in variants
            ]
        },
    }


async def seed_printing(
    session: AsyncSession,
    product_id: int,
    card_name: str,
    set_name: str | None,
    variants: list[tuple[int, str, str, int]],
) -> None:
    """Write one product and its variants straight to the database."""
    title = f"{card_name} ({set_name})" if set_name else card_name
    await upsert_product(
        session,
        ProductRecord(
            shopify_product_id=product_id,
            title=title,
            card_name=card_name,
            set_name=set_name,
            handle=title.lower().replace(" ", "-"),
            image_url=f"https://cdn.shopify.com/{product_id}.jpg",
            product_url=f"https://cardsurfer.com/products/{product_id}",
        ),
    )
    for variant_id, condition, price, quantity in variants:
        await upsert_variant(
            session,
            VariantRecord(
                shopify_variant_id=variant_id,
                shopify_product_id=product_id,
                condition=condition,
                finish="Regular",
                price=Decimal(price),
                quantity=quantity,
                sku=f"SKU-{variant_id}",
            ),
        )
    await session.commit()


@pytest.fixture
def raw_product():
    """Factory for products-query nodes."""
    return make_raw_product


@pytest.fixture
def seed(session: AsyncSession):
    """Factory that writes a product and its variants to the test database."""

    async def _seed(
        product_id: int,
        card_name: str,
        set_name: str | None,
        variants: list[tuple[int, str, str, int]],
    ) -> None:
        await seed_printing(session, product_id, card_name, set_name, variants)

    return _seed
