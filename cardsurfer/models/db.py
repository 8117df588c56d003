"""
SQLAlchemy ORM models for persistent storage.

Products and variants mirror the Shopify catalog; sync_log is an append-only
audit trail of sync runs.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from cardsurfer.models.inventory import SyncStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProductDB(Base):
    """
    A Shopify product: one card printing in one set.

    Identified by the numeric Shopify product id. card_name is never empty;
    set_name is null when the title could not be parsed.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shopify_product_id: Mapped[int] = mapped_column(BigInteger, unique=True)
    title: Mapped[str] = mapped_column(Text)
    card_name: Mapped[str] = mapped_column(Text, index=True)
    set_name: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    handle: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Cascade is enforced by the foreign key; the ORM must not null it out
    variants: Mapped[list["VariantDB"]] = relationship(
        back_populates="product", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<ProductDB(id={self.shopify_product_id}, card={self.card_name})>"


# Case-insensitive card lookups in the deck matcher
Index("idx_products_card_name_lower", func.lower(ProductDB.card_name))


class VariantDB(Base):
    """
    A purchasable variant of a product (condition x finish).

    quantity is the available stock and is never negative.
    """

    __tablename__ = "variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shopify_variant_id: Mapped[int] = mapped_column(BigInteger, unique=True)
    shopify_product_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("products.shopify_product_id", ondelete="CASCADE"),
        index=True,
    )
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    finish: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, index=True)
    sku: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    product: Mapped["ProductDB"] = relationship(back_populates="variants")

    def __repr__(self) -> str:
        return f"<VariantDB(id={self.shopify_variant_id}, qty={self.quantity})>"


class SyncRunDB(Base):
    """
    One inventory sync invocation.

    Created as running when the sync starts and updated once when it ends.
    Rows are never deleted.
    """

    __tablename__ = "sync_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    products_synced: Mapped[int] = mapped_column(Integer, default=0)
    variants_synced: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default=SyncStatus.RUNNING.value)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<SyncRunDB(id={self.id}, status={self.status})>"
