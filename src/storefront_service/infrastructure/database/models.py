"""SQLAlchemy models for the storefront store.

Every synced table carries an ``external_id`` holding the identifier assigned
by Shopify. It is the natural key used to reconcile remote records with local
rows; the integer ``id`` is internal and never leaves the database except as a
foreign key.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from shared.constants import DEFAULT_CURRENCY_CODE, DEFAULT_ORDER_STATUS


class Base(DeclarativeBase):
    """Base class for all models."""


# =============================================================================
# Catalog
# =============================================================================


class Product(Base):
    """A product synced from the storefront catalog."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    handle: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[Optional[str]] = mapped_column(String(50))
    total_inventory: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price_min: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    price_max: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    currency_code: Mapped[Optional[str]] = mapped_column(String(10))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    variants: Mapped[list["ProductVariant"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )
    images: Mapped[list["ProductImage"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_products_title", "title"),)


class ProductVariant(Base):
    """A purchasable variant of a product."""

    __tablename__ = "product_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    title: Mapped[Optional[str]] = mapped_column(String(500))
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(String(255))
    inventory_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    weight: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    weight_unit: Mapped[Optional[str]] = mapped_column(String(20))
    synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    product: Mapped[Product] = relationship(back_populates="variants")


class ProductImage(Base):
    """An image attached to a product."""

    __tablename__ = "product_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    url: Mapped[Optional[str]] = mapped_column(Text)
    alt_text: Mapped[Optional[str]] = mapped_column(Text)
    width: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    height: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    product: Mapped[Product] = relationship(back_populates="images")


# =============================================================================
# Orders
# =============================================================================


class Customer(Base):
    """A customer referenced by one or more orders."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    first_name: Mapped[Optional[str]] = mapped_column(String(255))
    last_name: Mapped[Optional[str]] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


class Order(Base):
    """An order synced from the storefront."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    processed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Money
    total_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    subtotal_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    tax_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    shipping_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    currency_code: Mapped[str] = mapped_column(
        String(10), default=DEFAULT_CURRENCY_CODE, nullable=False
    )

    # Status
    financial_status: Mapped[str] = mapped_column(
        String(50), default=DEFAULT_ORDER_STATUS, nullable=False
    )
    fulfillment_status: Mapped[str] = mapped_column(
        String(50), default=DEFAULT_ORDER_STATUS, nullable=False
    )

    note: Mapped[Optional[str]] = mapped_column(Text)
    tags: Mapped[Optional[str]] = mapped_column(Text)  # comma separated

    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"), index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    synced_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    customer: Mapped[Optional[Customer]] = relationship()
    line_items: Mapped[list["LineItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan"
    )
    addresses: Mapped[list["Address"]] = relationship(
        back_populates="order", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_orders_processed_at", "processed_at"),)


class Address(Base):
    """Shipping or billing address of an order.

    Addresses have no remote identifier; an order holds at most one address of
    each type, so ``(order_id, address_type)`` is the natural key.
    """

    __tablename__ = "addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL")
    )
    address_type: Mapped[str] = mapped_column(String(20), nullable=False)
    address1: Mapped[Optional[str]] = mapped_column(String(255))
    address2: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(255))
    province: Mapped[Optional[str]] = mapped_column(String(255))
    zip: Mapped[Optional[str]] = mapped_column(String(50))
    country: Mapped[Optional[str]] = mapped_column(String(255))
    name: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))

    order: Mapped[Order] = relationship(back_populates="addresses")

    __table_args__ = (
        UniqueConstraint("order_id", "address_type", name="uq_addresses_order_type"),
    )


class LineItem(Base):
    """A line of an order, optionally linked to a local product and variant."""

    __tablename__ = "line_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    title: Mapped[Optional[str]] = mapped_column(String(500))
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    currency_code: Mapped[str] = mapped_column(
        String(10), default=DEFAULT_CURRENCY_CODE, nullable=False
    )
    product_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"), index=True
    )
    variant_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("product_variants.id", ondelete="SET NULL")
    )
    synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    order: Mapped[Order] = relationship(back_populates="line_items")


# =============================================================================
# Sync Status
# =============================================================================


class SyncStatus(Base):
    """Track data synchronization status."""

    __tablename__ = "sync_status"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # 'products', 'orders'
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    records_synced: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(50), default="idle")  # idle, running, error
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


SYNCED_TABLES = [
    Product.__tablename__,
    ProductVariant.__tablename__,
    ProductImage.__tablename__,
    Customer.__tablename__,
    Order.__tablename__,
    Address.__tablename__,
    LineItem.__tablename__,
]
