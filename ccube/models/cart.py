# ccube/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    Anonymous cart owned by a device.

    `created_at` is set when the first item is added and reset when the
    cart is cleared; the expiration window is measured from it.
    """

    __tablename__ = "carts"

    device_id: str = Field(
        primary_key=True,
        max_length=100,
    )

    created_at: datetime | None = Field(default=None)

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartItem(SQLModel, table=True):
    """
    Cart line. One cart cannot have 2 rows with the same key
    (product id + selected variant).
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("device_id", "key", name="uq_cart_items_device_key"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    device_id: str = Field(
        foreign_key="carts.device_id",
        index=True,
    )

    key: str = Field(
        index=True,
        max_length=255,
        description="product_id-size-color[-scent]",
    )

    product_id: str = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Must be >= 1",
    )

    selected_size: str = Field(default="Standard")
    selected_color: str = Field(default="Default")
    selected_scent: str = Field(default="Default")

    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
