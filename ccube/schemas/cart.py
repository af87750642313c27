# ccube/schemas/cart.py
from datetime import datetime

from sqlmodel import SQLModel, Field

from ccube.schemas.product import ProductRead

DEFAULT_SIZE = "Standard"
DEFAULT_VARIANT = "Default"


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    Missing variant selections fall back to the product's first option,
    then to the "Standard"/"Default" sentinels.
    """

    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)
    selected_size: str | None = None
    selected_color: str | None = None
    selected_scent: str | None = None


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart line.

    A quantity of 0 or less removes the line.
    """

    quantity: int


class CartLineItem(SQLModel):
    """
    One cart line as seen by the pricing engine: a product snapshot,
    the selected variant and a positive quantity.
    """

    key: str
    product: ProductRead
    quantity: int = Field(gt=0)
    selected_size: str = DEFAULT_SIZE
    selected_color: str = DEFAULT_VARIANT
    selected_scent: str = DEFAULT_VARIANT


class CartLineRead(SQLModel):
    """
    Read model for a single cart line, including unit price and line_total.
    """

    key: str
    product_id: str
    product_name: str
    quantity: int
    selected_size: str
    selected_color: str
    selected_scent: str
    unit_price: float
    line_total: float


class CartTotals(SQLModel):
    subtotal: float = 0.0
    discount_savings: float = 0.0
    subtotal_after_discount: float = 0.0
    tax_rate: float = 0.0
    tax: float = 0.0
    total: float = 0.0


class CartExpiration(SQLModel):
    created_at: datetime
    expires_at: datetime
    seconds_remaining: int
    label: str
