# ccube/models/discount.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Discount(SQLModel, table=True):
    """
    Promotion rule record, e.g. "Buy 3 Get 1 Free - Crochet Bags".

    Only `type == "buyXgetY"` is understood by the pricing engine; other
    types are stored but skipped at evaluation time.
    """

    __tablename__ = "discounts"

    id: str = Field(primary_key=True, max_length=64)

    name: str = Field(max_length=255)

    active: bool = Field(default=True, index=True)

    type: str = Field(default="buyXgetY", max_length=50)

    buy_quantity: int = Field(default=1)
    free_quantity: int = Field(default=1)

    applicable_products: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON),
        description="Product ids covered by this promotion",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
