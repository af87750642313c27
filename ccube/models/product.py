# ccube/models/product.py
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    The catalog is written by an external ingestion job, so price fields
    are stored exactly as received:
      - price:   "100", 100, or a size map like {"small": 150, "large": 200}
      - pricing: legacy size map used by older records
    Normalization happens in `ProductRead.from_model`.
    """

    __tablename__ = "products"

    id: str = Field(
        primary_key=True,
        max_length=64,
        description="Catalog identifier, e.g. 'crob01'",
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(default=None)

    category: str | None = Field(
        default=None,
        max_length=100,
        description="Category path, e.g. 'Crochet > Bags'",
    )

    price: Any = Field(
        default=None,
        sa_column=Column(JSON),
        description="Raw price: scalar or size-keyed map",
    )

    pricing: Any = Field(
        default=None,
        sa_column=Column(JSON),
        description="Legacy size-keyed price map",
    )

    sizes: Any = Field(default=None, sa_column=Column(JSON))
    colors: Any = Field(default=None, sa_column=Column(JSON))
    scents: Any = Field(default=None, sa_column=Column(JSON))

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
