# ccube/schemas/product.py
from collections.abc import Mapping
from typing import Any

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

from ccube.core.pricing import ScalarPrice, VariantPrice, normalize_price
from ccube.models.product import Product


def _as_str_list(value: Any) -> list[str]:
    """
    Catalog variant lists arrive as a list, a single string, or nothing.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


class ProductRead(SQLModel):
    """
    Product representation for clients and for the pricing engine.

    `price` is always normalized: raw catalog values passed in are
    converted by `normalize_price`.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str | None = None
    category: str | None = None
    price: ScalarPrice | VariantPrice = ScalarPrice()
    sizes: list[str] = []
    colors: list[str] = []
    scents: list[str] = []
    is_active: bool = True

    @field_validator("price", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        # already-normalized payloads (e.g. a dumped ProductRead) pass through
        if isinstance(v, Mapping) and v.get("kind") in ("scalar", "variant"):
            return v
        return normalize_price(v)

    @field_validator("sizes", "colors", "scents", mode="before")
    @classmethod
    def variant_list(cls, v: Any) -> list[str]:
        return _as_str_list(v)

    @classmethod
    def from_model(cls, product: Product) -> "ProductRead":
        """
        Build the read model from a catalog row, folding the legacy
        `pricing` field into the normalized price.
        """
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
            price=normalize_price(product.price, product.pricing),
            sizes=product.sizes,
            colors=product.colors,
            scents=product.scents,
            is_active=product.is_active,
        )
