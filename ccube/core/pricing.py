# ccube/core/pricing.py
import math
from collections.abc import Callable, Mapping
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict


class ScalarPrice(BaseModel):
    """
    Single price for every variant of a product.

    `amount` is None when the catalog value could not be parsed.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    amount: float | None = None


class VariantPrice(BaseModel):
    """
    Size-keyed prices, e.g. {"small": 150.0, "large": 200.0}.

    Keys are lower-cased at ingestion; insertion order is preserved and
    decides the fallback price. Unparseable values are kept as None.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["variant"] = "variant"
    prices: dict[str, float | None] = {}


PriceRepresentation = ScalarPrice | VariantPrice


class HasPrice(Protocol):
    price: PriceRepresentation


# (product, selected variant key) -> unit price
PriceResolver = Callable[[Any, str | None], float]


def parse_price(value: Any) -> float | None:
    """
    Parse a raw catalog price into a non-negative finite float.

    Accepts numbers and numeric strings. Anything else (None, booleans,
    garbage strings, NaN/inf, negatives) is treated as absent.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def _variant_price(raw: Mapping) -> VariantPrice:
    prices: dict[str, float | None] = {}
    for key, value in raw.items():
        # first key wins when two keys differ only by case
        prices.setdefault(str(key).strip().lower(), parse_price(value))
    return VariantPrice(prices=prices)


def normalize_price(price: Any, pricing: Any = None) -> PriceRepresentation:
    """
    Collapse the catalog's price shapes into one tagged representation.

    Order of precedence:
      1. `price` is a mapping      -> VariantPrice
      2. legacy `pricing` mapping  -> VariantPrice
      3. anything else            -> ScalarPrice (possibly absent)
    """
    if isinstance(price, (ScalarPrice, VariantPrice)):
        return price
    if isinstance(price, Mapping):
        return _variant_price(price)
    if isinstance(pricing, Mapping):
        return _variant_price(pricing)
    return ScalarPrice(amount=parse_price(price))


def resolve_unit_price(product: HasPrice, selected_variant_key: str | None = None) -> float:
    """
    Resolve the unit price of a product for the selected variant (size).

    Never raises: a product without any usable price costs 0.
    """
    price = product.price

    if isinstance(price, VariantPrice):
        if selected_variant_key:
            amount = price.prices.get(selected_variant_key.strip().lower())
            if amount is not None:
                return amount
        for amount in price.prices.values():
            if amount is not None:
                return amount
        return 0.0

    if price.amount is None:
        return 0.0
    return price.amount
