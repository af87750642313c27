# ccube/schemas/cart_summary.py
from sqlmodel import SQLModel

from ccube.schemas.cart import CartExpiration, CartLineRead, CartTotals
from ccube.schemas.discount import CartDiscountSummary, EligibilityProgress


class CartSummary(SQLModel):
    """
    Full cart response model: lines, totals, the applied promotion and
    upsell hints.
    """

    device_id: str
    items: list[CartLineRead] = []
    item_count: int = 0
    totals: CartTotals = CartTotals()
    discounts: CartDiscountSummary = CartDiscountSummary()
    eligibility: list[EligibilityProgress] = []
    expiration: CartExpiration | None = None
