# ccube/services/cart_totals.py
from collections.abc import Sequence

from ccube.core.pricing import PriceResolver
from ccube.schemas.cart import CartLineItem, CartTotals
from ccube.schemas.discount import CartDiscountSummary


def compose_totals(
    items: Sequence[CartLineItem],
    price_resolver: PriceResolver,
    discount_summary: CartDiscountSummary,
    tax_rate: float,
) -> CartTotals:
    """
    Combine subtotal, promotion savings and tax.

    Tax is charged on the discounted subtotal. Values stay unrounded;
    rounding to 2 decimals is left to the client.
    """
    subtotal = 0.0
    for item in items:
        subtotal += price_resolver(item.product, item.selected_size) * item.quantity

    savings = discount_summary.total_savings
    subtotal_after_discount = subtotal - savings
    tax = subtotal_after_discount * tax_rate

    return CartTotals(
        subtotal=subtotal,
        discount_savings=savings,
        subtotal_after_discount=subtotal_after_discount,
        tax_rate=tax_rate,
        tax=tax,
        total=subtotal_after_discount + tax,
    )
