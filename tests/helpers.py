from ccube.schemas.cart import CartLineItem
from ccube.schemas.discount import PromotionRule
from ccube.schemas.product import ProductRead

DEVICE = "device_test_1"


def make_product(product_id="p1", price=100, name=None, **kwargs):
    return ProductRead(id=product_id, name=name or product_id.upper(), price=price, **kwargs)


def make_line(product, quantity=1, size="Standard", color="Default"):
    return CartLineItem(
        key=f"{product.id}-{size}-{color}",
        product=product,
        quantity=quantity,
        selected_size=size,
        selected_color=color,
    )


def make_rule(rule_id="r1", buy=2, free=1, products=("p1",), active=True, type="buyXgetY"):
    return PromotionRule(
        id=rule_id,
        name=f"Buy {buy} Get {free} Free",
        active=active,
        type=type,
        buy_quantity=buy,
        free_quantity=free,
        applicable_products=list(products),
    )
