# ccube/schemas/discount.py
from sqlmodel import SQLModel, Field

from ccube.models.discount import Discount
from ccube.schemas.cart import CartLineItem

BUY_X_GET_Y = "buyXgetY"


class PromotionRule(SQLModel):
    """
    Validated promotion rule as consumed by the pricing engine.
    """

    id: str
    name: str = ""
    active: bool = True
    type: str = BUY_X_GET_Y
    buy_quantity: int = Field(gt=0)
    free_quantity: int = Field(gt=0)
    applicable_products: list[str] = []

    def applies_to(self, product_id: str) -> bool:
        return product_id in self.applicable_products

    @classmethod
    def from_model(cls, discount: Discount) -> "PromotionRule":
        return cls.model_validate(
            {
                "id": discount.id,
                "name": discount.name,
                "active": discount.active,
                "type": discount.type,
                "buy_quantity": discount.buy_quantity,
                "free_quantity": discount.free_quantity,
                "applicable_products": discount.applicable_products or [],
            }
        )


class FreeItem(SQLModel):
    item: CartLineItem
    free_quantity: int
    unit_price: float
    savings: float


class DiscountedItem(SQLModel):
    item: CartLineItem
    original_quantity: int
    paid_quantity: int
    free_quantity: int


class DiscountInfo(SQLModel):
    type: str
    buy_quantity: int
    free_quantity: int
    sets_eligible: int
    total_free_items: int
    total_applicable_items: int


class EligibilityResult(SQLModel):
    """
    Outcome of evaluating one rule against one cart.

    `discount_info` is None when the rule did not apply at all.
    """

    savings: float = 0.0
    free_items: list[FreeItem] = []
    discounted_items: list[DiscountedItem] = []
    discount_info: DiscountInfo | None = None

    @property
    def total_free_items(self) -> int:
        if self.discount_info is None:
            return 0
        return self.discount_info.total_free_items


class AppliedDiscount(SQLModel):
    rule: PromotionRule
    result: EligibilityResult


class CartDiscountSummary(SQLModel):
    """
    The single promotion applied to a cart (or none).
    """

    total_savings: float = 0.0
    applied_discounts: list[AppliedDiscount] = []
    free_items: list[FreeItem] = []
    discounted_items: list[DiscountedItem] = []

    @property
    def has_discounts(self) -> bool:
        return self.total_savings > 0

    def free_items_for_product(self, product_id: str) -> list[FreeItem]:
        return [fi for fi in self.free_items if fi.item.product.id == product_id]

    def discounted_items_for_product(self, product_id: str) -> list[DiscountedItem]:
        return [di for di in self.discounted_items if di.item.product.id == product_id]


class EligibilityProgress(SQLModel):
    """
    Upsell hint: how close the cart is to a promotion.
    """

    rule: PromotionRule
    is_eligible: bool
    items_needed: int
    current_quantity: int
    potential_savings: float = 0.0
    description: str


class ProductDiscountRead(SQLModel):
    rule: PromotionRule
    description: str
