# ccube/services/discount_service.py
import logging

from pydantic import ValidationError
from sqlmodel import Session

from ccube.repositories.discount_repo import DiscountRepository
from ccube.schemas.discount import ProductDiscountRead, PromotionRule
from ccube.services.discount_engine import format_discount_description

logger = logging.getLogger(__name__)


class DiscountService:
    """
    Supplies validated promotion rules to the cart and catalog.

    Rule records that fail validation (e.g. buy_quantity <= 0) are skipped
    with a warning so one bad record never breaks the cart.
    """

    def __init__(self, repo: DiscountRepository):
        self.repo = repo

    def list_active_rules(self, session: Session) -> list[PromotionRule]:
        rules: list[PromotionRule] = []
        for record in self.repo.list_active(session):
            try:
                rules.append(PromotionRule.from_model(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid discount {record.id}: {e}")
        return rules

    def rules_for_product(self, session: Session, product_id: str) -> list[ProductDiscountRead]:
        """
        Active promotions covering a product, for product-card badges.
        """
        return [
            ProductDiscountRead(rule=rule, description=format_discount_description(rule))
            for rule in self.list_active_rules(session)
            if rule.active and rule.applies_to(product_id)
        ]
