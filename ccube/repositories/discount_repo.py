# ccube/repositories/discount_repo.py
from sqlmodel import Session, select

from ccube.models.discount import Discount


class DiscountRepository:
    """
    Read-only access to promotion rules.
    """

    def list_active(self, session: Session) -> list[Discount]:
        stmt = (
            select(Discount)
            .where(Discount.active == True)  # noqa: E712
            .order_by(Discount.created_at, Discount.id)
        )
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, discount_id: str) -> Discount | None:
        return session.get(Discount, discount_id)
