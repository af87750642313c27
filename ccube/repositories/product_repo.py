# ccube/repositories/product_repo.py
from sqlmodel import Session, select

from ccube.models.product import Product


class ProductRepository:
    """
    Data access layer for the product catalog.

    - Read-only: the catalog is written by an external ingestion job.
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: str) -> Product | None:
        return session.get(Product, product_id)

    def get_many(self, session: Session, product_ids: list[str]) -> dict[str, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
    ) -> list[Product]:
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        stmt = stmt.order_by(Product.id).offset(skip).limit(limit)
        return session.exec(stmt).all()
