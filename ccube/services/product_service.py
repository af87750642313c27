# ccube/services/product_service.py
from fastapi import HTTPException, status
from sqlmodel import Session

from ccube.repositories.product_repo import ProductRepository
from ccube.schemas.product import ProductRead


class ProductService:
    """
    Read-only catalog access.

    Responsibilities:
      - 404 for unknown products
      - normalize raw catalog prices into ProductRead
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
    ) -> list[ProductRead]:
        rows = self.repo.list_products(
            session, skip=skip, limit=limit, only_active=only_active
        )
        return [ProductRead.from_model(p) for p in rows]

    def get_product(self, session: Session, product_id: str) -> ProductRead:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return ProductRead.from_model(product)
