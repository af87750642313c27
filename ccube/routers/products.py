# ccube/routers/products.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ccube.database import get_session
from ccube.repositories.discount_repo import DiscountRepository
from ccube.repositories.product_repo import ProductRepository
from ccube.schemas.discount import ProductDiscountRead
from ccube.schemas.product import ProductRead
from ccube.services.discount_service import DiscountService
from ccube.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)
discount_service = DiscountService(DiscountRepository())


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    only_active: bool = True,
):
    """
    List products.

    - `only_active=True` hides inactive products by default.
    - Prices are returned normalized (scalar or size map).
    """
    return service.list_products(
        session, skip=skip, limit=limit, only_active=only_active
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: str,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.
    """
    return service.get_product(session, product_id)


@router.get("/{product_id}/discounts", response_model=list[ProductDiscountRead])
def list_product_discounts(
    product_id: str,
    session: Session = Depends(get_session),
):
    """
    Active promotions that cover this product, with a display description
    such as "Buy 3, Get 1 Free!".
    """
    service.get_product(session, product_id)
    return discount_service.rules_for_product(session, product_id)
