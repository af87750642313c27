# ccube/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ccube.core.config import get_settings
from ccube.core.device import require_device_id
from ccube.database import get_session
from ccube.repositories.cart_repo import CartRepository
from ccube.repositories.discount_repo import DiscountRepository
from ccube.repositories.product_repo import ProductRepository
from ccube.schemas.cart import CartItemCreate, CartItemUpdate
from ccube.schemas.cart_summary import CartSummary
from ccube.services.cart_service import CartService
from ccube.services.discount_service import DiscountService

settings = get_settings()

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
discount_service = DiscountService(DiscountRepository())
service = CartService(
    cart_repo,
    product_repo,
    discount_service,
    tax_rate=settings.TAX_RATE,
    expiration_minutes=settings.CART_EXPIRATION_MINUTES,
)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    device_id: str = Depends(require_device_id),
):
    """
    Get the device's cart summary, including the applied promotion,
    totals with tax and upsell hints.
    """
    return service.get_cart_summary(session, device_id)


@router.post("/items", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    device_id: str = Depends(require_device_id),
):
    """
    Add product to the device's cart.

    Returns the updated cart summary.
    """
    return service.add_item(session, device_id, payload)


@router.patch("/items/{item_key}", response_model=CartSummary)
def update_cart_item(
    item_key: str,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    device_id: str = Depends(require_device_id),
):
    """
    Update quantity of a cart line; 0 or less removes it.

    Returns the updated cart summary.
    """
    return service.update_quantity(
        session=session,
        device_id=device_id,
        item_key=item_key,
        payload=payload,
    )


@router.delete("/items/{item_key}", response_model=CartSummary)
def remove_cart_item(
    item_key: str,
    session: Session = Depends(get_session),
    device_id: str = Depends(require_device_id),
):
    """
    Remove a line from the cart.

    Returns the updated cart summary.
    """
    return service.remove_item(session, device_id, item_key)


@router.delete("", response_model=CartSummary)
def clear_cart(
    session: Session = Depends(get_session),
    device_id: str = Depends(require_device_id),
):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    return service.clear_cart(session, device_id)
