# cleanup_carts.py

from sqlmodel import Session

from ccube.core.config import get_settings
from ccube.database import engine, create_db_and_tables
from ccube.repositories.cart_repo import CartRepository
from ccube.repositories.discount_repo import DiscountRepository
from ccube.repositories.product_repo import ProductRepository
from ccube.services.cart_service import CartService
from ccube.services.discount_service import DiscountService


def main():
    settings = get_settings()
    print(f"Deleting carts older than {settings.CART_EXPIRATION_MINUTES} minutes...")

    create_db_and_tables()
    service = CartService(
        CartRepository(),
        ProductRepository(),
        DiscountService(DiscountRepository()),
        tax_rate=settings.TAX_RATE,
        expiration_minutes=settings.CART_EXPIRATION_MINUTES,
    )

    with Session(engine) as session:
        deleted = service.cleanup_expired_carts(session)

    print(f"Deleted {deleted} expired cart(s).")


if __name__ == "__main__":
    main()
