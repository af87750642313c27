# ccube/repositories/cart_repo.py
from datetime import datetime

from sqlmodel import Session, select

from ccube.models.cart import Cart, CartItem


class CartRepository:

    # ---- Carts ----

    def get_cart(self, session: Session, device_id: str) -> Cart | None:
        return session.get(Cart, device_id)

    def get_or_create_cart(self, session: Session, device_id: str) -> Cart:
        cart = self.get_cart(session, device_id)
        if cart is None:
            cart = Cart(device_id=device_id)
            session.add(cart)
            session.commit()
            session.refresh(cart)
        return cart

    def save_cart(self, session: Session, cart: Cart) -> Cart:
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart

    def list_created_before(self, session: Session, cutoff: datetime) -> list[Cart]:
        stmt = select(Cart).where(Cart.created_at != None, Cart.created_at < cutoff)  # noqa: E711
        return session.exec(stmt).all()

    def delete_cart(self, session: Session, cart: Cart) -> None:
        for row in self.list_items(session, cart.device_id):
            session.delete(row)
        session.delete(cart)
        session.commit()

    # ---- Items ----

    def list_items(self, session: Session, device_id: str) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.device_id == device_id)
            .order_by(CartItem.added_at, CartItem.id)
        )
        return session.exec(stmt).all()

    def get_item(self, session: Session, device_id: str, key: str) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.device_id == device_id, CartItem.key == key
        )
        return session.exec(stmt).first()

    def create_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_items(self, session: Session, device_id: str) -> None:
        for row in self.list_items(session, device_id):
            session.delete(row)
        session.commit()
