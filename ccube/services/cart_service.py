# ccube/services/cart_service.py
import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from ccube.core.pricing import PriceResolver, resolve_unit_price
from ccube.models.cart import Cart, CartItem
from ccube.repositories.cart_repo import CartRepository
from ccube.repositories.product_repo import ProductRepository
from ccube.schemas.cart import (
    DEFAULT_SIZE,
    DEFAULT_VARIANT,
    CartExpiration,
    CartItemCreate,
    CartItemUpdate,
    CartLineItem,
    CartLineRead,
)
from ccube.schemas.cart_summary import CartSummary
from ccube.schemas.product import ProductRead
from ccube.services.cart_totals import compose_totals
from ccube.services.discount_engine import eligibility_progress, select_best_discount
from ccube.services.discount_service import DiscountService

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_item_key(product_id: str, size: str, color: str, scent: str = DEFAULT_VARIANT) -> str:
    """
    Unique line key: product id + selected variant.
    Scent is only part of the key when one was chosen.
    """
    key = f"{product_id}-{size}-{color}"
    if scent != DEFAULT_VARIANT:
        key = f"{key}-{scent}"
    return key


def format_time_remaining(seconds: int) -> str:
    if seconds <= 0:
        return "Expired"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m remaining"
    return f"{minutes}m remaining"


class CartService:
    """
    Business logic for device carts.

    Responsibilities:
      - validate product existence and active flag on add
      - merge lines with the same product + variant
      - expire carts older than the expiration window
      - recompute promotion, totals and upsell hints on every read
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        discount_service: DiscountService,
        *,
        tax_rate: float,
        expiration_minutes: int,
        price_resolver: PriceResolver = resolve_unit_price,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.discount_service = discount_service
        self.tax_rate = tax_rate
        self.expiration = timedelta(minutes=expiration_minutes)
        self.price_resolver = price_resolver

    # ---- internal helpers ----

    def _get_valid_product(self, session: Session, product_id: str):
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is inactive",
            )
        return product

    def _is_expired(self, cart: Cart, now: datetime) -> bool:
        if cart.created_at is None:
            return False
        return now - _as_utc(cart.created_at) > self.expiration

    def _expire_if_needed(self, session: Session, cart: Cart) -> None:
        if not self._is_expired(cart, _now()):
            return

        logger.info(f"Cart for device {cart.device_id} expired, clearing")
        self.cart_repo.clear_items(session, cart.device_id)
        cart.created_at = None
        cart.updated_at = _now()
        self.cart_repo.save_cart(session, cart)

    def _expire_stale_cart(self, session: Session, device_id: str) -> None:
        cart = self.cart_repo.get_cart(session, device_id)
        if cart is not None:
            self._expire_if_needed(session, cart)

    def _touch(self, session: Session, cart: Cart) -> None:
        cart.updated_at = _now()
        self.cart_repo.save_cart(session, cart)

    def _require_item(self, session: Session, device_id: str, item_key: str) -> CartItem:
        item = self.cart_repo.get_item(session, device_id, item_key)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )
        return item

    def _line_items(self, session: Session, rows: list[CartItem]) -> list[CartLineItem]:
        products = self.product_repo.get_many(
            session, list({row.product_id for row in rows})
        )

        lines: list[CartLineItem] = []
        for row in rows:
            product = products.get(row.product_id)
            if product is None:
                logger.warning(
                    f"Cart line {row.key} references missing product {row.product_id}, skipping"
                )
                continue
            lines.append(
                CartLineItem(
                    key=row.key,
                    product=ProductRead.from_model(product),
                    quantity=row.quantity,
                    selected_size=row.selected_size,
                    selected_color=row.selected_color,
                    selected_scent=row.selected_scent,
                )
            )
        return lines

    def _expiration_info(self, cart: Cart | None) -> CartExpiration | None:
        if cart is None or cart.created_at is None:
            return None

        created_at = _as_utc(cart.created_at)
        expires_at = created_at + self.expiration
        seconds_remaining = max(0, int((expires_at - _now()).total_seconds()))
        return CartExpiration(
            created_at=created_at,
            expires_at=expires_at,
            seconds_remaining=seconds_remaining,
            label=format_time_remaining(seconds_remaining),
        )

    # ---- public operations ----

    def get_cart_summary(self, session: Session, device_id: str) -> CartSummary:
        """
        Return full cart summary:
          - lines with unit price and line_total
          - the single best promotion (if any)
          - totals after discount and tax
          - upsell hints for every promotion touching the cart
        """
        cart = self.cart_repo.get_cart(session, device_id)
        if cart is not None:
            self._expire_if_needed(session, cart)

        rows = self.cart_repo.list_items(session, device_id) if cart else []
        lines = self._line_items(session, rows)
        rules = self.discount_service.list_active_rules(session) if lines else []

        discounts = select_best_discount(lines, rules, self.price_resolver)
        eligibility = eligibility_progress(lines, rules, self.price_resolver)
        totals = compose_totals(lines, self.price_resolver, discounts, self.tax_rate)

        item_reads: list[CartLineRead] = []
        for line in lines:
            unit_price = self.price_resolver(line.product, line.selected_size)
            item_reads.append(
                CartLineRead(
                    key=line.key,
                    product_id=line.product.id,
                    product_name=line.product.name,
                    quantity=line.quantity,
                    selected_size=line.selected_size,
                    selected_color=line.selected_color,
                    selected_scent=line.selected_scent,
                    unit_price=unit_price,
                    line_total=unit_price * line.quantity,
                )
            )

        return CartSummary(
            device_id=device_id,
            items=item_reads,
            item_count=sum(line.quantity for line in lines),
            totals=totals,
            discounts=discounts,
            eligibility=eligibility,
            expiration=self._expiration_info(cart),
        )

    def add_item(
        self,
        session: Session,
        device_id: str,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the device's cart.

        Rules:
          - product must exist and be active
          - unset variant selections default to the product's first option
          - an existing line with the same key has its quantity increased
        """
        product = self._get_valid_product(session, payload.product_id)
        read = ProductRead.from_model(product)

        size = payload.selected_size or (read.sizes[0] if read.sizes else DEFAULT_SIZE)
        color = payload.selected_color or (read.colors[0] if read.colors else DEFAULT_VARIANT)
        scent = payload.selected_scent or (read.scents[0] if read.scents else DEFAULT_VARIANT)
        key = build_item_key(product.id, size, color, scent)

        cart = self.cart_repo.get_or_create_cart(session, device_id)
        self._expire_if_needed(session, cart)

        existing = self.cart_repo.get_item(session, device_id, key)
        if existing:
            existing.quantity += payload.quantity
            self.cart_repo.update_item(session, existing)
        else:
            self.cart_repo.create_item(
                session,
                CartItem(
                    device_id=device_id,
                    key=key,
                    product_id=product.id,
                    quantity=payload.quantity,
                    selected_size=size,
                    selected_color=color,
                    selected_scent=scent,
                ),
            )

        # The expiration clock starts with the first item
        if cart.created_at is None:
            cart.created_at = _now()
        self._touch(session, cart)

        return self.get_cart_summary(session, device_id)

    def update_quantity(
        self,
        session: Session,
        device_id: str,
        item_key: str,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Set the quantity of a cart line. Zero or less removes the line.
        """
        self._expire_stale_cart(session, device_id)
        item = self._require_item(session, device_id, item_key)

        if payload.quantity <= 0:
            self.cart_repo.delete_item(session, item)
        else:
            item.quantity = payload.quantity
            self.cart_repo.update_item(session, item)

        self._touch(session, self.cart_repo.get_or_create_cart(session, device_id))
        return self.get_cart_summary(session, device_id)

    def remove_item(
        self,
        session: Session,
        device_id: str,
        item_key: str,
    ) -> CartSummary:
        """
        Remove a line from the cart and return updated summary.
        """
        self._expire_stale_cart(session, device_id)
        item = self._require_item(session, device_id, item_key)
        self.cart_repo.delete_item(session, item)

        self._touch(session, self.cart_repo.get_or_create_cart(session, device_id))
        return self.get_cart_summary(session, device_id)

    def clear_cart(
        self,
        session: Session,
        device_id: str,
    ) -> CartSummary:
        """
        Clear all items from the cart and return an empty summary.
        """
        cart = self.cart_repo.get_cart(session, device_id)
        if cart is not None:
            self.cart_repo.clear_items(session, device_id)
            cart.created_at = None
            self._touch(session, cart)
        return self.get_cart_summary(session, device_id)

    def cleanup_expired_carts(self, session: Session) -> int:
        """
        Delete every cart older than the expiration window.

        Returns:
            Number of carts deleted.
        """
        cutoff = _now() - self.expiration
        expired = self.cart_repo.list_created_before(session, cutoff)
        for cart in expired:
            device_id = cart.device_id
            self.cart_repo.delete_cart(session, cart)
            logger.info(f"Deleted expired cart: {device_id}")
        return len(expired)
