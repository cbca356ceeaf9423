# grocer/services/orders.py
"""
Order lifecycle: checkout snapshot -> `orders` (in progress) -> `completed_orders`.

- place_order never touches the device cart; callers clear it after success.
- Unit prices and names come from the catalog at checkout; the client's price is display-only.
- complete_order inserts the completed row and deletes the pending one in a single transaction.
- Owner filtering is pushed into the SQL query.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from grocer.core.errors import (
    EmptyCartError,
    InvalidTransition,
    OrderNotFound,
    ProductNotFound,
    UnknownOrderStatus,
    ValidationFailed,
)
from grocer.model.order import CompletedOrder, Order
from grocer.schemas.cart import CartItem, CartLine
from grocer.schemas.order import (
    DeliveryChoice,
    DeliveryInfo,
    OrderItem,
    OrderOut,
    OrderStatus,
    can_transition,
)
from grocer.schemas.product import ProductOut
from grocer.schemas.user import UserProfile
from grocer.services import catalog
from grocer.services.pricing import to_money, variation_price

logger = logging.getLogger("grocer.orders")

CartEntry = Union[CartItem, CartLine]
OrderRow = Union[Order, CompletedOrder]

__all__ = [
    "OrderService",
    "build_order_items",
    "calc_total",
    "delivery_from_profile",
    "row_to_order",
]


# ──────────────────────────────────────────────────────────────────────────────
# Pure helpers
# ──────────────────────────────────────────────────────────────────────────────

def build_order_items(cart: Iterable[CartEntry]) -> List[OrderItem]:
    """Flatten cart lines into order lines, dropping display-only fields."""
    return [
        OrderItem(
            productId=line.productId,
            name=line.name or line.productId,
            variationName=line.variationName,
            quantity=line.quantity,
            price=float(to_money(line.price)),
        )
        for line in cart
    ]


def calc_total(cart: Iterable[CartEntry]) -> Decimal:
    return sum((to_money(line.price) * line.quantity for line in cart), Decimal("0"))


def delivery_from_profile(profile: UserProfile, choice: DeliveryChoice) -> DeliveryInfo:
    """Snapshot recipient + destination; raises ValidationFailed on missing fields."""
    missing = []
    if not profile.username.strip():
        missing.append("name")
    if not profile.phoneNumber.strip():
        missing.append("phoneNumber")
    if profile.userType == "student":
        if not (profile.hostel or "").strip():
            missing.append("hostel")
    elif not (profile.address or "").strip():
        missing.append("address")
    if missing:
        raise ValidationFailed(
            f"Profile is missing required delivery fields: {', '.join(missing)}"
        )

    return DeliveryInfo(
        username=profile.username,
        phoneNumber=profile.phoneNumber,
        userType=profile.userType,
        university=profile.university,
        hostel=profile.hostel,
        block=profile.block,
        room=profile.room,
        address=profile.address,
        landmark=profile.landmark,
        township=profile.township,
        city=profile.city,
        latitude=profile.latitude,
        longitude=profile.longitude,
        mode=choice.mode,
        scheduledFor=choice.scheduled_for,
    )


def _as_status(value: Any) -> OrderStatus:
    raw = str(value or "").strip()
    # "in-progress", "In Progress" and similar spellings from older clients
    normalized = raw.lower().replace("-", " ").replace("_", " ")
    for candidate in (raw, normalized):
        try:
            return OrderStatus(candidate)
        except ValueError:
            continue
    raise UnknownOrderStatus(raw)


def row_to_order(row: OrderRow) -> OrderOut:
    return OrderOut(
        id=row.id,
        userId=row.user_id,
        status=_as_status(row.status),
        totalPrice=float(row.total_price or 0),
        items=[OrderItem.model_validate(it) for it in (row.items or [])],
        delivery=DeliveryInfo.model_validate(row.delivery) if row.delivery else None,
        currency=row.currency,
        checkoutId=row.checkout_id,
        createdAt=row.created_at,
        completedAt=getattr(row, "completed_at", None),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Service
# ──────────────────────────────────────────────────────────────────────────────

class OrderService:
    def __init__(self, db: Session, *, currency: Optional[str] = None):
        self.db = db
        self.currency = currency

    # ---------- placement ----------
    def _find_checkout(self, user_id: str, checkout_id: str) -> Optional[OrderRow]:
        for model in (Order, CompletedOrder):
            row = (
                self.db.query(model)
                .filter(model.user_id == user_id, model.checkout_id == checkout_id)
                .first()
            )
            if row is not None:
                return row
        return None

    def _price_lines(self, lines: List[CartEntry]) -> List[CartLine]:
        """Re-price every line from the catalog; unknown products or variations are rejected."""
        products: Dict[str, ProductOut] = {}
        priced = []
        for line in lines:
            product = products.get(line.productId)
            if product is None:
                try:
                    product = catalog.get_product(self.db, line.productId)
                except ProductNotFound:
                    raise ValidationFailed(f"Product {line.productId} is not available.")
                products[line.productId] = product
            unit = variation_price(product, line.variationName)
            if to_money(line.price) != unit:
                logger.warning(
                    "Cart price %s for %s/%s differs from catalog price %s; using the catalog price",
                    line.price, line.productId, line.variationName, unit,
                )
            priced.append(CartLine(
                productId=product.id,
                variationName=line.variationName,
                name=product.name or product.id,
                price=float(unit),
                quantity=line.quantity,
            ))
        return priced

    def place_order(
        self,
        user_id: str,
        cart: Iterable[CartEntry],
        profile: UserProfile,
        delivery: Optional[DeliveryChoice] = None,
        *,
        checkout_id: Optional[str] = None,
    ) -> str:
        """Persist an in-progress order built from `cart` and return its id."""
        lines = list(cart)
        if not lines:
            raise EmptyCartError()
        delivery = delivery or DeliveryChoice()
        info = delivery_from_profile(profile, delivery)

        if checkout_id:
            existing = self._find_checkout(user_id, checkout_id)
            if existing is not None:
                logger.info("Duplicate checkout %s for %s collapsed into %s", checkout_id, user_id, existing.id)
                return existing.id

        lines = self._price_lines(lines)
        items = build_order_items(lines)
        total = calc_total(lines)

        row = Order(
            user_id=user_id,
            checkout_id=checkout_id or None,
            status=OrderStatus.IN_PROGRESS.value,
            total_price=total,
            currency=self.currency,
            items=[it.model_dump() for it in items],
            delivery=info.model_dump(mode="json"),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if not checkout_id:
                raise
            # a concurrent request with the same token won the insert
            existing = self._find_checkout(user_id, checkout_id)
            if existing is None:
                raise
            logger.info("Duplicate checkout %s for %s collapsed into %s", checkout_id, user_id, existing.id)
            return existing.id

        logger.info("Order %s placed by %s: %d lines, total %s", row.id, user_id, len(items), total)
        return row.id

    # ---------- reads ----------
    def get_order(self, order_id: str) -> OrderOut:
        for model in (Order, CompletedOrder):
            row = self.db.get(model, order_id)
            if row is not None:
                return row_to_order(row)
        raise OrderNotFound(order_id)

    def _list(self, model: Type[OrderRow], user_id: Optional[str]) -> List[OrderOut]:
        q = self.db.query(model)
        if user_id:
            q = q.filter(model.user_id == user_id)
        orders = []
        for row in q.order_by(model.created_at.desc(), model.id).all():
            try:
                orders.append(row_to_order(row))
            except UnknownOrderStatus as exc:
                logger.error("Skipping order %s in %s: %s", row.id, model.__tablename__, exc.message)
        return orders

    def list_pending(self, user_id: Optional[str] = None) -> List[OrderOut]:
        return self._list(Order, user_id)

    def list_completed(self, user_id: Optional[str] = None) -> List[OrderOut]:
        return self._list(CompletedOrder, user_id)

    # ---------- transitions ----------
    def complete_order(self, order_id: str) -> OrderOut:
        """Move an in-progress order to `completed_orders` in one transaction."""
        src = (
            self.db.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .first()
        )
        if src is None:
            if self.db.get(CompletedOrder, order_id) is not None:
                raise InvalidTransition(f"Order {order_id} is already completed.")
            raise OrderNotFound(order_id)

        try:
            current = _as_status(src.status)
        except UnknownOrderStatus:
            self.db.rollback()
            raise
        if not can_transition(current, OrderStatus.COMPLETED):
            self.db.rollback()
            raise InvalidTransition(
                f"Order {order_id} cannot move from {current.value!r} to 'completed'."
            )

        dst = CompletedOrder(
            id=src.id,
            user_id=src.user_id,
            checkout_id=src.checkout_id,
            status=OrderStatus.COMPLETED.value,
            total_price=src.total_price,
            currency=src.currency,
            items=list(src.items or []),
            delivery=dict(src.delivery or {}),
            created_at=src.created_at,
            completed_at=datetime.now(timezone.utc),
        )
        try:
            self.db.add(dst)
            self.db.delete(src)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidTransition(f"Order {order_id} is already completed.")
        self.db.refresh(dst)
        logger.info("Order %s completed", order_id)
        return row_to_order(dst)

    def cancel_order(self, order_id: str) -> OrderOut:
        # No flow leads into CANCELLED yet; the rule for who may cancel, and when, is undecided.
        raise InvalidTransition(f"Cancelling orders is not supported (order {order_id}).")
