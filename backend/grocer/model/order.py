import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint

from grocer.database import Base  # SQLAlchemy Base declarative base


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _OrderColumns:
    """Shared shape of `orders` and `completed_orders`."""
    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    checkout_id = Column(String(128), nullable=True)            # client idempotency token
    status = Column(String(20), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)        # frozen at checkout
    currency = Column(String(3), nullable=True)
    items = Column(JSON, nullable=False, default=list)          # [{productId, name, variationName, quantity, price}]
    delivery = Column(JSON, nullable=False, default=dict)       # recipient + destination snapshot
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)


class Order(_OrderColumns, Base):
    __tablename__ = "orders"
    __table_args__ = (UniqueConstraint("user_id", "checkout_id", name="uq_orders_checkout"),)


class CompletedOrder(_OrderColumns, Base):
    __tablename__ = "completed_orders"
    completed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (UniqueConstraint("user_id", "checkout_id", name="uq_completed_orders_checkout"),)
