# grocer/schemas/order.py
from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Dict, FrozenSet, List, Literal, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, model_validator

from grocer.config import get_settings
from grocer.schemas.cart import CartLine


class OrderStatus(str, Enum):
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Allowed status moves. CANCELLED is declared but nothing leads into it yet.
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, nxt in TRANSITIONS.items() if not nxt)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


# Keep extra keys stored in the JSON columns (items, delivery)
class _Base(BaseModel):
    model_config = {"extra": "allow"}


class OrderItem(_Base):
    productId: str
    name: str
    variationName: Optional[str] = None
    quantity: int = Field(1, ge=1)
    price: float = Field(..., ge=0)


class DeliveryChoice(BaseModel):
    """When the customer wants the order: right away or at a scheduled slot (campus local time)."""
    mode: Literal["now", "scheduled"] = "now"
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None

    @model_validator(mode="after")
    def _check_schedule(self):
        if self.mode == "now":
            if self.scheduled_date or self.scheduled_time:
                raise ValueError("Delivery date/time only apply to scheduled delivery")
            return self
        if not self.scheduled_date or not self.scheduled_time:
            raise ValueError("Scheduled delivery needs both a date and a time")
        if self.scheduled_for <= datetime.now(timezone.utc):
            raise ValueError("Scheduled delivery must be in the future")
        return self

    @property
    def scheduled_for(self) -> Optional[datetime]:
        if self.mode != "scheduled" or not self.scheduled_date or not self.scheduled_time:
            return None
        moment = datetime.combine(self.scheduled_date, self.scheduled_time)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=ZoneInfo(get_settings().timezone))
        return moment


class DeliveryInfo(_Base):
    """Recipient + destination snapshot stored on the order."""
    username: str
    phoneNumber: str
    userType: Optional[str] = None
    university: Optional[str] = None
    hostel: Optional[str] = None
    block: Optional[str] = None
    room: Optional[str] = None
    address: Optional[str] = None
    landmark: Optional[str] = None
    township: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    mode: Literal["now", "scheduled"] = "now"
    scheduledFor: Optional[datetime] = None


class OrderCreate(BaseModel):
    """Checkout payload: the device cart plus the delivery choice."""
    items: List[CartLine] = Field(default_factory=list)
    delivery: DeliveryChoice = Field(default_factory=DeliveryChoice)
    checkout_id: Optional[str] = Field(
        None,
        min_length=8,
        max_length=128,
        description="Client-generated idempotency token; resubmitting it returns the same order.",
    )


class OrderOut(_Base):
    id: str
    userId: str
    status: OrderStatus
    totalPrice: float
    items: List[OrderItem] = Field(default_factory=list)
    delivery: Optional[DeliveryInfo] = None
    currency: Optional[str] = None
    checkoutId: Optional[str] = None
    createdAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None


class MyOrdersOut(BaseModel):
    pending: List[OrderOut] = Field(default_factory=list)
    completed: List[OrderOut] = Field(default_factory=list)
