"""
# `grocer/routers/orders.py` — Order Endpoints

## Customer

### `POST /orders/`
Checkout. The body carries the device cart (`items`), the delivery choice
(`now` or a scheduled date + time) and an optional `checkout_id`.
1. The caller's profile must exist (`400` "profile not found" otherwise).
2. Empty cart → `400`.
3. The order is written with status `in progress` and a UTC creation time.
4. Re-sending the same `checkout_id` returns the same order instead of a new one.
The device clears its cart only after this call succeeds.

### `GET /orders/my`
`{"pending": [...], "completed": [...]}` for the caller, newest first.

### `GET /orders/{order_id}`
Owner or admin only.

---

## Admin (`/admin/orders`)

### `GET /admin/orders/pending` · `GET /admin/orders/completed`
Every order in the respective table, newest first.

### `POST /admin/orders/{order_id}/complete`
Moves the order to `completed_orders` with status `completed` (one transaction).
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from grocer.database import get_db
from grocer.core.auth import get_principal, require_admin, require_non_guest
from grocer.core.deps import get_order_service
from grocer.core.errors import ProfileNotFound
from grocer.schemas.order import MyOrdersOut, OrderCreate, OrderOut
from grocer.schemas.principal import Principal
from grocer.services.orders import OrderService
from grocer.services.profiles import get_profile

router = APIRouter(prefix="/orders", tags=["Orders"])
admin_router = APIRouter(prefix="/orders", tags=["Admin Orders"], dependencies=[Depends(require_admin)])


@router.post("/", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    principal: Principal = Depends(require_non_guest),
    service: OrderService = Depends(get_order_service),
    db=Depends(get_db),
):
    profile = get_profile(db, principal.uid)
    if profile is None:
        raise ProfileNotFound()

    order_id = service.place_order(
        principal.uid,
        payload.items,
        profile,
        payload.delivery,
        checkout_id=payload.checkout_id,
    )
    return service.get_order(order_id)


@router.get("/my", response_model=MyOrdersOut)
def list_my_orders(
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(get_order_service),
):
    return MyOrdersOut(
        pending=service.list_pending(user_id=principal.uid),
        completed=service.list_completed(user_id=principal.uid),
    )


@router.get("/{order_id}", response_model=OrderOut)
def get_order_detail(
    order_id: str,
    principal: Principal = Depends(get_principal),
    service: OrderService = Depends(get_order_service),
):
    """Single order (customers see their own, admins see all)."""
    order = service.get_order(order_id)
    if not principal.can_view_orders_of(order.userId):
        raise HTTPException(status_code=403, detail="Not allowed to view this order.")
    return order


@admin_router.get("/pending", response_model=List[OrderOut])
def admin_list_pending(service: OrderService = Depends(get_order_service)):
    return service.list_pending()


@admin_router.get("/completed", response_model=List[OrderOut])
def admin_list_completed(service: OrderService = Depends(get_order_service)):
    return service.list_completed()


@admin_router.post("/{order_id}/complete", response_model=OrderOut)
def admin_complete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    """Mark as done: moves the order to completed orders."""
    return service.complete_order(order_id)
