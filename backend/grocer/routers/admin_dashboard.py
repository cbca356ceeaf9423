"""
Admin Dashboard Router
Overview numbers for the admin panel.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from grocer.core.auth import require_admin
from grocer.database import get_db
from grocer.model.order import CompletedOrder, Order
from grocer.model.product import Product
from grocer.model.user import User
from grocer.services.pricing import to_money

router = APIRouter(prefix="/dashboard", tags=["Admin Dashboard"], dependencies=[Depends(require_admin)])


@router.get("/stats")
def get_dashboard_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Counts of users, products and orders, plus revenue.
    Revenue counts completed orders only; pending value is reported separately.
    """
    pending_orders, pending_value = db.query(func.count(Order.id), func.sum(Order.total_price)).one()
    completed_orders, revenue = db.query(func.count(CompletedOrder.id), func.sum(CompletedOrder.total_price)).one()

    return {
        "total_users": db.query(func.count(User.id)).scalar() or 0,
        "total_products": db.query(func.count(Product.id)).scalar() or 0,
        "pending_orders": pending_orders or 0,
        "completed_orders": completed_orders or 0,
        "pending_value": float(to_money(pending_value or 0)),
        "revenue": float(to_money(revenue or 0)),
    }
