# grocer/core/deps.py
from fastapi import Depends

from grocer.config import Settings, get_settings
from grocer.database import get_db
from grocer.services.orders import OrderService


def get_order_service(db=Depends(get_db), settings: Settings = Depends(get_settings)) -> OrderService:
    return OrderService(db, currency=settings.currency)
