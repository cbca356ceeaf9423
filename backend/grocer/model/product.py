import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Numeric, String, Text

from grocer.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(200), nullable=False)
    image = Column(String(1000), nullable=False, default="")
    image_alt = Column(String(300), nullable=False, default="")
    short_description = Column(String(500), nullable=False, default="")
    full_description = Column(Text, nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False)          # base price
    category = Column(String(100), nullable=False, default="", index=True)
    data_ai_hint = Column(String(200), nullable=False, default="")
    variations = Column(JSON, nullable=False, default=list)  # ordered [{name, priceModifier}]
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
