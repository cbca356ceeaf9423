# grocer/services/catalog.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from grocer.core.errors import ProductNotFound
from grocer.model.product import Product
from grocer.schemas.product import ProductCreate, ProductOut, Variation

logger = logging.getLogger("grocer.catalog")


def row_to_product(row: Product) -> ProductOut:
    return ProductOut(
        id=row.id,
        name=row.name or "",
        image=row.image or "",
        imageAlt=row.image_alt or "",
        shortDescription=row.short_description or "",
        fullDescription=row.full_description or "",
        price=float(row.price or 0),
        category=row.category or "",
        dataAiHint=row.data_ai_hint or "",
        variations=[Variation.model_validate(v) for v in (row.variations or [])],
    )


def list_products(db: Session, category: Optional[str] = None) -> List[ProductOut]:
    q = db.query(Product)
    if category:
        q = q.filter(Product.category == category)
    return [row_to_product(p) for p in q.order_by(Product.created_at, Product.id).all()]


def _get_row(db: Session, product_id: str) -> Product:
    row = db.query(Product).filter(Product.id == product_id).first()
    if not row:
        raise ProductNotFound(product_id)
    return row


def get_product(db: Session, product_id: str) -> ProductOut:
    return row_to_product(_get_row(db, product_id))


def _apply(row: Product, payload: ProductCreate) -> None:
    row.name = payload.name
    row.image = str(payload.image)
    row.image_alt = payload.imageAlt
    row.short_description = payload.shortDescription
    row.full_description = payload.fullDescription
    row.price = Decimal(str(payload.price))
    row.category = payload.category
    row.data_ai_hint = payload.dataAiHint
    row.variations = [v.model_dump() for v in payload.variations]


def create_product(db: Session, payload: ProductCreate, *, product_id: Optional[str] = None) -> ProductOut:
    row = Product(id=product_id) if product_id else Product()
    _apply(row, payload)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Product %s (%s) added", row.id, payload.name)
    return row_to_product(row)


def replace_product(db: Session, product_id: str, payload: ProductCreate) -> ProductOut:
    """Overwrite an existing product; existing orders keep their own snapshot."""
    row = _get_row(db, product_id)
    _apply(row, payload)
    db.commit()
    db.refresh(row)
    logger.info("Product %s updated", product_id)
    return row_to_product(row)


def delete_product(db: Session, product_id: str) -> None:
    row = _get_row(db, product_id)
    db.delete(row)
    db.commit()
    logger.info("Product %s deleted", product_id)
