"""
# `grocer/routers/products.py` — Catalog Endpoints

## Public

### `GET /products/`
All products, optionally filtered by `category`.

### `GET /products/{product_id}`
One product; `404` if it does not exist.

### `GET /products/{product_id}/price`
Line price for a variation + quantity. The storefront calls this whenever the
variation selection changes, so the displayed price is always recomputed.

---

## Admin (`/admin/products`, admin claim required)

### `POST /admin/products/`
Create a product. At least one variation; no variation may take the price below zero.

### `PUT /admin/products/{product_id}`
Replace a product. Orders already placed keep their own item snapshot.

### `DELETE /admin/products/{product_id}`
Delete a product.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from grocer.config import Settings, get_settings
from grocer.database import get_db
from grocer.core.auth import require_admin
from grocer.schemas.product import PriceQuote, ProductCreate, ProductOut
from grocer.services import catalog
from grocer.services.pricing import to_money, variation_price

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=List[ProductOut], summary="List Products")
def list_products(
    category: Optional[str] = Query(None, description="Category tag (optional)"),
    db=Depends(get_db),
):
    return catalog.list_products(db, category=category)


@router.get("/{product_id}", response_model=ProductOut, summary="Get Product")
def get_product(product_id: str, db=Depends(get_db)):
    return catalog.get_product(db, product_id)


@router.get("/{product_id}/price", response_model=PriceQuote, summary="Quote a line price")
def quote_price(
    product_id: str,
    variation: str = Query(..., min_length=1, description="Variation name"),
    quantity: int = Query(1, ge=1, le=10000),
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    product = catalog.get_product(db, product_id)
    unit = variation_price(product, variation)
    return PriceQuote(
        product_id=product.id,
        variation=variation,
        quantity=quantity,
        unit_price=float(unit),
        line_price=float(to_money(unit * quantity)),
        currency=settings.currency,
    )


# Admin sub-router for product management
admin_router = APIRouter(prefix="/products", tags=["Admin Products"], dependencies=[Depends(require_admin)])


@admin_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED, summary="Create Product")
def create_product(payload: ProductCreate, db=Depends(get_db)):
    return catalog.create_product(db, payload)


@admin_router.put("/{product_id}", response_model=ProductOut, summary="Replace Product")
def replace_product(product_id: str, payload: ProductCreate, db=Depends(get_db)):
    return catalog.replace_product(db, product_id, payload)


@admin_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Product")
def delete_product(product_id: str, db=Depends(get_db)):
    catalog.delete_product(db, product_id)
