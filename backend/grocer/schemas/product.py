"""
# `grocer/schemas/product.py` — Product Schemas

## Overview
Pydantic models for catalog products and their priced variations.
Rows of the `products` table map onto these camelCase field names.

---

## `Variation`
| Field         | Type    | Required | Notes |
|---------------|---------|----------|-------|
| name          | `str`   | ✔        | e.g. "25kg Bag" |
| priceModifier | `float` | ✖        | Signed amount added to the base price |

---

## `ProductBase` / `ProductCreate`
| Field            | Type              | Required | Notes |
|------------------|-------------------|----------|-------|
| name             | `str`             | ✔        | Display name |
| image            | `str` (URL)       | ✔        | Image URL |
| imageAlt         | `str`             | ✔        | Alt text |
| shortDescription | `str`             | ✔        | Card text |
| fullDescription  | `str`             | ✔        | Detail text |
| price            | `float`           | ✔        | Base price (> 0) |
| category         | `str`             | ✔        | Category tag |
| dataAiHint       | `str`             | ✔        | Image search hint |
| variations       | `list[Variation]` | ✔        | At least one |

Every variation must keep `price + priceModifier >= 0`.

---

## `ProductOut`
`ProductBase` plus the row `id`.
"""
from typing import List

from pydantic import BaseModel, Field, HttpUrl, model_validator


class Variation(BaseModel):
    name: str = Field(..., min_length=1, description="Variation name, e.g. '25kg Bag'")
    priceModifier: float = Field(0.0, description="Signed amount added to the base price")


class ProductBase(BaseModel):
    """Common product fields for creation/update."""
    name: str = Field(..., min_length=1, description="Product name")
    image: HttpUrl = Field(..., description="Image URL")
    imageAlt: str = Field(..., min_length=1, description="Image alt text")
    shortDescription: str = Field(..., min_length=1)
    fullDescription: str = Field(..., min_length=1)
    price: float = Field(..., gt=0, description="Base price")
    category: str = Field(..., min_length=1)
    dataAiHint: str = Field(..., min_length=1, description="Hint for image search")
    variations: List[Variation] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _variations_keep_price_non_negative(self):
        seen = set()
        for v in self.variations:
            if v.name in seen:
                raise ValueError(f"Duplicate variation name: {v.name!r}")
            seen.add(v.name)
            if self.price + v.priceModifier < 0:
                raise ValueError(
                    f"Variation {v.name!r} makes the price negative "
                    f"({self.price} + {v.priceModifier})"
                )
        return self


class ProductCreate(ProductBase):
    pass


class ProductOut(BaseModel):
    id: str
    name: str
    image: str = ""
    imageAlt: str = ""
    shortDescription: str = ""
    fullDescription: str = ""
    price: float
    category: str = ""
    dataAiHint: str = ""
    variations: List[Variation] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class PriceQuote(BaseModel):
    product_id: str
    variation: str
    quantity: int
    unit_price: float
    line_price: float
    currency: str
