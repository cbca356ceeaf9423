# grocer/services/pricing.py
"""
Variation pricing: base price + variation modifier, times quantity.
Pure functions; money is Decimal quantized to cents.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Union

from grocer.core.errors import PricingError
from grocer.schemas.product import ProductOut

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")

__all__ = ["to_money", "effective_price", "line_price", "variation_price", "CENTS"]


def to_money(value: Any) -> Decimal:
    """Coerce to a cent-quantized Decimal; floats go through str() first."""
    if isinstance(value, Decimal):
        d = value
    else:
        d = Decimal(str(value if value is not None else 0))
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def effective_price(base_price: Number, modifier: Number = 0) -> Decimal:
    price = to_money(base_price) + to_money(modifier)
    if price < 0:
        raise PricingError(f"Effective price is negative: {base_price} + {modifier}")
    return price


def line_price(base_price: Number, modifier: Number, quantity: int) -> Decimal:
    if quantity < 0:
        raise PricingError(f"Quantity must not be negative: {quantity}")
    return effective_price(base_price, modifier) * quantity


def variation_price(product: ProductOut, variation_name: str) -> Decimal:
    """Unit price of the named variation of `product`."""
    for v in product.variations:
        if v.name == variation_name:
            return effective_price(product.price, v.priceModifier)
    raise PricingError(f"Product {product.id} has no variation {variation_name!r}")
