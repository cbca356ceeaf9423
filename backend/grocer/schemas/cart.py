"""
grocer/schemas/cart.py - Pydantic models for Cart lines.
"""
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, Field

CartKey = Tuple[str, str]  # (productId, variationName)


class CartItem(BaseModel):
    productId: str = Field(..., min_length=1, description="ID of the product")
    variationName: str = Field(..., min_length=1, description="Selected variation")
    price: Decimal = Field(..., ge=0, description="Effective unit price at the time of adding to cart")
    quantity: int = Field(..., ge=1, description="Quantity of this variation in the cart")

    # denormalized for rendering
    name: str = ""
    image: Optional[str] = None
    imageAlt: Optional[str] = None
    category: Optional[str] = None

    @property
    def key(self) -> CartKey:
        return (self.productId, self.variationName)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class CartLine(BaseModel):
    """Cart line as sent to checkout (display fields dropped)."""
    productId: str = Field(..., min_length=1)
    variationName: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)

    @classmethod
    def from_item(cls, item: CartItem) -> "CartLine":
        return cls(
            productId=item.productId,
            variationName=item.variationName,
            name=item.name or item.productId,
            price=float(item.price),
            quantity=item.quantity,
        )
