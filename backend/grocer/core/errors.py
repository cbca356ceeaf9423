"""
grocer/core/errors.py
Domain exceptions raised by services; routers translate them into HTTP responses.
"""
from typing import Optional


class GrocerError(Exception):
    """Base class for storefront domain errors."""
    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(GrocerError):
    status_code = 422


class EmptyCartError(ValidationFailed):
    status_code = 400

    def __init__(self, message: str = "Cart is empty. Add some products first."):
        super().__init__(message)


class ProfileNotFound(GrocerError):
    status_code = 400

    def __init__(self, message: str = "User profile not found. Please complete your profile."):
        super().__init__(message)


class OrderNotFound(GrocerError):
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found.")
        self.order_id = order_id


class ProductNotFound(GrocerError):
    status_code = 404

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found.")
        self.product_id = product_id


class InvalidTransition(GrocerError):
    status_code = 409


class PricingError(ValidationFailed):
    pass


class GeocodingError(GrocerError):
    status_code = 502


class UnknownOrderStatus(GrocerError):
    """A stored order carries a status value this service does not know."""
    status_code = 409

    def __init__(self, value: str):
        super().__init__(f"Unrecognized order status {value!r}.")
        self.value = value
