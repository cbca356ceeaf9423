# grocer/client.py
"""
Storefront client: the device side of the checkout flow.

The cart never leaves the device until checkout. `checkout()` sends the cart
snapshot with a client-generated `checkout_id`; the cart is cleared only after
the server confirms the order. A failed attempt keeps the cart and the same
`checkout_id`, so resubmitting cannot create a second order.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

import requests

from grocer.schemas.cart import CartLine
from grocer.schemas.order import DeliveryChoice, OrderOut
from grocer.schemas.product import ProductOut
from grocer.services.cart_store import CartStore

logger = logging.getLogger("grocer.client")


class CheckoutFailed(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StorefrontClient:
    def __init__(
        self,
        base_url: str,
        cart: CartStore,
        *,
        id_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.cart = cart
        self.id_token = id_token
        self.session = session or requests.Session()
        self.timeout = timeout
        self._catalog: Dict[str, ProductOut] = {}
        self._pending: Optional[Tuple[str, str]] = None  # (checkout_id, cart fingerprint)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.id_token:
            headers["Authorization"] = f"Bearer {self.id_token}"
        return headers

    # ---------- catalog ----------
    def fetch_products(self, category: Optional[str] = None) -> List[ProductOut]:
        params = {"category": category} if category else None
        resp = self.session.get(
            f"{self.base_url}/products/", params=params, headers=self._headers(), timeout=self.timeout
        )
        resp.raise_for_status()
        products = [ProductOut.model_validate(p) for p in resp.json()]
        self._catalog.update({p.id: p for p in products})
        return products

    def add_to_cart(self, product_id: str, variation_name: str, quantity: int = 1):
        product = self._catalog.get(product_id)
        if product is None:
            self.fetch_products()
            product = self._catalog.get(product_id)
        if product is None:
            raise KeyError(f"Unknown product {product_id}")
        variation = next((v for v in product.variations if v.name == variation_name), None)
        if variation is None:
            raise KeyError(f"Product {product_id} has no variation {variation_name!r}")
        return self.cart.add_item(product, variation, quantity)

    # ---------- checkout ----------
    def _checkout_id(self) -> str:
        fingerprint = self.cart.serialize()
        if self._pending is None or self._pending[1] != fingerprint:
            self._pending = (uuid.uuid4().hex, fingerprint)
        return self._pending[0]

    def checkout(self, delivery: Optional[DeliveryChoice] = None) -> OrderOut:
        if len(self.cart) == 0:
            raise CheckoutFailed("Your cart is empty.")

        delivery = delivery or DeliveryChoice()
        body: Dict[str, Any] = {
            "items": [CartLine.from_item(it).model_dump() for it in self.cart.items()],
            "delivery": delivery.model_dump(mode="json"),
            "checkout_id": self._checkout_id(),
        }
        try:
            resp = self.session.post(
                f"{self.base_url}/orders/", json=body, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("Checkout request failed: %s", exc)
            raise CheckoutFailed(f"Could not reach the store: {exc}") from exc

        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise CheckoutFailed(str(detail or "There was an issue placing your order."), resp.status_code)

        order = OrderOut.model_validate(resp.json())
        self.cart.clear()
        self._pending = None
        logger.info("Order %s placed, total %s", order.id, order.totalPrice)
        return order

    def my_orders(self) -> Dict[str, List[OrderOut]]:
        resp = self.session.get(f"{self.base_url}/orders/my", headers=self._headers(), timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        return {
            "pending": [OrderOut.model_validate(o) for o in data.get("pending", [])],
            "completed": [OrderOut.model_validate(o) for o in data.get("completed", [])],
        }
