from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from grocer.client import CheckoutFailed, StorefrontClient
from grocer.services.cart_store import CartStore, MemoryCartStorage

PRODUCTS = [
    {
        "id": "7",
        "name": "Breakfast Mealie Meal",
        "price": 180.0,
        "category": "Staples",
        "variations": [{"name": "25kg", "priceModifier": -20.0}],
    },
    {
        "id": "12",
        "name": "Sunflower Cooking Oil",
        "price": 45.99,
        "category": "Pantry",
        "variations": [{"name": "750ml", "priceModifier": 0}, {"name": "2L", "priceModifier": 64.5}],
    },
]


def _response(status, payload=None, text=""):
    resp = Mock(status_code=status, text=text)
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(str(status))
    return resp


def _order(body, order_id="ord-1"):
    total = sum(line["price"] * line["quantity"] for line in body["items"])
    return {
        "id": order_id,
        "userId": "uid-student",
        "status": "in progress",
        "totalPrice": round(total, 2),
        "items": [{k: line[k] for k in ("productId", "name", "variationName", "quantity", "price")}
                  for line in body["items"]],
        "checkoutId": body["checkout_id"],
        "createdAt": datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc).isoformat(),
    }


@pytest.fixture
def session():
    s = Mock(spec=requests.Session)
    s.get.return_value = _response(200, PRODUCTS)
    return s


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def shop(session, storage):
    return StorefrontClient("http://shop.test/", CartStore(storage), id_token="tok", session=session)


class TestCatalogAndCart:
    def test_fetch_products_sends_token(self, shop, session):
        products = shop.fetch_products(category="Staples")

        assert [p.id for p in products] == ["7", "12"]
        args, kwargs = session.get.call_args
        assert args[0] == "http://shop.test/products/"
        assert kwargs["params"] == {"category": "Staples"}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_add_to_cart_fetches_unknown_products(self, shop, session):
        item = shop.add_to_cart("12", "2L", 2)

        assert item.price == Decimal("110.49")
        assert shop.cart.total() == Decimal("220.98")
        session.get.assert_called_once()

    def test_unknown_variation(self, shop):
        with pytest.raises(KeyError):
            shop.add_to_cart("7", "50kg")

    def test_unknown_product(self, shop):
        with pytest.raises(KeyError):
            shop.add_to_cart("99", "25kg")


class TestCheckout:
    def test_success_clears_cart(self, shop, session, storage):
        shop.add_to_cart("7", "25kg", 3)
        session.post.side_effect = lambda url, json, **kw: _response(201, _order(json))

        order = shop.checkout()

        assert order.totalPrice == 480.0
        assert len(shop.cart) == 0
        assert storage.load("cart") == "[]"
        body = session.post.call_args.kwargs["json"]
        assert body["delivery"] == {"mode": "now", "scheduled_date": None, "scheduled_time": None}
        assert body["items"] == [
            {"productId": "7", "variationName": "25kg", "name": "Breakfast Mealie Meal", "price": 160.0, "quantity": 3}
        ]

    def test_failure_keeps_cart_and_checkout_id(self, shop, session):
        shop.add_to_cart("7", "25kg", 1)
        session.post.side_effect = [
            _response(503, {"detail": "Storage is temporarily unavailable. Please try again."}),
            requests.ConnectionError("timeout"),
        ]

        with pytest.raises(CheckoutFailed) as exc_info:
            shop.checkout()
        assert exc_info.value.status_code == 503
        with pytest.raises(CheckoutFailed, match="Could not reach the store"):
            shop.checkout()

        assert len(shop.cart) == 1
        first, second = (c.kwargs["json"]["checkout_id"] for c in session.post.call_args_list)
        assert first == second

    def test_changed_cart_gets_new_checkout_id(self, shop, session):
        shop.add_to_cart("7", "25kg", 1)
        session.post.return_value = _response(500, None, text="boom")
        with pytest.raises(CheckoutFailed, match="boom"):
            shop.checkout()

        shop.add_to_cart("12", "750ml", 1)
        with pytest.raises(CheckoutFailed):
            shop.checkout()

        first, second = (c.kwargs["json"]["checkout_id"] for c in session.post.call_args_list)
        assert first != second

    def test_new_attempt_after_success(self, shop, session):
        session.post.side_effect = lambda url, json, **kw: _response(201, _order(json))
        shop.add_to_cart("7", "25kg", 1)
        shop.checkout()
        shop.add_to_cart("7", "25kg", 1)
        shop.checkout()

        first, second = (c.kwargs["json"]["checkout_id"] for c in session.post.call_args_list)
        assert first != second

    def test_empty_cart_never_posts(self, shop, session):
        with pytest.raises(CheckoutFailed, match="empty"):
            shop.checkout()
        session.post.assert_not_called()


class TestMyOrders:
    def test_splits_pending_and_completed(self, shop, session):
        body = {"items": [{"productId": "7", "name": "Meal", "variationName": "25kg", "quantity": 1, "price": 160.0}],
                "checkout_id": None}
        done = {**_order(body, "ord-2"), "status": "completed"}
        session.get.return_value = _response(200, {"pending": [_order(body)], "completed": [done]})

        orders = shop.my_orders()

        assert [o.id for o in orders["pending"]] == ["ord-1"]
        assert orders["completed"][0].status.value == "completed"
        assert session.get.call_args.args[0] == "http://shop.test/orders/my"
