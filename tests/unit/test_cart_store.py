import json
import logging
from decimal import Decimal

import pytest

from grocer.services.cart_store import CartStore, JsonFileCartStorage, MemoryCartStorage, STORAGE_KEY


def _variation(product, name):
    return next(v for v in product.variations if v.name == name)


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def cart(storage):
    return CartStore(storage)


class TestAddItem:
    def test_new_line_uses_effective_price(self, cart, mealie_meal):
        item = cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)

        assert item.key == ("7", "25kg")
        assert item.price == Decimal("160.00")
        assert item.quantity == 2
        assert item.name == "Breakfast Mealie Meal"
        assert len(cart) == 1

    @pytest.mark.parametrize("quantities", [[1], [2, 3], [1, 1, 1, 1], [5, 2, 7]])
    def test_same_key_accumulates(self, cart, mealie_meal, quantities):
        variation = _variation(mealie_meal, "25kg")
        for q in quantities:
            cart.add_item(mealie_meal, variation, q)

        assert len(cart) == 1
        assert cart.get(("7", "25kg")).quantity == sum(quantities)

    def test_variations_are_separate_lines(self, cart, mealie_meal):
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 1)
        cart.add_item(mealie_meal, _variation(mealie_meal, "10kg"), 1)

        assert len(cart) == 2
        assert ("7", "10kg") in cart

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_is_ignored(self, cart, storage, mealie_meal, quantity):
        assert cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), quantity) is None
        assert len(cart) == 0
        assert storage.load(STORAGE_KEY) is None

    def test_clamps_to_line_cap(self, storage, mealie_meal, caplog):
        cart = CartStore(storage, max_line_quantity=5)
        variation = _variation(mealie_meal, "25kg")
        cart.add_item(mealie_meal, variation, 4)

        with caplog.at_level(logging.INFO, logger="grocer.cart"):
            cart.add_item(mealie_meal, variation, 4)

        assert cart.get(("7", "25kg")).quantity == 5
        assert "clamped" in caplog.text


class TestRemoveAndSetQuantity:
    def test_remove_present_and_absent(self, cart, mealie_meal):
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 1)

        cart.remove_item(("7", "25kg"))
        cart.remove_item(("7", "25kg"))

        assert len(cart) == 0

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_set_below_one_equals_remove(self, mealie_meal, cooking_oil, quantity):
        a = CartStore(MemoryCartStorage())
        b = CartStore(MemoryCartStorage())
        for store in (a, b):
            store.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)
            store.add_item(cooking_oil, _variation(cooking_oil, "2L"), 1)

        a.set_quantity(("7", "25kg"), quantity)
        b.remove_item(("7", "25kg"))
        a.set_quantity(("missing", "x"), quantity)
        b.remove_item(("missing", "x"))

        assert a.serialize() == b.serialize()

    def test_set_overwrites_in_place(self, cart, mealie_meal):
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)
        cart.set_quantity(("7", "25kg"), 7)

        assert cart.get(("7", "25kg")).quantity == 7

    def test_set_on_absent_key_does_nothing(self, cart):
        cart.set_quantity(("7", "25kg"), 3)
        assert len(cart) == 0

    def test_set_clamps(self, mealie_meal):
        cart = CartStore(max_line_quantity=10)
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 1)
        cart.set_quantity(("7", "25kg"), 500)

        assert cart.get(("7", "25kg")).quantity == 10


class TestTotal:
    def test_matches_reference_across_mutations(self, cart, mealie_meal, cooking_oil):
        bag, small = _variation(mealie_meal, "25kg"), _variation(mealie_meal, "10kg")
        oil = _variation(cooking_oil, "2L")

        steps = [
            lambda: cart.add_item(mealie_meal, bag, 2),
            lambda: cart.add_item(cooking_oil, oil, 3),
            lambda: cart.add_item(mealie_meal, small, 1),
            lambda: cart.set_quantity(("12", "2L"), 1),
            lambda: cart.add_item(mealie_meal, bag, 4),
            lambda: cart.remove_item(("7", "10kg")),
            lambda: cart.set_quantity(("7", "25kg"), 0),
            lambda: cart.add_item(mealie_meal, small, 2),
        ]
        for step in steps:
            step()
            expected = sum((it.price * it.quantity for it in cart.items()), Decimal("0"))
            assert cart.total() == expected

        assert cart.total() == Decimal("110.49") + Decimal("169.00")

    def test_empty_cart(self, cart):
        assert cart.total() == Decimal("0")
        assert cart.item_count() == 0


class TestScenario:
    def test_add_accumulate_then_zero(self, cart, mealie_meal):
        key = ("7", "25kg")
        variation = _variation(mealie_meal, "25kg")

        cart.add_item(mealie_meal, variation, 2)
        assert cart.total() == Decimal("320.00")

        cart.add_item(mealie_meal, variation, 1)
        assert cart.get(key).quantity == 3
        assert cart.total() == Decimal("480.00")

        cart.set_quantity(key, 0)
        assert len(cart) == 0


class TestPersistence:
    def test_every_mutation_is_saved(self, cart, storage, mealie_meal):
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)
        saved = json.loads(storage.load(STORAGE_KEY))
        assert saved[0]["productId"] == "7"
        assert saved[0]["quantity"] == 2

        cart.clear()
        assert json.loads(storage.load(STORAGE_KEY)) == []

    def test_loaded_once_at_construction(self, storage, mealie_meal):
        first = CartStore(storage)
        first.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)

        second = CartStore(storage)

        assert second.items() == first.items()
        assert second.total() == Decimal("320.00")

    def test_serialize_clear_restore_round_trip(self, cart, mealie_meal, cooking_oil):
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)
        cart.add_item(cooking_oil, _variation(cooking_oil, "750ml"), 1)
        before = cart.snapshot()
        raw = cart.serialize()

        cart.clear()
        cart.restore(raw)

        assert cart.items() == before

    def test_snapshot_is_detached(self, cart, mealie_meal):
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 2)
        snap = cart.snapshot()
        cart.set_quantity(("7", "25kg"), 9)

        assert snap[0].quantity == 2

    @pytest.mark.parametrize("raw", ["{not json", '{"productId": "7"}', '[{"productId": "7"}]', "[1, 2]"])
    def test_corrupt_data_means_empty_cart(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger="grocer.cart"):
            cart = CartStore(MemoryCartStorage({STORAGE_KEY: raw}))

        assert len(cart) == 0
        assert "Discarding unreadable stored cart" in caplog.text

    def test_restore_rejects_garbage(self, cart):
        with pytest.raises(ValueError):
            cart.restore("garbage")

    def test_failed_save_keeps_memory_state(self, mealie_meal, caplog):
        class BrokenStorage(MemoryCartStorage):
            def save(self, key, value):
                raise OSError("disk full")

        cart = CartStore(BrokenStorage())
        with caplog.at_level(logging.ERROR, logger="grocer.cart"):
            cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 1)

        assert len(cart) == 1
        assert "Failed to save cart" in caplog.text


class TestJsonFileStorage:
    def test_survives_restart(self, tmp_path, mealie_meal):
        path = tmp_path / "device" / "storage.json"
        cart = CartStore(JsonFileCartStorage(path))
        cart.add_item(mealie_meal, _variation(mealie_meal, "25kg"), 3)

        reopened = CartStore(JsonFileCartStorage(path))

        assert reopened.get(("7", "25kg")).quantity == 3
        assert list(tmp_path.joinpath("device").glob(".cart-*")) == []

    def test_keeps_other_keys(self, tmp_path, mealie_meal):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        CartStore(JsonFileCartStorage(path)).add_item(mealie_meal, _variation(mealie_meal, "25kg"), 1)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["theme"] == "dark"
        assert STORAGE_KEY in data

    def test_corrupt_file_means_empty_cart(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("not json at all", encoding="utf-8")

        assert len(CartStore(JsonFileCartStorage(path))) == 0
