# grocer/services/cart_store.py
"""
Device-local shopping cart.

`CartStore` holds the selected product variations for one session, keyed by
(productId, variationName). The whole list is rewritten to a storage backend
on every mutation and read back once when the store is constructed.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Union

from pydantic import TypeAdapter

from grocer.schemas.cart import CartItem, CartKey
from grocer.schemas.product import ProductOut, Variation
from grocer.services.pricing import effective_price

logger = logging.getLogger("grocer.cart")

STORAGE_KEY = "cart"
DEFAULT_MAX_LINE_QUANTITY = 99

_items_adapter = TypeAdapter(List[CartItem])


# ──────────────────────────────────────────────────────────────────────────────
# Storage backends
# ──────────────────────────────────────────────────────────────────────────────

class CartStorage(Protocol):
    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, value: str) -> None: ...


class MemoryCartStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileCartStorage:
    """One JSON object on disk mapping storage keys to serialized values."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        return raw if isinstance(raw, dict) else {}

    def load(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def save(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cart-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


# ──────────────────────────────────────────────────────────────────────────────
# Store
# ──────────────────────────────────────────────────────────────────────────────

class CartStore:
    """Keyed collection of CartItems for one session/device."""

    def __init__(
        self,
        storage: Optional[CartStorage] = None,
        *,
        max_line_quantity: int = DEFAULT_MAX_LINE_QUANTITY,
        storage_key: str = STORAGE_KEY,
    ):
        self.storage = storage if storage is not None else MemoryCartStorage()
        self.storage_key = storage_key
        self.max_line_quantity = max_line_quantity
        self._items: Dict[CartKey, CartItem] = {}
        self._load()

    # ---------- persistence ----------
    def _load(self) -> None:
        try:
            raw = self.storage.load(self.storage_key)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read cart from storage: %s", exc)
            return
        if not raw:
            return
        try:
            items = self._parse(raw)
        except ValueError as exc:
            # pydantic.ValidationError and JSONDecodeError are both ValueErrors
            logger.warning("Discarding unreadable stored cart: %s", exc)
            return
        self._items = {it.key: it for it in items}

    @staticmethod
    def _parse(raw: str) -> List[CartItem]:
        return _items_adapter.validate_json(raw)

    def _persist(self) -> None:
        try:
            self.storage.save(self.storage_key, self.serialize())
        except OSError as exc:
            logger.error("Failed to save cart to storage: %s", exc)

    def serialize(self) -> str:
        return _items_adapter.dump_json(list(self._items.values())).decode("utf-8")

    def restore(self, raw: str) -> None:
        """Replace the contents with a serialized item list; raises ValueError if unreadable."""
        items = self._parse(raw)
        self._items = {it.key: it for it in items}
        self._persist()

    # ---------- queries ----------
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def snapshot(self) -> List[CartItem]:
        return [it.model_copy() for it in self._items.values()]

    def get(self, key: CartKey) -> Optional[CartItem]:
        return self._items.get(tuple(key))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, tuple) and key in self._items

    def total(self) -> Decimal:
        return sum((it.price * it.quantity for it in self._items.values()), Decimal("0"))

    def item_count(self) -> int:
        return sum(it.quantity for it in self._items.values())

    # ---------- mutations ----------
    def _clamp(self, key: CartKey, quantity: int) -> int:
        if quantity > self.max_line_quantity:
            logger.info(
                "Quantity %s for %s exceeds the per-line cap, clamped to %s",
                quantity, key, self.max_line_quantity,
            )
            return self.max_line_quantity
        return quantity

    def add_item(self, product: ProductOut, variation: Variation, quantity: int = 1) -> CartItem:
        key = (product.id, variation.name)
        if quantity < 1:
            # callers validate; a non-positive add leaves the cart alone
            logger.debug("Ignoring add of %s x %s", quantity, key)
            return self._items.get(key)

        existing = self._items.get(key)
        if existing is not None:
            existing.quantity = self._clamp(key, existing.quantity + quantity)
            item = existing
        else:
            item = CartItem(
                productId=product.id,
                variationName=variation.name,
                price=effective_price(product.price, variation.priceModifier),
                quantity=self._clamp(key, quantity),
                name=product.name,
                image=product.image or None,
                imageAlt=product.imageAlt or None,
                category=product.category or None,
            )
            self._items[key] = item
        self._persist()
        return item

    def remove_item(self, key: CartKey) -> None:
        if self._items.pop(tuple(key), None) is not None:
            self._persist()

    def set_quantity(self, key: CartKey, quantity: int) -> None:
        key = tuple(key)
        if quantity < 1:
            self.remove_item(key)
            return
        item = self._items.get(key)
        if item is None:
            return
        item.quantity = self._clamp(key, quantity)
        self._persist()

    def clear(self) -> None:
        self._items.clear()
        self._persist()
