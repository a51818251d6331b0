# shop_v2/domain/cart_ledger.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, confloat, conint

from shop_v2.config.checkout_rules import TAX_RATE

logger = logging.getLogger(__name__)


# ============================================================
# Line item
# ============================================================

class CartItemInput(BaseModel):
    """
    "Add to cart" payload (no id yet).
    """

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    variant_id: str = Field(alias="variantId")
    title: str
    size: str
    color: str
    unit_price: confloat(ge=0) = Field(alias="price")
    quantity: int = 1
    image: str = ""


class CartLineItem(CartItemInput):
    id: str
    quantity: conint(ge=1) = 1

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


def _new_line_id(product_id: str, variant_id: str) -> str:
    return f"{product_id}-{variant_id}-{uuid.uuid4().hex[:12]}"


# ============================================================
# Ledger
# ============================================================

class CartLedger:
    """
    In-memory cart.

    Invariants:
    - one line per (product_id, variant_id)
    - quantity >= 1 on every line (0 means the line is gone)
    - aggregates are recomputed from the lines on every call

    Lines handed out (items / get_item / add_item) are copies.
    """

    def __init__(self, items: Optional[Iterable[CartLineItem]] = None) -> None:
        self._items: List[CartLineItem] = []
        for item in items or []:
            self._absorb(item)

    @property
    def items(self) -> List[CartLineItem]:
        return [item.model_copy() for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def get_item(self, item_id: str) -> Optional[CartLineItem]:
        item = self._find(item_id)
        return item.model_copy() if item is not None else None

    def _find(self, item_id: str) -> Optional[CartLineItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def _find_variant(self, product_id: str, variant_id: str) -> Optional[CartLineItem]:
        for item in self._items:
            if item.product_id == product_id and item.variant_id == variant_id:
                return item
        return None

    def _absorb(self, line: CartLineItem) -> None:
        """
        Take a stored line: repeated ids are dropped, a second line for the
        same (product, variant) is folded into the first.
        """
        if self._find(line.id) is not None:
            logger.warning("Dropping cart line with duplicate id=%s", line.id)
            return

        existing = self._find_variant(line.product_id, line.variant_id)
        if existing is not None:
            logger.warning(
                "Merging cart line %s into %s (same variant %s)",
                line.id,
                existing.id,
                line.variant_id,
            )
            existing.quantity += line.quantity
            return

        self._items.append(line.model_copy())

    # --------------------------------------------------------
    # mutations
    # --------------------------------------------------------

    def add_item(self, item: CartItemInput | Dict[str, Any]) -> Optional[CartLineItem]:
        """
        Merge into the existing (product, variant) line or append a new one.

        Returns a copy of the affected line. Items with quantity < 1 are
        ignored and None is returned.
        """
        if not isinstance(item, CartItemInput):
            item = CartItemInput.model_validate(item)

        if item.quantity < 1:
            logger.warning(
                "Ignoring add_item with quantity=%s (product=%s variant=%s)",
                item.quantity,
                item.product_id,
                item.variant_id,
            )
            return None

        existing = self._find_variant(item.product_id, item.variant_id)
        if existing is not None:
            existing.quantity += item.quantity
            return existing.model_copy()

        line = CartLineItem(
            id=_new_line_id(item.product_id, item.variant_id),
            **item.model_dump(exclude={"quantity"}),
            quantity=item.quantity,
        )
        self._items.append(line)
        return line.model_copy()

    def remove_item(self, item_id: str) -> None:
        self._items = [i for i in self._items if i.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(item_id)
            return

        item = self._find(item_id)
        if item is not None:
            item.quantity = quantity

    def clear_cart(self) -> None:
        self._items = []

    # --------------------------------------------------------
    # aggregates
    # --------------------------------------------------------

    def item_count(self) -> int:
        return sum(i.quantity for i in self._items)

    def subtotal(self) -> float:
        return sum(i.unit_price * i.quantity for i in self._items)

    def tax(self) -> float:
        return self.subtotal() * TAX_RATE

    def total(self) -> float:
        return self.subtotal() + self.tax()

    # --------------------------------------------------------
    # persistence contract
    # --------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        return {"items": [i.model_dump(by_alias=True) for i in self._items]}

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "CartLedger":
        """
        Rebuild a ledger from a stored payload.

        Lines that fail validation are dropped (logged); duplicate ids and
        repeated variants are handled as in the constructor.
        """
        if not payload:
            return cls()

        items: List[CartLineItem] = []
        for raw in payload.get("items", []):
            try:
                items.append(CartLineItem.model_validate(raw))
            except ValidationError as e:
                logger.warning("Dropping invalid stored cart line: %s", e)
        return cls(items)
