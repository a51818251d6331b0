# shop_v2/domain/wishlist.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class WishlistItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    added_at: str = Field(alias="addedAt")


class WishlistLedger:
    """
    Saved products, one entry per product_id, in insertion order.
    """

    def __init__(self, items: Optional[List[WishlistItem]] = None) -> None:
        self._items: List[WishlistItem] = list(items or [])

    @property
    def items(self) -> List[WishlistItem]:
        return list(self._items)

    def product_ids(self) -> List[str]:
        return [i.product_id for i in self._items]

    def is_in_wishlist(self, product_id: str) -> bool:
        return any(i.product_id == product_id for i in self._items)

    def add_item(self, product_id: str, *, now: Optional[datetime] = None) -> None:
        if self.is_in_wishlist(product_id):
            return
        added_at = (now or datetime.now(timezone.utc)).isoformat()
        self._items.append(WishlistItem(product_id=product_id, added_at=added_at))

    def remove_item(self, product_id: str) -> None:
        self._items = [i for i in self._items if i.product_id != product_id]

    def toggle_item(self, product_id: str) -> bool:
        """
        Returns True when the product is in the wishlist afterwards.
        """
        if self.is_in_wishlist(product_id):
            self.remove_item(product_id)
            return False
        self.add_item(product_id)
        return True

    def clear_wishlist(self) -> None:
        self._items = []

    # --------------------------------------------------------
    # persistence contract
    # --------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        return {"items": [i.model_dump(by_alias=True) for i in self._items]}

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "WishlistLedger":
        if not payload:
            return cls()

        ledger = cls()
        for raw in payload.get("items", []):
            try:
                item = WishlistItem.model_validate(raw)
            except ValidationError as e:
                logger.warning("Dropping invalid stored wishlist entry: %s", e)
                continue
            if not ledger.is_in_wishlist(item.product_id):
                ledger._items.append(item)
        return ledger
