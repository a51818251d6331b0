from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from shop_v2.domain.cart_ledger import CartItemInput, CartLedger, CartLineItem
from shop_v2.storage.local_state_repo import LocalStateRepository

logger = logging.getLogger(__name__)

CART_STORAGE_NAME = "cart-storage"


class CartService:
    """
    Persisted cart for one device.

    Responsibilities:
    - load the ledger from the local store on construction
    - save after every mutation
    - expose read-only aggregates straight from the ledger

    There is exactly one writer per device key.
    """

    def __init__(
        self,
        device_id: str,
        *,
        repo: Optional[LocalStateRepository] = None,
    ) -> None:
        if not device_id or not device_id.strip():
            raise ValueError("device_id is required")

        self.storage_key = f"{CART_STORAGE_NAME}:{device_id.strip()}"
        self.repo = repo or LocalStateRepository()
        self.ledger = CartLedger.from_payload(self.repo.load(self.storage_key))

    def _persist(self) -> None:
        self.repo.save(self.storage_key, self.ledger.to_payload())

    # --------------------------------------------------------
    # mutations
    # --------------------------------------------------------

    def add_item(self, item: CartItemInput | Dict[str, Any]) -> Optional[CartLineItem]:
        line = self.ledger.add_item(item)
        if line is not None:
            self._persist()
            logger.info(
                "Cart %s: %s x%d (line %s)",
                self.storage_key,
                line.variant_id,
                line.quantity,
                line.id,
            )
        return line

    def remove_item(self, item_id: str) -> None:
        self.ledger.remove_item(item_id)
        self._persist()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        self.ledger.update_quantity(item_id, quantity)
        self._persist()

    def clear_cart(self) -> None:
        self.ledger.clear_cart()
        self._persist()

    # --------------------------------------------------------
    # reads
    # --------------------------------------------------------

    @property
    def items(self) -> List[CartLineItem]:
        return self.ledger.items

    def item_count(self) -> int:
        return self.ledger.item_count()

    def subtotal(self) -> float:
        return self.ledger.subtotal()

    def tax(self) -> float:
        return self.ledger.tax()

    def total(self) -> float:
        return self.ledger.total()
