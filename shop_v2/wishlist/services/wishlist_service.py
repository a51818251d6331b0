from __future__ import annotations

from typing import List, Optional

from shop_v2.domain.wishlist import WishlistItem, WishlistLedger
from shop_v2.storage.local_state_repo import LocalStateRepository

WISHLIST_STORAGE_NAME = "wishlist-storage"


class WishlistService:
    """
    Persisted wishlist for one device (saved after every mutation).
    """

    def __init__(
        self,
        device_id: str,
        *,
        repo: Optional[LocalStateRepository] = None,
    ) -> None:
        if not device_id or not device_id.strip():
            raise ValueError("device_id is required")

        self.storage_key = f"{WISHLIST_STORAGE_NAME}:{device_id.strip()}"
        self.repo = repo or LocalStateRepository()
        self.ledger = WishlistLedger.from_payload(self.repo.load(self.storage_key))

    def _persist(self) -> None:
        self.repo.save(self.storage_key, self.ledger.to_payload())

    @property
    def items(self) -> List[WishlistItem]:
        return self.ledger.items

    def is_in_wishlist(self, product_id: str) -> bool:
        return self.ledger.is_in_wishlist(product_id)

    def add_item(self, product_id: str) -> None:
        self.ledger.add_item(product_id)
        self._persist()

    def remove_item(self, product_id: str) -> None:
        self.ledger.remove_item(product_id)
        self._persist()

    def toggle_item(self, product_id: str) -> bool:
        in_wishlist = self.ledger.toggle_item(product_id)
        self._persist()
        return in_wishlist

    def clear_wishlist(self) -> None:
        self.ledger.clear_wishlist()
        self._persist()
