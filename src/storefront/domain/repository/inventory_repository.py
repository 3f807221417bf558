"""Abstract repository for the InventoryLedger aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.inventory import InventoryLedger


class InventoryRepository(ABC):

    @abstractmethod
    def get_by_product_id(self, product_id: str) -> InventoryLedger | None:
        """Return the ledger for a product, or None."""

    @abstractmethod
    def list_all(self) -> list[InventoryLedger]:
        """Return every ledger."""

    @abstractmethod
    def save(self, ledger: InventoryLedger) -> None:
        """Persist a new or updated ledger."""
