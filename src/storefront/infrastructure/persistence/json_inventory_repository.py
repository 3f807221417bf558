"""Document-store-backed implementation of InventoryRepository."""

from __future__ import annotations

from datetime import datetime

from storefront.domain.model.inventory import (
    InventoryHistoryEntry,
    InventoryLedger,
    MovementType,
)
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.infrastructure.persistence.document_store import JsonDocumentStore

_COLLECTION = "inventory"


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- InventoryRepository interface ----------------------------------------

    def get_by_product_id(self, product_id: str) -> InventoryLedger | None:
        raw = self._store.get(_COLLECTION, product_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[InventoryLedger]:
        return [self._to_domain(raw) for raw in self._store.find(_COLLECTION)]

    def save(self, ledger: InventoryLedger) -> None:
        self._store.put(_COLLECTION, ledger.product_id, self._to_raw(ledger))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(ledger: InventoryLedger) -> dict:
        # availableQuantity / inventoryStatus are written for readers of the
        # file only; loading always recomputes them.
        return {
            "productId": ledger.product_id,
            "title": ledger.title,
            "manageStock": ledger.manage_stock,
            "stockQuantity": ledger.stock_quantity,
            "reservedQuantity": ledger.reserved_quantity,
            "availableQuantity": ledger.available_quantity,
            "inventoryStatus": ledger.inventory_status.value,
            "lowStockThreshold": ledger.low_stock_threshold,
            "inventoryHistory": [
                {
                    "date": entry.date.isoformat(),
                    "type": entry.type.value,
                    "quantity": entry.quantity,
                    "previousQuantity": entry.previous_quantity,
                    "newQuantity": entry.new_quantity,
                    "reason": entry.reason,
                    "reference": entry.reference,
                    "performedBy": entry.performed_by,
                    "notes": entry.notes,
                }
                for entry in ledger.history
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryLedger:
        return InventoryLedger(
            product_id=raw["productId"],
            title=raw["title"],
            stock_quantity=raw.get("stockQuantity", 0),
            reserved_quantity=raw.get("reservedQuantity", 0),
            low_stock_threshold=raw.get("lowStockThreshold", 10),
            manage_stock=raw.get("manageStock", True),
            history=[
                InventoryHistoryEntry(
                    date=datetime.fromisoformat(h["date"]),
                    type=MovementType(h["type"]),
                    quantity=h["quantity"],
                    previous_quantity=h["previousQuantity"],
                    new_quantity=h["newQuantity"],
                    reason=h.get("reason", ""),
                    reference=h.get("reference"),
                    performed_by=h.get("performedBy"),
                    notes=h.get("notes"),
                )
                for h in raw.get("inventoryHistory", [])
            ],
        )
