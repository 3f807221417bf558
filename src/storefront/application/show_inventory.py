"""Application service: Show Inventory use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ProductNotFoundError, ValidationError
from storefront.domain.model.inventory import InventoryStatus
from storefront.domain.repository.inventory_repository import InventoryRepository


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    title: str
    stock: int
    reserved: int
    available: int
    status: str
    low_stock_threshold: int
    managed: bool


@dataclass(frozen=True)
class HistoryEntryDTO:
    date: str
    type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: str
    reference: str | None
    performed_by: str | None


class ShowInventoryHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(self, status: str | None = None) -> list[InventoryLineDTO]:
        """List ledgers, lowest availability first.

        With *status* (e.g. ``low_stock``) only stock-managed ledgers in
        that state are returned (the low-stock alert view).
        """
        wanted = None
        if status:
            try:
                wanted = InventoryStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown inventory status '{status}'") from None

        ledgers = self._inventory_repo.list_all()
        if wanted is not None:
            ledgers = [l for l in ledgers if l.manage_stock and l.inventory_status is wanted]
        ledgers.sort(key=lambda l: (l.available_quantity, l.title))
        return [
            InventoryLineDTO(
                product_id=l.product_id,
                title=l.title,
                stock=l.stock_quantity,
                reserved=l.reserved_quantity,
                available=l.available_quantity,
                status=l.inventory_status.value,
                low_stock_threshold=l.low_stock_threshold,
                managed=l.manage_stock,
            )
            for l in ledgers
        ]

    def history(self, product_id: str) -> list[HistoryEntryDTO]:
        ledger = self._inventory_repo.get_by_product_id(product_id)
        if ledger is None:
            raise ProductNotFoundError(f"Product not found: '{product_id}'")
        return [
            HistoryEntryDTO(
                date=entry.date.strftime("%Y-%m-%d %H:%M:%S UTC"),
                type=entry.type.value,
                quantity=entry.quantity,
                previous_quantity=entry.previous_quantity,
                new_quantity=entry.new_quantity,
                reason=entry.reason,
                reference=entry.reference,
                performed_by=entry.performed_by,
            )
            for entry in ledger.history
        ]
