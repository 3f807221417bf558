"""Application service: Set Inventory use case.

Registers a product's ledger, or sets an existing ledger's physical stock
to an absolute level (recorded as an ``adjustment``).
"""

from __future__ import annotations

import structlog

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.inventory import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    InventoryLedger,
    MovementType,
)
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.transaction_manager import TransactionManager

logger = structlog.get_logger(__name__)


class SetInventoryHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        transactions: TransactionManager,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._transactions = transactions

    def handle(
        self,
        product_id: str,
        quantity: int,
        title: str | None = None,
        low_stock_threshold: int | None = None,
        manage_stock: bool | None = None,
        performed_by: str | None = None,
    ) -> InventoryLedger:
        """Set the physical stock level for a product.

        A new ledger needs a ``title``; its opening stock is recorded as
        ``stock_in``.
        """
        if not product_id or not product_id.strip():
            raise ValidationError("Product ID is required")
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        if low_stock_threshold is not None and low_stock_threshold < 0:
            raise ValidationError("Low stock threshold cannot be negative")

        def _set() -> InventoryLedger:
            ledger = self._inventory_repo.get_by_product_id(product_id)
            if ledger is None:
                if not title or not title.strip():
                    raise ValidationError(f"A title is required to register product '{product_id}'")
                ledger = InventoryLedger(
                    product_id=product_id,
                    title=title.strip(),
                    low_stock_threshold=(
                        DEFAULT_LOW_STOCK_THRESHOLD
                        if low_stock_threshold is None
                        else low_stock_threshold
                    ),
                    manage_stock=True if manage_stock is None else manage_stock,
                )
                if quantity:
                    ledger.manual_adjust(
                        quantity, reason="Opening stock", performed_by=performed_by
                    )
            else:
                ledger.update_settings(
                    title=title or None,
                    low_stock_threshold=low_stock_threshold,
                    manage_stock=manage_stock,
                )
                delta = quantity - ledger.stock_quantity
                if delta:
                    ledger.manual_adjust(
                        delta,
                        reason="Stock level set",
                        movement_type=MovementType.ADJUSTMENT,
                        performed_by=performed_by,
                    )
            self._inventory_repo.save(ledger)
            return ledger

        ledger = self._transactions.run(_set)
        logger.info(
            "inventory_set",
            product_id=product_id,
            stock=ledger.stock_quantity,
            status=ledger.inventory_status.value,
        )
        return ledger
