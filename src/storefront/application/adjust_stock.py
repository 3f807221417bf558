"""Application service: Adjust Stock use case (admin stock-in / stock-out)."""

from __future__ import annotations

import structlog

from storefront.domain.exceptions import ProductNotFoundError, ValidationError
from storefront.domain.model.inventory import InventoryLedger, MovementType
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.transaction_manager import TransactionManager

logger = structlog.get_logger(__name__)


class AdjustStockHandler:

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
        delta: int,
        reason: str | None = None,
        movement_type: str | None = None,
        performed_by: str | None = None,
    ) -> InventoryLedger:
        """Add (positive *delta*) or remove (negative) physical stock."""
        kind = None
        if movement_type:
            try:
                kind = MovementType(movement_type)
            except ValueError:
                raise ValidationError(f"Unknown movement type '{movement_type}'") from None

        def _adjust() -> InventoryLedger:
            ledger = self._inventory_repo.get_by_product_id(product_id)
            if ledger is None:
                raise ProductNotFoundError(f"Product not found: '{product_id}'")
            if not ledger.manage_stock:
                raise ValidationError(
                    f"Stock management not enabled for product '{ledger.title}'"
                )
            ledger.manual_adjust(
                delta,
                reason=reason or "Manual adjustment",
                movement_type=kind,
                performed_by=performed_by,
            )
            self._inventory_repo.save(ledger)
            return ledger

        ledger = self._transactions.run(_adjust)
        logger.info(
            "stock_adjusted",
            product_id=product_id,
            delta=delta,
            stock=ledger.stock_quantity,
            available=ledger.available_quantity,
        )
        return ledger
