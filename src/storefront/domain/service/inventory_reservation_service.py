"""Domain service: Inventory Reservation.

Places and releases the hold an open order keeps on its products.  It lives
in the domain layer because the logic is a core business rule, not just
orchestration.

Reservation uses a two-phase approach (validate-then-mutate) so a shortfall
on any product is reported before a single ledger is touched.  The caller
still runs it inside a transaction: a concurrent checkout can only be
ruled out by the datastore, not by the pre-check.
"""

from __future__ import annotations

import structlog

from storefront.domain.exceptions import InsufficientStockError, ProductNotFoundError
from storefront.domain.model.inventory import InventoryLedger
from storefront.domain.model.order import Order
from storefront.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)


class InventoryReservationService:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def reserve_for_order(self, order: Order, performed_by: str | None = None) -> None:
        """Reserve stock for every line item of a new order.

          Phase 1, load and validate: every stock-managed product must have
                    enough available units for the sum of its lines.
          Phase 2, mutate and persist: one ``reserve()`` per line item.
        """
        ledgers: dict[str, InventoryLedger] = {}

        # Phase 1: validate the whole order before mutating anything
        for product_id, wanted in order.quantities_by_product().items():
            ledger = self._inventory_repo.get_by_product_id(product_id)
            if ledger is None:
                title = next(i.title for i in order.items if i.product_id == product_id)
                raise ProductNotFoundError(f"Product not found: '{title}' ({product_id})")
            if not ledger.manage_stock:
                logger.info("reservation_skipped_unmanaged", product_id=product_id)
                continue
            if ledger.available_quantity < wanted:
                raise InsufficientStockError(
                    f"Insufficient stock for {ledger.title}. "
                    f"Available: {ledger.available_quantity}, Requested: {wanted}",
                    title=ledger.title,
                    available=ledger.available_quantity,
                    requested=wanted,
                )
            ledgers[product_id] = ledger

        # Phase 2: mutate and persist
        for item in order.items:
            ledger = ledgers.get(item.product_id)
            if ledger is None:
                continue
            ledger.reserve(
                item.quantity.value,
                reason=f"Order created: {order.order_number}",
                reference=order.order_number,
                performed_by=performed_by,
            )
        for ledger in ledgers.values():
            self._inventory_repo.save(ledger)

    def release_for_order(
        self,
        order: Order,
        reason: str,
        performed_by: str | None = None,
    ) -> None:
        """Release the reservation of every line item (clamped at zero)."""
        touched: dict[str, InventoryLedger] = {}
        for item in order.items:
            ledger = touched.get(item.product_id) or self._inventory_repo.get_by_product_id(
                item.product_id
            )
            if ledger is None or not ledger.manage_stock:
                logger.warning(
                    "release_skipped", product_id=item.product_id, order=order.order_number
                )
                continue
            ledger.release(
                item.quantity.value,
                reason=reason,
                reference=order.order_number,
                performed_by=performed_by,
            )
            touched[item.product_id] = ledger
        for ledger in touched.values():
            self._inventory_repo.save(ledger)
