"""Application service: Delete Order use case.

An order that still holds a reservation (pending / confirmed / processing)
gives it back before the record disappears, in one transaction.  Shipped,
delivered and cancelled orders have already settled their inventory, so
they are removed without touching any ledger.
"""

from __future__ import annotations

import structlog

from storefront.config.logging import order_context
from storefront.domain.exceptions import OrderNotFoundError
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.transaction_manager import TransactionManager
from storefront.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

logger = structlog.get_logger(__name__)


class DeleteOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
        transactions: TransactionManager,
    ) -> None:
        self._order_repo = order_repo
        self._inventory_repo = inventory_repo
        self._transactions = transactions

    def handle(self, order_id: int, performed_by: str | None = None) -> None:
        def _delete() -> bool:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")

            released = order.holds_reservation
            if released:
                InventoryReservationService(self._inventory_repo).release_for_order(
                    order,
                    reason=f"Order deleted: {order.order_number}",
                    performed_by=performed_by,
                )
            self._order_repo.delete(order_id)
            return released

        with order_context(order_id=order_id):
            released = self._transactions.run(_delete)
        logger.info("order_deleted", order_id=order_id, reservation_released=released)
