"""Application service: Update Order Status use case.

Orchestrates the transition engine (inventory) and the Order aggregate
(status) in a single transaction.  The ledgers are mutated first; if any
line item fails, the transaction aborts and the order keeps its old
status.  Re-submitting the current status only updates notes / tracking.
"""

from __future__ import annotations

import structlog

from storefront.application.dto import StatusUpdateDTO, order_to_dto
from storefront.config.logging import order_context
from storefront.domain.exceptions import OrderNotFoundError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.transaction_manager import TransactionManager
from storefront.domain.service.inventory_transition_engine import (
    InventoryAction,
    InventoryTransitionEngine,
)

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
        transactions: TransactionManager,
    ) -> None:
        self._order_repo = order_repo
        self._inventory_repo = inventory_repo
        self._transactions = transactions

    def handle(
        self,
        order_id: int,
        new_status: OrderStatus | str,
        notes: str | None = None,
        tracking_number: str | None = None,
        performed_by: str | None = None,
    ) -> StatusUpdateDTO:
        if not isinstance(new_status, OrderStatus):
            new_status = OrderStatus.parse(new_status)

        def _update() -> StatusUpdateDTO:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")

            old_status = order.status
            if new_status is old_status:
                order.update_details(notes=notes, tracking_number=tracking_number)
                self._order_repo.save(order)
                return StatusUpdateDTO(order_to_dto(order), old_status.value, False)

            # Inventory first, then the status field.
            engine = InventoryTransitionEngine(self._inventory_repo)
            action = engine.apply(order, new_status, performed_by=performed_by)

            order.change_status(new_status)
            order.update_details(notes=notes, tracking_number=tracking_number)
            self._order_repo.save(order)
            return StatusUpdateDTO(
                order_to_dto(order), old_status.value, action is not InventoryAction.NONE
            )

        with order_context(order_id=order_id):
            result = self._transactions.run(_update)
        logger.info(
            "order_status_updated",
            order_id=order_id,
            order_number=result.order.order_number,
            old_status=result.previous_status,
            new_status=result.order.status,
            inventory_updated=result.inventory_updated,
        )
        return result
