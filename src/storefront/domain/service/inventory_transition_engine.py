"""Domain service: Inventory Transition Engine.

Reservation happens once, at checkout.  This engine decides what happens to
that reservation as the order moves through its lifecycle, and applies the
decision to every line item of the order.

``plan_transition`` is a pure, total function over all status pairs: pairs
without an inventory effect map to ``InventoryAction.NONE``.

Failure of any line item (e.g. not enough physical stock to ship) raises
out of ``apply()``; the enclosing transaction then discards every ledger
change made for the order, and the order keeps its old status.
"""

from __future__ import annotations

from enum import Enum

import structlog

from storefront.domain.model.inventory import InventoryLedger
from storefront.domain.model.order import (
    RESERVING_STATUSES,
    SHIPPED_STATUSES,
    Order,
    OrderStatus,
)
from storefront.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)


class InventoryAction(Enum):
    NONE = "none"
    SHIP_OUT = "ship_out"
    RELEASE = "release"
    RELEASE_REMAINING = "release_remaining"
    RESTOCK = "restock"


def plan_transition(old: OrderStatus, new: OrderStatus) -> InventoryAction:
    """Inventory effect, per line item, of moving an order from *old* to *new*.

    =====================================  ===================
    old -> new                              action
    =====================================  ===================
    same -> same                            NONE
    any other -> shipped                    SHIP_OUT
    shipped -> delivered                    RELEASE_REMAINING
    pending|confirmed|processing -> cancel  RELEASE
    shipped|delivered -> cancelled          RESTOCK
    everything else                         NONE
    =====================================  ===================
    """
    if old is new:
        return InventoryAction.NONE
    if new is OrderStatus.SHIPPED:
        return InventoryAction.SHIP_OUT
    if new is OrderStatus.DELIVERED and old is OrderStatus.SHIPPED:
        return InventoryAction.RELEASE_REMAINING
    if new is OrderStatus.CANCELLED:
        if old in RESERVING_STATUSES:
            return InventoryAction.RELEASE
        if old in SHIPPED_STATUSES:
            return InventoryAction.RESTOCK
    return InventoryAction.NONE


class InventoryTransitionEngine:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def apply(
        self,
        order: Order,
        new_status: OrderStatus,
        performed_by: str | None = None,
    ) -> InventoryAction:
        """Apply the ledger mutations for ``order.status -> new_status``.

        Must run before the order's status is changed, inside the same
        transaction.  Returns the action that was applied.
        """
        old_status = order.status
        action = plan_transition(old_status, new_status)
        if action is InventoryAction.NONE:
            return action

        reason = f"Order {order.order_number}: {old_status.value} → {new_status.value}"
        touched: dict[str, InventoryLedger] = {}

        for item in order.items:
            ledger = touched.get(item.product_id) or self._inventory_repo.get_by_product_id(
                item.product_id
            )
            if ledger is None or not ledger.manage_stock:
                logger.warning(
                    "transition_skipped",
                    product_id=item.product_id,
                    order=order.order_number,
                    reason="missing" if ledger is None else "stock not managed",
                )
                continue

            qty = item.quantity.value
            kwargs = dict(reason=reason, reference=order.order_number, performed_by=performed_by)
            if action is InventoryAction.SHIP_OUT:
                ledger.ship_out(qty, **kwargs)
            elif action is InventoryAction.RELEASE:
                ledger.release(qty, **kwargs)
            elif action is InventoryAction.RELEASE_REMAINING:
                ledger.release_remaining(qty, **kwargs)
            elif action is InventoryAction.RESTOCK:
                ledger.restock(qty, **kwargs)

            logger.debug(
                "inventory_transition",
                action=action.value,
                product_id=item.product_id,
                quantity=qty,
                stock=ledger.stock_quantity,
                reserved=ledger.reserved_quantity,
                available=ledger.available_quantity,
            )
            touched[item.product_id] = ledger

        for ledger in touched.values():
            self._inventory_repo.save(ledger)
        return action
