"""Application service: Inventory reconciliation.

On-demand repair routines for drift between the ledgers and the orders
that are supposed to explain them (partial failures, hand edits of the
datastore, older releases with known bugs).
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from storefront.config.logging import order_context
from storefront.domain.exceptions import OrderNotFoundError, ValidationError
from storefront.domain.model.inventory import InventoryLedger
from storefront.domain.model.order import (
    RESERVING_STATUSES,
    SHIPPED_STATUSES,
    OrderStatus,
)
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.transaction_manager import TransactionManager

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResyncChange:
    product_id: str
    title: str
    previous_reserved: int
    new_reserved: int
    available: int
    status: str


@dataclass(frozen=True)
class ResyncReport:
    products_checked: int
    changes: list[ResyncChange] = field(default_factory=list)


@dataclass(frozen=True)
class DeliveryFix:
    product_id: str
    title: str
    released: int
    reserved_after: int
    available_after: int
    status: str


class ReconciliationJob:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
        transactions: TransactionManager,
    ) -> None:
        self._order_repo = order_repo
        self._inventory_repo = inventory_repo
        self._transactions = transactions

    def resync(self, performed_by: str | None = None) -> ResyncReport:
        """Recompute every managed ledger's reservation from open orders.

        ``reserved_quantity`` is overwritten with the sum of line quantities
        across pending / confirmed / processing orders.  An ``adjustment``
        history entry is written only where the value changed.
        """

        def _resync() -> ResyncReport:
            reserved: dict[str, int] = {}
            for order in self._order_repo.list_by_status(RESERVING_STATUSES):
                for product_id, qty in order.quantities_by_product().items():
                    reserved[product_id] = reserved.get(product_id, 0) + qty

            shipped: dict[str, int] = {}
            for order in self._order_repo.list_by_status(SHIPPED_STATUSES):
                for product_id, qty in order.quantities_by_product().items():
                    shipped[product_id] = shipped.get(product_id, 0) + qty

            checked = 0
            changes: list[ResyncChange] = []
            for ledger in self._inventory_repo.list_all():
                if not ledger.manage_stock:
                    continue
                checked += 1
                previous = ledger.reserved_quantity
                target = reserved.get(ledger.product_id, 0)
                changed = ledger.resync_reserved(
                    target,
                    reason="Manual inventory sync",
                    performed_by=performed_by,
                    notes=f"Reserved: {target}, Shipped: {shipped.get(ledger.product_id, 0)}",
                )
                self._inventory_repo.save(ledger)
                if changed:
                    changes.append(_change(ledger, previous))
            return ResyncReport(products_checked=checked, changes=changes)

        report = self._transactions.run(_resync)
        logger.info(
            "inventory_resynced",
            products_checked=report.products_checked,
            products_changed=len(report.changes),
        )
        return report

    def fix_delivery_drift(
        self, order_id: int, performed_by: str | None = None
    ) -> list[DeliveryFix]:
        """Release reservation a delivered order left behind.

        Per line item, releases ``min(item quantity, reserved_quantity)``;
        running it again on an already-clean ledger changes nothing.
        """

        def _fix() -> list[DeliveryFix]:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(f"Order #{order_id} not found")
            if order.status is not OrderStatus.DELIVERED:
                raise ValidationError(
                    f"Order #{order_id} is not in delivered status "
                    f"(current status is {order.status.value})"
                )

            fixes: list[DeliveryFix] = []
            touched: dict[str, InventoryLedger] = {}
            for item in order.items:
                ledger = touched.get(item.product_id) or self._inventory_repo.get_by_product_id(
                    item.product_id
                )
                if ledger is None or not ledger.manage_stock:
                    continue
                released = ledger.release_remaining(
                    item.quantity.value,
                    reason=f"Delivery fix for order {order.order_number}",
                    reference=order.order_number,
                    performed_by=performed_by,
                )
                touched[item.product_id] = ledger
                if released:
                    fixes.append(
                        DeliveryFix(
                            product_id=ledger.product_id,
                            title=ledger.title,
                            released=released,
                            reserved_after=ledger.reserved_quantity,
                            available_after=ledger.available_quantity,
                            status=ledger.inventory_status.value,
                        )
                    )
            for ledger in touched.values():
                self._inventory_repo.save(ledger)
            return fixes

        with order_context(order_id=order_id):
            fixes = self._transactions.run(_fix)
        logger.info(
            "delivery_drift_fixed",
            order_id=order_id,
            units_released=sum(f.released for f in fixes),
        )
        return fixes


def _change(ledger: InventoryLedger, previous: int) -> ResyncChange:
    return ResyncChange(
        product_id=ledger.product_id,
        title=ledger.title,
        previous_reserved=previous,
        new_reserved=ledger.reserved_quantity,
        available=ledger.available_quantity,
        status=ledger.inventory_status.value,
    )
