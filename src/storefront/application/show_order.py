"""Application service: Show Order use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.domain.exceptions import OrderNotFoundError
from storefront.domain.model.order import RESERVING_STATUSES, SHIPPED_STATUSES
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.order_repository import OrderRepository


@dataclass(frozen=True)
class InventoryImpactDTO:
    """How one line item currently weighs on its product's ledger."""

    product_id: str
    title: str
    quantity: int
    stock_impact: str  # reserved | deducted | released | untracked
    stock_change: int
    current_stock: int | None
    reserved_stock: int | None
    available_stock: int | None
    inventory_status: str | None


class ShowOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._inventory_repo = inventory_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order)

    def inventory_impact(self, order_id: int) -> list[InventoryImpactDTO]:
        """Per line item: what the order's status means for stock right now."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order #{order_id} not found")
        if self._inventory_repo is None:
            raise RuntimeError("ShowOrderHandler needs an inventory repository for impact")

        if order.status in RESERVING_STATUSES:
            impact, sign = "reserved", -1
        elif order.status in SHIPPED_STATUSES:
            impact, sign = "deducted", -1
        else:
            impact, sign = "released", 1

        lines = []
        for item in order.items:
            ledger = self._inventory_repo.get_by_product_id(item.product_id)
            tracked = ledger is not None and ledger.manage_stock
            lines.append(
                InventoryImpactDTO(
                    product_id=item.product_id,
                    title=ledger.title if ledger else item.title,
                    quantity=item.quantity.value,
                    stock_impact=impact if tracked else "untracked",
                    stock_change=sign * item.quantity.value if tracked else 0,
                    current_stock=ledger.stock_quantity if ledger else None,
                    reserved_stock=ledger.reserved_quantity if ledger else None,
                    available_stock=ledger.available_quantity if ledger else None,
                    inventory_status=ledger.inventory_status.value if ledger else None,
                )
            )
        return lines
