"""Integration tests for the DeleteOrder use case."""

import pytest

from storefront.application.delete_order import DeleteOrderHandler
from storefront.domain.exceptions import OrderNotFoundError
from storefront.domain.model.order import OrderStatus
from tests.factories import make_ledger, make_order
from tests.fakes import FakeInventoryRepository, FakeOrderRepository, FakeTransactionManager


def _setup(order, *ledgers):
    order_repo = FakeOrderRepository()
    order_repo.save(order)
    inventory_repo = FakeInventoryRepository(list(ledgers))
    tx = FakeTransactionManager(order_repo, inventory_repo)
    return DeleteOrderHandler(order_repo, inventory_repo, tx), order_repo, inventory_repo


class TestDeleteOrder:

    def test_open_order_releases_reservation(self):
        order = make_order([("p1", 3)])
        handler, order_repo, inventory_repo = _setup(order, make_ledger("p1", stock=10, reserved=3))

        handler.handle(1, performed_by="admin")

        assert order_repo.get_by_id(1) is None
        ledger = inventory_repo.get_by_product_id("p1")
        assert ledger.reserved_quantity == 0
        assert ledger.history[-1].reason == f"Order deleted: {order.order_number}"
        assert ledger.history[-1].performed_by == "admin"

    @pytest.mark.parametrize(
        "status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED]
    )
    def test_settled_order_leaves_inventory_alone(self, status):
        handler, order_repo, inventory_repo = _setup(
            make_order([("p1", 3)], status=status), make_ledger("p1", stock=7)
        )
        handler.handle(1)
        assert order_repo.get_by_id(1) is None
        ledger = inventory_repo.get_by_product_id("p1")
        assert (ledger.stock_quantity, ledger.reserved_quantity) == (7, 0)
        assert ledger.history == []

    def test_unknown_order(self):
        handler, _, _ = _setup(make_order())
        with pytest.raises(OrderNotFoundError):
            handler.handle(42)
