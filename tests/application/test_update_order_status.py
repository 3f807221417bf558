"""Integration tests for the UpdateOrderStatus use case."""

import pytest

from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import (
    InsufficientStockError,
    OrderNotFoundError,
    ValidationError,
)
from storefront.domain.model.order import OrderStatus, PaymentStatus
from tests.factories import make_ledger, make_order
from tests.fakes import FakeInventoryRepository, FakeOrderRepository, FakeTransactionManager


def _setup(order, *ledgers):
    order_repo = FakeOrderRepository()
    order_repo.save(order)
    inventory_repo = FakeInventoryRepository(list(ledgers))
    tx = FakeTransactionManager(order_repo, inventory_repo)
    handler = UpdateOrderStatusHandler(order_repo, inventory_repo, tx)
    return handler, order_repo, inventory_repo


def _levels(repo, product_id):
    ledger = repo.get_by_product_id(product_id)
    return ledger.stock_quantity, ledger.reserved_quantity, ledger.available_quantity


class TestLifecycle:

    def test_ship_then_cancel_restores_stock(self):
        handler, order_repo, inventory_repo = _setup(
            make_order([("p1", 4)]), make_ledger("p1", stock=10, reserved=4)
        )

        shipped = handler.handle(1, "shipped", performed_by="admin")
        assert shipped.inventory_updated
        assert shipped.previous_status == "pending"
        assert _levels(inventory_repo, "p1") == (6, 0, 6)

        cancelled = handler.handle(1, OrderStatus.CANCELLED)
        assert cancelled.order.status == "cancelled"
        assert _levels(inventory_repo, "p1") == (10, 0, 10)

    def test_cancel_open_order_releases(self):
        handler, _, inventory_repo = _setup(
            make_order([("p1", 4)], status=OrderStatus.CONFIRMED),
            make_ledger("p1", stock=10, reserved=4),
        )
        handler.handle(1, "cancelled")
        assert _levels(inventory_repo, "p1") == (10, 0, 10)

    def test_confirm_changes_no_inventory(self):
        handler, _, inventory_repo = _setup(
            make_order([("p1", 4)]), make_ledger("p1", stock=10, reserved=4)
        )
        result = handler.handle(1, "confirmed")
        assert not result.inventory_updated
        assert _levels(inventory_repo, "p1") == (10, 4, 6)
        assert inventory_repo.get_by_product_id("p1").history == []

    def test_delivery_marks_paid(self):
        handler, order_repo, _ = _setup(
            make_order([("p1", 1)], status=OrderStatus.SHIPPED), make_ledger("p1", stock=5)
        )
        result = handler.handle(1, "delivered")
        assert result.order.payment_status == "paid"
        assert order_repo.get_by_id(1).payment_status is PaymentStatus.PAID

    def test_delivery_cleans_leftover_reservation(self):
        handler, _, inventory_repo = _setup(
            make_order([("p1", 2)], status=OrderStatus.SHIPPED),
            make_ledger("p1", stock=8, reserved=2),
        )
        handler.handle(1, "delivered")
        assert _levels(inventory_repo, "p1") == (8, 0, 8)


class TestSameStatus:

    def test_same_status_only_updates_details(self):
        handler, order_repo, inventory_repo = _setup(
            make_order([("p1", 2)], status=OrderStatus.PROCESSING),
            make_ledger("p1", stock=10, reserved=2),
        )
        result = handler.handle(1, "processing", notes="packed", tracking_number="TRK-9")
        assert not result.inventory_updated
        saved = order_repo.get_by_id(1)
        assert saved.notes == "packed"
        assert saved.tracking_number == "TRK-9"
        assert inventory_repo.get_by_product_id("p1").history == []


class TestFailures:

    def test_ship_shortfall_rolls_back_everything(self):
        handler, order_repo, inventory_repo = _setup(
            make_order([("p1", 2), ("p2", 5)], status=OrderStatus.PROCESSING),
            make_ledger("p1", stock=10, reserved=2),
            make_ledger("p2", stock=3, reserved=3),
        )

        with pytest.raises(InsufficientStockError, match="Insufficient stock to ship"):
            handler.handle(1, "shipped")

        assert order_repo.get_by_id(1).status is OrderStatus.PROCESSING
        assert _levels(inventory_repo, "p1") == (10, 2, 8)
        assert inventory_repo.get_by_product_id("p1").history == []

    def test_unknown_order(self):
        handler, _, _ = _setup(make_order())
        with pytest.raises(OrderNotFoundError, match="Order #99 not found"):
            handler.handle(99, "confirmed")

    def test_unknown_status(self):
        handler, _, _ = _setup(make_order())
        with pytest.raises(ValidationError, match="Invalid order status"):
            handler.handle(1, "returned")
