"""Integration tests for the ReconciliationJob."""

import pytest

from storefront.application.reconciliation import ReconciliationJob
from storefront.domain.exceptions import OrderNotFoundError, ValidationError
from storefront.domain.model.inventory import MovementType
from storefront.domain.model.order import OrderStatus
from tests.factories import make_ledger, make_order
from tests.fakes import FakeInventoryRepository, FakeOrderRepository, FakeTransactionManager


def _setup(orders, ledgers):
    order_repo = FakeOrderRepository()
    for order in orders:
        order_repo.save(order)
    inventory_repo = FakeInventoryRepository(ledgers)
    tx = FakeTransactionManager(order_repo, inventory_repo)
    return ReconciliationJob(order_repo, inventory_repo, tx), inventory_repo


class TestResync:

    def test_recomputes_reserved_from_open_orders(self):
        job, inventory_repo = _setup(
            [
                make_order([("p1", 2)]),
                make_order([("p1", 3), ("p2", 1)], status=OrderStatus.PROCESSING),
                make_order([("p1", 5)], status=OrderStatus.SHIPPED),
                make_order([("p1", 7)], status=OrderStatus.CANCELLED),
            ],
            [
                make_ledger("p1", stock=20, reserved=12),
                make_ledger("p2", stock=5, reserved=1),
                make_ledger("p3", stock=5, reserved=2, manage_stock=False),
            ],
        )

        report = job.resync(performed_by="admin")

        assert report.products_checked == 2
        assert [c.product_id for c in report.changes] == ["p1"]
        assert (report.changes[0].previous_reserved, report.changes[0].new_reserved) == (12, 5)

        p1 = inventory_repo.get_by_product_id("p1")
        assert p1.reserved_quantity == 5
        assert p1.available_quantity == 15
        entry = p1.history[-1]
        assert entry.type is MovementType.ADJUSTMENT
        assert entry.reason == "Manual inventory sync"
        assert entry.notes == "Reserved: 5, Shipped: 5"

        assert inventory_repo.get_by_product_id("p2").history == []
        assert inventory_repo.get_by_product_id("p3").reserved_quantity == 2

    def test_resync_twice_is_a_noop(self):
        job, inventory_repo = _setup(
            [make_order([("p1", 2)])], [make_ledger("p1", stock=10, reserved=0)]
        )
        job.resync()
        second = job.resync()
        assert second.changes == []
        assert len(inventory_repo.get_by_product_id("p1").history) == 1


class TestFixDeliveryDrift:

    def test_releases_leftover_and_is_idempotent(self):
        job, inventory_repo = _setup(
            [make_order([("p1", 3)], status=OrderStatus.DELIVERED)],
            [make_ledger("p1", stock=7, reserved=2)],
        )

        fixes = job.fix_delivery_drift(1)
        assert [(f.product_id, f.released, f.reserved_after) for f in fixes] == [("p1", 2, 0)]
        assert inventory_repo.get_by_product_id("p1").available_quantity == 7

        assert job.fix_delivery_drift(1) == []
        assert len(inventory_repo.get_by_product_id("p1").history) == 1

    def test_only_delivered_orders(self):
        job, _ = _setup([make_order([("p1", 1)])], [make_ledger("p1")])
        with pytest.raises(ValidationError, match="is not in delivered status"):
            job.fix_delivery_drift(1)

    def test_unknown_order(self):
        job, _ = _setup([], [])
        with pytest.raises(OrderNotFoundError):
            job.fix_delivery_drift(5)
