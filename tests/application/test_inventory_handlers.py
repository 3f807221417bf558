"""Integration tests for the stock administration use cases."""

import pytest

from storefront.application.adjust_stock import AdjustStockHandler
from storefront.application.set_inventory import SetInventoryHandler
from storefront.application.show_inventory import ShowInventoryHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import ProductNotFoundError, ValidationError
from storefront.domain.model.inventory import InventoryStatus, MovementType
from storefront.domain.model.order import OrderStatus
from tests.factories import make_ledger, make_order
from tests.fakes import FakeInventoryRepository, FakeOrderRepository, FakeTransactionManager


class TestSetInventory:

    def _handler(self, *ledgers):
        repo = FakeInventoryRepository(list(ledgers))
        return SetInventoryHandler(repo, FakeTransactionManager(repo)), repo

    def test_registers_new_product_with_opening_stock(self):
        handler, repo = self._handler()
        ledger = handler.handle("p1", 25, title="Lungi", low_stock_threshold=5)
        assert ledger.stock_quantity == 25
        assert ledger.inventory_status is InventoryStatus.IN_STOCK
        saved = repo.get_by_product_id("p1")
        assert saved.history[0].type is MovementType.STOCK_IN
        assert saved.history[0].reason == "Opening stock"

    def test_new_product_needs_title(self):
        handler, _ = self._handler()
        with pytest.raises(ValidationError, match="title is required"):
            handler.handle("p1", 5)

    def test_sets_absolute_level_as_adjustment(self):
        handler, repo = self._handler(make_ledger("p1", stock=10, reserved=4))
        ledger = handler.handle("p1", 6)
        assert ledger.available_quantity == 2
        entry = repo.get_by_product_id("p1").history[-1]
        assert entry.type is MovementType.ADJUSTMENT
        assert (entry.previous_quantity, entry.new_quantity) == (10, 6)

    def test_negative_quantity_rejected(self):
        handler, _ = self._handler()
        with pytest.raises(ValidationError, match="cannot be negative"):
            handler.handle("p1", -1, title="X")


class TestAdjustStock:

    def _handler(self, *ledgers):
        repo = FakeInventoryRepository(list(ledgers))
        return AdjustStockHandler(repo, FakeTransactionManager(repo)), repo

    def test_adds_stock(self):
        handler, repo = self._handler(make_ledger("p1", stock=3))
        handler.handle("p1", 4, reason="Supplier delivery", performed_by="admin")
        ledger = repo.get_by_product_id("p1")
        assert ledger.stock_quantity == 7
        assert ledger.history[-1].performed_by == "admin"

    def test_unknown_product(self):
        handler, _ = self._handler()
        with pytest.raises(ProductNotFoundError):
            handler.handle("nope", 1)

    def test_unmanaged_product_rejected(self):
        handler, _ = self._handler(make_ledger("p1", manage_stock=False))
        with pytest.raises(ValidationError, match="not enabled"):
            handler.handle("p1", 1)

    def test_unknown_movement_type(self):
        handler, _ = self._handler(make_ledger("p1"))
        with pytest.raises(ValidationError, match="Unknown movement type"):
            handler.handle("p1", 1, movement_type="teleport")


class TestShowInventory:

    def test_lowest_availability_first(self):
        repo = FakeInventoryRepository(
            [make_ledger("a", "Alpha", stock=9), make_ledger("b", "Beta", stock=1)]
        )
        lines = ShowInventoryHandler(repo).handle()
        assert [l.product_id for l in lines] == ["b", "a"]

    def test_filter_by_status_skips_unmanaged(self):
        repo = FakeInventoryRepository(
            [
                make_ledger("a", stock=1, threshold=5),
                make_ledger("b", stock=1, threshold=5, manage_stock=False),
                make_ledger("c", stock=50, threshold=5),
            ]
        )
        lines = ShowInventoryHandler(repo).handle(status="low_stock")
        assert [l.product_id for l in lines] == ["a"]

    def test_history(self):
        ledger = make_ledger("a", stock=5)
        ledger.reserve(2, reason="Order created: ORD-1", reference="ORD-1")
        entries = ShowInventoryHandler(FakeInventoryRepository([ledger])).history("a")
        assert entries[0].type == "reservation"
        assert entries[0].reference == "ORD-1"


class TestOrderInventoryImpact:

    def _handler(self, order, *ledgers):
        order_repo = FakeOrderRepository()
        order_repo.save(order)
        return ShowOrderHandler(order_repo, FakeInventoryRepository(list(ledgers)))

    def test_open_order_reports_reservation(self):
        handler = self._handler(
            make_order([("p1", 2), ("p2", 1)]),
            make_ledger("p1", stock=10, reserved=2),
            make_ledger("p2", manage_stock=False),
        )
        impact = {line.product_id: line for line in handler.inventory_impact(1)}
        assert impact["p1"].stock_impact == "reserved"
        assert impact["p1"].stock_change == -2
        assert impact["p1"].available_stock == 8
        assert impact["p2"].stock_impact == "untracked"
        assert impact["p2"].stock_change == 0

    @pytest.mark.parametrize(
        "status, expected",
        [(OrderStatus.SHIPPED, "deducted"), (OrderStatus.CANCELLED, "released")],
    )
    def test_settled_orders(self, status, expected):
        handler = self._handler(make_order([("p1", 2)], status=status), make_ledger("p1"))
        assert handler.inventory_impact(1)[0].stock_impact == expected
