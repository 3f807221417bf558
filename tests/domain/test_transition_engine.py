"""Unit tests for the inventory transition table and engine."""

import itertools

import pytest

from storefront.domain.exceptions import InsufficientStockError
from storefront.domain.model.inventory import MovementType
from storefront.domain.model.order import OrderStatus
from storefront.domain.service.inventory_transition_engine import (
    InventoryAction,
    InventoryTransitionEngine,
    plan_transition,
)
from tests.factories import make_ledger, make_order
from tests.fakes import FakeInventoryRepository

S = OrderStatus
A = InventoryAction

_EXPECTED = {
    (S.PENDING, S.SHIPPED): A.SHIP_OUT,
    (S.CONFIRMED, S.SHIPPED): A.SHIP_OUT,
    (S.PROCESSING, S.SHIPPED): A.SHIP_OUT,
    (S.DELIVERED, S.SHIPPED): A.SHIP_OUT,
    (S.CANCELLED, S.SHIPPED): A.SHIP_OUT,
    (S.SHIPPED, S.DELIVERED): A.RELEASE_REMAINING,
    (S.PENDING, S.CANCELLED): A.RELEASE,
    (S.CONFIRMED, S.CANCELLED): A.RELEASE,
    (S.PROCESSING, S.CANCELLED): A.RELEASE,
    (S.SHIPPED, S.CANCELLED): A.RESTOCK,
    (S.DELIVERED, S.CANCELLED): A.RESTOCK,
}


class TestPlanTransition:

    @pytest.mark.parametrize("old, new", list(itertools.product(S, S)))
    def test_every_status_pair(self, old, new):
        assert plan_transition(old, new) is _EXPECTED.get((old, new), A.NONE)

    def test_same_status_is_never_an_action(self):
        for status in S:
            assert plan_transition(status, status) is A.NONE


class TestInventoryTransitionEngine:

    def _engine(self, *ledgers):
        repo = FakeInventoryRepository(list(ledgers))
        return InventoryTransitionEngine(repo), repo

    def test_ship_consumes_reservation(self):
        engine, repo = self._engine(make_ledger("p1", stock=10, reserved=4))
        order = make_order([("p1", 4)], status=S.PROCESSING)

        assert engine.apply(order, S.SHIPPED, performed_by="admin") is A.SHIP_OUT

        ledger = repo.get_by_product_id("p1")
        assert (ledger.stock_quantity, ledger.reserved_quantity, ledger.available_quantity) == (6, 0, 6)
        entry = ledger.history[-1]
        assert entry.reason == f"Order {order.order_number}: processing → shipped"
        assert entry.reference == order.order_number
        assert entry.performed_by == "admin"

    def test_cancel_open_order_releases(self):
        engine, repo = self._engine(make_ledger("p1", stock=10, reserved=4))
        engine.apply(make_order([("p1", 4)]), S.CANCELLED)
        assert repo.get_by_product_id("p1").reserved_quantity == 0

    def test_cancel_shipped_order_restocks(self):
        engine, repo = self._engine(make_ledger("p1", stock=6))
        engine.apply(make_order([("p1", 4)], status=S.SHIPPED), S.CANCELLED)
        ledger = repo.get_by_product_id("p1")
        assert ledger.stock_quantity == 10
        assert ledger.history[-1].type is MovementType.STOCK_IN

    def test_delivery_after_clean_ship_changes_nothing(self):
        engine, repo = self._engine(make_ledger("p1", stock=6))
        engine.apply(make_order([("p1", 4)], status=S.SHIPPED), S.DELIVERED)
        ledger = repo.get_by_product_id("p1")
        assert ledger.reserved_quantity == 0
        assert ledger.history == []

    def test_no_action_touches_nothing(self):
        engine, repo = self._engine(make_ledger("p1", stock=10, reserved=1))
        assert engine.apply(make_order([("p1", 1)]), S.CONFIRMED) is A.NONE
        assert repo.get_by_product_id("p1").history == []

    def test_repeated_lines_of_one_product_accumulate(self):
        engine, repo = self._engine(make_ledger("p1", stock=10, reserved=5))
        engine.apply(make_order([("p1", 2), ("p1", 3)]), S.SHIPPED)
        ledger = repo.get_by_product_id("p1")
        assert ledger.stock_quantity == 5
        assert ledger.reserved_quantity == 0
        assert len(ledger.history) == 2

    def test_missing_and_unmanaged_products_are_skipped(self):
        engine, repo = self._engine(
            make_ledger("p1", stock=10, reserved=2),
            make_ledger("p2", stock=0, manage_stock=False),
        )
        order = make_order([("p1", 2), ("p2", 5), ("gone", 1)])
        engine.apply(order, S.SHIPPED)
        assert repo.get_by_product_id("p1").stock_quantity == 8
        assert repo.get_by_product_id("p2").stock_quantity == 0
        assert repo.get_by_product_id("gone") is None

    def test_ship_shortfall_raises(self):
        engine, _ = self._engine(make_ledger("p1", stock=1))
        with pytest.raises(InsufficientStockError):
            engine.apply(make_order([("p1", 3)]), S.SHIPPED)
