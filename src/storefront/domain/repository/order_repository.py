"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by its public order number, or None."""

    @abstractmethod
    def list_by_status(self, statuses: frozenset[OrderStatus]) -> list[Order]:
        """Return every order whose status is one of *statuses*."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order (assigns ``id`` to new orders)."""

    @abstractmethod
    def delete(self, order_id: int) -> None:
        """Remove an order.  Deleting a missing ID is a no-op."""
