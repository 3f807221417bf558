"""Order aggregate: a checkout and its lifecycle.

Line items are fixed once the order exists: they hold a snapshot of the
title and price the customer saw and are never re-derived from the live
catalog.  After creation only ``status`` (with ``payment_status``),
``notes`` and ``tracking_number`` change.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: str) -> OrderStatus:
        try:
            return cls(raw.strip().lower())
        except (ValueError, AttributeError):
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError(
                f"Invalid order status {raw!r} (expected one of: {allowed})"
            ) from None


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    COD = "cod"
    CARD = "card"
    BKASH = "bkash"
    NAGAD = "nagad"
    ROCKET = "rocket"


class DeliveryType(Enum):
    DHAKA = "dhaka"
    OUTSIDE = "outside"


# Statuses in which the order still holds a reservation on its items.
RESERVING_STATUSES = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
)
# Statuses in which the items have physically left the warehouse.
SHIPPED_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

MAX_LINE_ITEMS = 50


@dataclass(frozen=True)
class ShippingInfo:
    full_name: str
    email: str
    phone: str
    address: str
    city: str
    district: str
    zip_code: str | None = None
    country: str = "Bangladesh"
    delivery_instructions: str | None = None

    def __post_init__(self) -> None:
        required = {
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "district": self.district,
        }
        missing = [name for name, value in required.items() if not value or not value.strip()]
        if missing:
            raise ValidationError(
                f"Shipping info is missing: {', '.join(missing)}"
            )
        if "@" not in self.email:
            raise ValidationError(f"Invalid email address: {self.email!r}")


@dataclass(frozen=True)
class OrderLineItem:
    """Price and title snapshot of one product at checkout time."""

    product_id: str
    title: str
    price: Money  # locked at order-creation time
    quantity: Quantity
    size: str | None = None
    color: str | None = None
    image: str | None = None

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value


def generate_order_number() -> str:
    """``ORD-<last 8 digits of epoch millis>-<4 random base36 chars>``."""
    timestamp = str(int(time.time() * 1000))[-8:]
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"ORD-{timestamp}-{suffix}"


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    shipping_info: ShippingInfo
    items: list[OrderLineItem]
    subtotal: Money
    shipping_charge: Money
    total: Money
    delivery_type: DeliveryType
    estimated_delivery: str
    discount_total: Money = field(default_factory=Money.zero)
    payment_method: PaymentMethod = PaymentMethod.COD
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PENDING
    notes: str | None = None
    tracking_number: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        shipping_info: ShippingInfo,
        items: list[OrderLineItem],
        subtotal: Money,
        shipping_charge: Money,
        total: Money,
        delivery_type: DeliveryType,
        estimated_delivery: str,
        discount_total: Money | None = None,
        payment_method: PaymentMethod = PaymentMethod.COD,
        notes: str | None = None,
    ) -> Order:
        """Create a pending, unpaid order, enforcing all invariants.

        Totals are accepted as submitted by the checkout client.
        """
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        if not estimated_delivery or not estimated_delivery.strip():
            raise ValidationError("Estimated delivery is required")

        return Order(
            id=None,
            order_number=generate_order_number(),
            shipping_info=shipping_info,
            items=list(items),
            subtotal=subtotal,
            discount_total=discount_total or Money.zero(subtotal.currency),
            shipping_charge=shipping_charge,
            total=total,
            delivery_type=delivery_type,
            estimated_delivery=estimated_delivery.strip(),
            payment_method=payment_method,
            notes=notes,
        )

    # --- Mutations ------------------------------------------------------------

    def change_status(self, new_status: OrderStatus) -> None:
        """Move to *new_status*.

        Inventory for the transition must be settled *before* calling this
        (coordinated by the application handler via the transition engine).
        Delivery collects payment (cash on delivery).
        """
        self.status = new_status
        if new_status is OrderStatus.DELIVERED:
            self.payment_status = PaymentStatus.PAID
        self._touch()

    def update_details(
        self,
        notes: str | None = None,
        tracking_number: str | None = None,
    ) -> None:
        """Notes may be cleared with an empty string; tracking only replaced."""
        if notes is not None:
            self.notes = notes
        if tracking_number:
            self.tracking_number = tracking_number
        self._touch()

    # --- Computed properties --------------------------------------------------

    @property
    def holds_reservation(self) -> bool:
        return self.status in RESERVING_STATUSES

    def quantities_by_product(self) -> dict[str, int]:
        """Units per product id, merging lines that differ only by size/colour."""
        result: dict[str, int] = {}
        for item in self.items:
            result[item.product_id] = result.get(item.product_id, 0) + item.quantity.value
        return result

    # --- Internal helpers -----------------------------------------------------

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
