"""Data Transfer Objects: plain containers that cross layer boundaries.

Inputs arrive as the JSON bodies the storefront posts (camelCase keys) and
are parsed into typed specs here; outputs are flat, display-ready views of
the aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import Order


def _require(payload: dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(payload, dict):
        raise ValidationError(f"{where} must be an object")
    value = payload.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{where}.{key} is required")
    return value


@dataclass(frozen=True)
class ShippingInfoSpec:
    full_name: str
    email: str
    phone: str
    address: str
    city: str
    district: str
    zip_code: str | None = None
    country: str | None = None
    delivery_instructions: str | None = None


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one cart line as submitted at checkout."""

    product_id: str
    title: str
    price: str
    quantity: int
    size: str | None = None
    color: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class OrderSubmission:
    """Input: the checkout request body."""

    shipping_info: ShippingInfoSpec
    items: list[OrderItemSpec]
    payment_method: str
    delivery_type: str
    subtotal: str
    shipping_charge: str
    total: str
    estimated_delivery: str
    discount_total: str = "0"
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> OrderSubmission:
        """Parse a ``POST /orders``-style body, rejecting malformed input."""
        ship = _require(payload, "shippingInfo", "order")
        raw_items = _require(payload, "items", "order")
        if not isinstance(raw_items, list):
            raise ValidationError("order.items must be a list")

        items = []
        for n, raw in enumerate(raw_items):
            where = f"items[{n}]"
            quantity = _require(raw, "quantity", where)
            if isinstance(quantity, bool) or not isinstance(quantity, int):
                raise ValidationError(f"{where}.quantity must be an integer")
            items.append(
                OrderItemSpec(
                    product_id=str(_require(raw, "productId", where)),
                    title=str(_require(raw, "title", where)),
                    price=str(_require(raw, "price", where)),
                    quantity=quantity,
                    size=raw.get("size"),
                    color=raw.get("color"),
                    image=raw.get("image"),
                )
            )

        return cls(
            shipping_info=ShippingInfoSpec(
                full_name=str(_require(ship, "fullName", "shippingInfo")),
                email=str(_require(ship, "email", "shippingInfo")),
                phone=str(_require(ship, "phone", "shippingInfo")),
                address=str(_require(ship, "address", "shippingInfo")),
                city=str(_require(ship, "city", "shippingInfo")),
                district=str(_require(ship, "district", "shippingInfo")),
                zip_code=ship.get("zipCode"),
                country=ship.get("country"),
                delivery_instructions=ship.get("deliveryInstructions"),
            ),
            items=items,
            payment_method=str(payload.get("paymentMethod") or "cod"),
            delivery_type=str(_require(payload, "deliveryType", "order")),
            subtotal=str(_require(payload, "subtotal", "order")),
            shipping_charge=str(_require(payload, "shippingCharge", "order")),
            total=str(_require(payload, "total", "order")),
            estimated_delivery=str(_require(payload, "estimatedDelivery", "order")),
            discount_total=str(payload.get("discountTotal") or "0"),
            notes=payload.get("notes"),
        )


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    title: str
    quantity: int
    price: str  # formatted, e.g. "BDT 1200.00"
    line_total: str
    size: str | None
    color: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    customer_name: str
    status: str
    payment_status: str
    payment_method: str
    items: list[OrderLineItemDTO]
    subtotal: str
    discount_total: str
    shipping_charge: str
    total: str
    notes: str | None
    tracking_number: str | None
    created_at: str


@dataclass(frozen=True)
class StatusUpdateDTO:
    """Output: result of a status change."""

    order: OrderDTO
    previous_status: str
    inventory_updated: bool


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        customer_name=order.shipping_info.full_name,
        status=order.status.value,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                title=item.title,
                quantity=item.quantity.value,
                price=str(item.price),
                line_total=str(item.line_total),
                size=item.size,
                color=item.color,
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        discount_total=str(order.discount_total),
        shipping_charge=str(order.shipping_charge),
        total=str(order.total),
        notes=order.notes,
        tracking_number=order.tracking_number,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
