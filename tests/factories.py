"""Builders for the aggregates and request bodies used across tests."""

from __future__ import annotations

from typing import Any

from storefront.domain.model.inventory import InventoryLedger
from storefront.domain.model.order import (
    DeliveryType,
    Order,
    OrderLineItem,
    OrderStatus,
    ShippingInfo,
)
from storefront.domain.model.value_objects import Money, Quantity


def make_ledger(
    product_id: str = "p1",
    title: str = "Panjabi",
    stock: int = 10,
    reserved: int = 0,
    threshold: int = 2,
    manage_stock: bool = True,
) -> InventoryLedger:
    return InventoryLedger(
        product_id=product_id,
        title=title,
        stock_quantity=stock,
        reserved_quantity=reserved,
        low_stock_threshold=threshold,
        manage_stock=manage_stock,
    )


def make_shipping_info() -> ShippingInfo:
    return ShippingInfo(
        full_name="Rahim Uddin",
        email="rahim@example.com",
        phone="01700000000",
        address="House 1, Road 2",
        city="Dhaka",
        district="Dhaka",
    )


def make_order(
    lines: list[tuple[str, int]] | None = None,
    status: OrderStatus = OrderStatus.PENDING,
    order_id: int | None = None,
) -> Order:
    """Order with one line per ``(product_id, quantity)`` pair."""
    lines = lines or [("p1", 1)]
    items = [
        OrderLineItem(
            product_id=product_id,
            title=f"Product {product_id}",
            price=Money.of("100"),
            quantity=Quantity(qty),
        )
        for product_id, qty in lines
    ]
    order = Order.create(
        shipping_info=make_shipping_info(),
        items=items,
        subtotal=Money.of("100"),
        shipping_charge=Money.of("60"),
        total=Money.of("160"),
        delivery_type=DeliveryType.DHAKA,
        estimated_delivery="2-3 days",
    )
    order.status = status
    order.id = order_id
    return order


def order_payload(
    lines: list[tuple[str, int]] | None = None, **overrides: Any
) -> dict[str, Any]:
    """Checkout body as the storefront posts it."""
    lines = lines or [("p1", 1)]
    payload: dict[str, Any] = {
        "shippingInfo": {
            "fullName": "Rahim Uddin",
            "email": "rahim@example.com",
            "phone": "01700000000",
            "address": "House 1, Road 2",
            "city": "Dhaka",
            "district": "Dhaka",
        },
        "items": [
            {
                "productId": product_id,
                "title": f"Product {product_id}",
                "price": 1200,
                "quantity": qty,
                "size": "M",
            }
            for product_id, qty in lines
        ],
        "paymentMethod": "cod",
        "deliveryType": "dhaka",
        "subtotal": 1200,
        "shippingCharge": 60,
        "total": 1260,
        "estimatedDelivery": "2-3 days",
    }
    payload.update(overrides)
    return payload
