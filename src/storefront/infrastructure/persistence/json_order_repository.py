"""Document-store-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime

from storefront.domain.model.order import (
    DeliveryType,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ShippingInfo,
)
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.document_store import JsonDocumentStore

_COLLECTION = "orders"


class JsonOrderRepository(OrderRepository):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        ids = [int(key) for key in self._store.keys(_COLLECTION)]
        return max(ids) + 1 if ids else 1

    def get_by_id(self, order_id: int) -> Order | None:
        raw = self._store.get(_COLLECTION, str(order_id))
        return self._to_domain(raw) if raw is not None else None

    def get_by_order_number(self, order_number: str) -> Order | None:
        for raw in self._store.find(_COLLECTION):
            if raw["orderNumber"] == order_number:
                return self._to_domain(raw)
        return None

    def list_by_status(self, statuses: frozenset[OrderStatus]) -> list[Order]:
        wanted = {s.value for s in statuses}
        return [
            self._to_domain(raw)
            for raw in self._store.find(_COLLECTION)
            if raw["status"] in wanted
        ]

    def save(self, order: Order) -> None:
        with self._store.transaction():
            if order.id is None:
                order.id = self.next_id()
            self._store.put(_COLLECTION, str(order.id), self._to_raw(order))

    def delete(self, order_id: int) -> None:
        self._store.remove(_COLLECTION, str(order_id))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        ship = order.shipping_info
        return {
            "id": order.id,
            "orderNumber": order.order_number,
            "shippingInfo": {
                "fullName": ship.full_name,
                "email": ship.email,
                "phone": ship.phone,
                "address": ship.address,
                "city": ship.city,
                "district": ship.district,
                "zipCode": ship.zip_code,
                "country": ship.country,
                "deliveryInstructions": ship.delivery_instructions,
            },
            "items": [
                {
                    "productId": item.product_id,
                    "title": item.title,
                    "price": str(item.price.amount),
                    "quantity": item.quantity.value,
                    "size": item.size,
                    "color": item.color,
                    "image": item.image,
                }
                for item in order.items
            ],
            "currency": order.total.currency,
            "subtotal": str(order.subtotal.amount),
            "discountTotal": str(order.discount_total.amount),
            "shippingCharge": str(order.shipping_charge.amount),
            "total": str(order.total.amount),
            "paymentMethod": order.payment_method.value,
            "paymentStatus": order.payment_status.value,
            "status": order.status.value,
            "deliveryType": order.delivery_type.value,
            "estimatedDelivery": order.estimated_delivery,
            "notes": order.notes,
            "trackingNumber": order.tracking_number,
            "createdAt": order.created_at.isoformat(),
            "updatedAt": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "BDT")
        ship = raw["shippingInfo"]
        return Order(
            id=raw["id"],
            order_number=raw["orderNumber"],
            shipping_info=ShippingInfo(
                full_name=ship["fullName"],
                email=ship["email"],
                phone=ship["phone"],
                address=ship["address"],
                city=ship["city"],
                district=ship["district"],
                zip_code=ship.get("zipCode"),
                country=ship.get("country") or "Bangladesh",
                delivery_instructions=ship.get("deliveryInstructions"),
            ),
            items=[
                OrderLineItem(
                    product_id=i["productId"],
                    title=i["title"],
                    price=Money.of(i["price"], currency),
                    quantity=Quantity(i["quantity"]),
                    size=i.get("size"),
                    color=i.get("color"),
                    image=i.get("image"),
                )
                for i in raw["items"]
            ],
            subtotal=Money.of(raw["subtotal"], currency),
            discount_total=Money.of(raw.get("discountTotal", "0"), currency),
            shipping_charge=Money.of(raw["shippingCharge"], currency),
            total=Money.of(raw["total"], currency),
            payment_method=PaymentMethod(raw["paymentMethod"]),
            payment_status=PaymentStatus(raw["paymentStatus"]),
            status=OrderStatus(raw["status"]),
            delivery_type=DeliveryType(raw["deliveryType"]),
            estimated_delivery=raw["estimatedDelivery"],
            notes=raw.get("notes"),
            tracking_number=raw.get("trackingNumber"),
            created_at=datetime.fromisoformat(raw["createdAt"]),
            updated_at=datetime.fromisoformat(raw["updatedAt"]),
        )
