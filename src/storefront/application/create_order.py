"""Application service: Create Order use case (checkout).

Builds the Order aggregate from the submitted cart, then, in one
transaction, reserves stock for every line item and persists the order.
A shortfall on any product aborts the whole transaction: no ledger keeps a
partial reservation and no order is stored.
"""

from __future__ import annotations

import structlog

from storefront.application.dto import OrderDTO, OrderSubmission, order_to_dto
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import (
    DeliveryType,
    Order,
    OrderLineItem,
    PaymentMethod,
    ShippingInfo,
    generate_order_number,
)
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.transaction_manager import TransactionManager
from storefront.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
        transactions: TransactionManager,
    ) -> None:
        self._order_repo = order_repo
        self._inventory_repo = inventory_repo
        self._transactions = transactions

    def handle(self, submission: OrderSubmission, performed_by: str | None = None) -> OrderDTO:
        """Place a new order.

        Steps:
        1. Validate the submission into an Order (no inventory touched yet).
        2. In a transaction: reserve stock per line item, then persist.
        3. Return a DTO of the stored order.
        """
        order = self._build_order(submission)

        def _place() -> Order:
            order.id = None  # a retried attempt must not reuse a rolled-back ID
            while self._order_repo.get_by_order_number(order.order_number) is not None:
                order.order_number = generate_order_number()
            InventoryReservationService(self._inventory_repo).reserve_for_order(
                order, performed_by=performed_by
            )
            self._order_repo.save(order)
            return order

        placed = self._transactions.run(_place)

        logger.info(
            "order_created",
            order_id=placed.id,
            order_number=placed.order_number,
            items=len(placed.items),
            total=str(placed.total),
        )
        return order_to_dto(placed)

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _build_order(submission: OrderSubmission) -> Order:
        ship = submission.shipping_info
        shipping_info = ShippingInfo(
            full_name=ship.full_name,
            email=ship.email,
            phone=ship.phone,
            address=ship.address,
            city=ship.city,
            district=ship.district,
            zip_code=ship.zip_code,
            country=ship.country or "Bangladesh",
            delivery_instructions=ship.delivery_instructions,
        )
        items = [
            OrderLineItem(
                product_id=spec.product_id,
                title=spec.title,
                price=Money.of(spec.price),  # <-- price snapshot
                quantity=Quantity(spec.quantity),
                size=spec.size,
                color=spec.color,
                image=spec.image,
            )
            for spec in submission.items
        ]
        return Order.create(
            shipping_info=shipping_info,
            items=items,
            subtotal=Money.of(submission.subtotal),
            discount_total=Money.of(submission.discount_total),
            shipping_charge=Money.of(submission.shipping_charge),
            total=Money.of(submission.total),
            delivery_type=_parse_enum(DeliveryType, submission.delivery_type, "delivery type"),
            estimated_delivery=submission.estimated_delivery,
            payment_method=_parse_enum(PaymentMethod, submission.payment_method, "payment method"),
            notes=submission.notes,
        )


def _parse_enum(enum_cls, raw: str, label: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label} {raw!r} (expected one of: {allowed})") from None
