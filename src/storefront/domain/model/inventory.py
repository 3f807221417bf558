"""InventoryLedger aggregate: stock and reservations per sellable product.

Each product has one ledger that splits its units into physical stock and
the part of it held by open orders.  ``available_quantity`` and
``inventory_status`` are derived: every mutating method recomputes them as
its last step, and nothing else assigns them.

The ``history`` list is the audit trail.  Entries are only ever appended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import InsufficientStockError, ValidationError

DEFAULT_LOW_STOCK_THRESHOLD = 10


class InventoryStatus(Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class MovementType(Enum):
    STOCK_IN = "stock_in"
    STOCK_OUT = "stock_out"
    ADJUSTMENT = "adjustment"
    RESERVATION = "reservation"
    RELEASE = "release"
    DAMAGE = "damage"
    RETURN = "return"


# Movement types an admin may record by hand.
MANUAL_MOVEMENT_TYPES = frozenset(
    {MovementType.STOCK_IN, MovementType.STOCK_OUT, MovementType.ADJUSTMENT}
)


@dataclass(frozen=True)
class InventoryHistoryEntry:
    """One line of the audit trail.

    ``previous_quantity`` / ``new_quantity`` refer to the counter the
    movement touched: reserved units for reservation, release and
    reconciliation entries, physical stock for everything else.
    """

    date: datetime
    type: MovementType
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: str
    reference: str | None = None
    performed_by: str | None = None
    notes: str | None = None


def derive_status(available: int, low_stock_threshold: int) -> InventoryStatus:
    if available <= 0:
        return InventoryStatus.OUT_OF_STOCK
    if available <= low_stock_threshold:
        return InventoryStatus.LOW_STOCK
    return InventoryStatus.IN_STOCK


@dataclass
class InventoryLedger:
    """Aggregate root for inventory tracking.

    Invariants:
    - ``available_quantity == stock_quantity - reserved_quantity``
    - ``reserved_quantity`` is never negative (releases clamp at 0)
    - ``stock_quantity`` is never negative

    ``available_quantity`` may go negative after a manual stock removal;
    the status then reads ``out_of_stock`` and new reservations fail.
    """

    product_id: str
    title: str
    stock_quantity: int = 0
    reserved_quantity: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    manage_stock: bool = True
    history: list[InventoryHistoryEntry] = field(default_factory=list)
    available_quantity: int = field(init=False, default=0)
    inventory_status: InventoryStatus = field(init=False, default=InventoryStatus.OUT_OF_STOCK)

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        if self.reserved_quantity < 0:
            raise ValidationError("Reserved quantity cannot be negative")
        if self.low_stock_threshold < 0:
            raise ValidationError("Low stock threshold cannot be negative")
        self._refresh()

    # --- Order-driven movements ----------------------------------------------

    def reserve(
        self,
        quantity: int,
        reason: str,
        reference: str | None = None,
        performed_by: str | None = None,
    ) -> None:
        """Hold *quantity* units for an open order.

        Raises InsufficientStockError if fewer units are available.
        """
        _require_positive(quantity, "Reservation")
        if self.available_quantity < quantity:
            raise InsufficientStockError(
                f"Insufficient stock for {self.title}. "
                f"Available: {self.available_quantity}, Requested: {quantity}",
                title=self.title,
                available=self.available_quantity,
                requested=quantity,
            )
        previous = self.reserved_quantity
        self.reserved_quantity += quantity
        self._record(
            MovementType.RESERVATION, quantity, previous, self.reserved_quantity,
            reason, reference, performed_by,
        )
        self._refresh()

    def release(
        self,
        quantity: int,
        reason: str,
        reference: str | None = None,
        performed_by: str | None = None,
    ) -> int:
        """Give back reserved units.  Returns how many were actually released."""
        _require_positive(quantity, "Release")
        previous = self.reserved_quantity
        self.reserved_quantity = max(0, self.reserved_quantity - quantity)
        released = previous - self.reserved_quantity
        self._record(
            MovementType.RELEASE, released, previous, self.reserved_quantity,
            reason, reference, performed_by,
        )
        self._refresh()
        return released

    def release_remaining(
        self,
        quantity: int,
        reason: str,
        reference: str | None = None,
        performed_by: str | None = None,
    ) -> int:
        """Release ``min(quantity, reserved_quantity)`` units.

        Cleanup after delivery: normally nothing is left reserved once the
        order shipped, in which case no history entry is written.
        """
        _require_positive(quantity, "Release")
        to_release = min(quantity, self.reserved_quantity)
        if to_release == 0:
            return 0
        previous = self.reserved_quantity
        self.reserved_quantity -= to_release
        self._record(
            MovementType.RELEASE, to_release, previous, self.reserved_quantity,
            reason, reference, performed_by,
        )
        self._refresh()
        return to_release

    def ship_out(
        self,
        quantity: int,
        reason: str,
        reference: str | None = None,
        performed_by: str | None = None,
    ) -> None:
        """Dispatch units: they leave both the physical and reserved pools."""
        _require_positive(quantity, "Ship")
        if self.stock_quantity < quantity:
            raise InsufficientStockError(
                f"Insufficient stock to ship {self.title}. "
                f"Available: {self.stock_quantity}, Needed: {quantity}",
                title=self.title,
                available=self.stock_quantity,
                requested=quantity,
            )
        previous = self.stock_quantity
        self.stock_quantity -= quantity
        self.reserved_quantity = max(0, self.reserved_quantity - quantity)
        self._record(
            MovementType.STOCK_OUT, quantity, previous, self.stock_quantity,
            reason, reference, performed_by,
        )
        self._refresh()

    def restock(
        self,
        quantity: int,
        reason: str,
        reference: str | None = None,
        performed_by: str | None = None,
    ) -> None:
        """Put shipped units back on the shelf (reversal of ``ship_out``)."""
        _require_positive(quantity, "Restock")
        previous = self.stock_quantity
        self.stock_quantity += quantity
        self._record(
            MovementType.STOCK_IN, quantity, previous, self.stock_quantity,
            reason, reference, performed_by,
        )
        self._refresh()

    # --- Admin movements -----------------------------------------------------

    def manual_adjust(
        self,
        delta: int,
        reason: str,
        movement_type: MovementType | None = None,
        performed_by: str | None = None,
        notes: str | None = None,
    ) -> int:
        """Add (delta > 0) or remove (delta < 0) physical stock by hand.

        Removal clamps at zero.  The history type defaults to ``stock_in`` /
        ``stock_out`` by sign; ``adjustment`` may be passed for corrections.
        Returns the signed change actually applied.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError("Adjustment quantity must be a non-zero integer")
        if movement_type is None:
            movement_type = MovementType.STOCK_IN if delta > 0 else MovementType.STOCK_OUT
        if movement_type not in MANUAL_MOVEMENT_TYPES:
            raise ValidationError(
                f"Manual adjustments cannot be recorded as '{movement_type.value}'"
            )
        if movement_type is MovementType.STOCK_IN and delta < 0:
            raise ValidationError("A stock_in adjustment must add stock")
        if movement_type is MovementType.STOCK_OUT and delta > 0:
            raise ValidationError("A stock_out adjustment must remove stock")

        previous = self.stock_quantity
        self.stock_quantity = max(0, self.stock_quantity + delta)
        applied = self.stock_quantity - previous
        self._record(
            movement_type, abs(applied), previous, self.stock_quantity,
            reason, None, performed_by, notes,
        )
        self._refresh()
        return applied

    def resync_reserved(
        self,
        reserved: int,
        reason: str,
        performed_by: str | None = None,
        notes: str | None = None,
    ) -> bool:
        """Overwrite ``reserved_quantity`` with a recomputed value.

        Appends an ``adjustment`` entry only when the value changed.
        """
        if reserved < 0:
            raise ValidationError("Reserved quantity cannot be negative")
        previous = self.reserved_quantity
        self.reserved_quantity = reserved
        changed = previous != reserved
        if changed:
            self._record(
                MovementType.ADJUSTMENT, abs(reserved - previous), previous, reserved,
                reason, None, performed_by, notes,
            )
        self._refresh()
        return changed

    def update_settings(
        self,
        title: str | None = None,
        low_stock_threshold: int | None = None,
        manage_stock: bool | None = None,
    ) -> None:
        """Change catalog-side settings; the status follows a new threshold."""
        if title is not None:
            if not title.strip():
                raise ValidationError("Product title cannot be empty")
            self.title = title.strip()
        if low_stock_threshold is not None:
            if low_stock_threshold < 0:
                raise ValidationError("Low stock threshold cannot be negative")
            self.low_stock_threshold = low_stock_threshold
        if manage_stock is not None:
            self.manage_stock = manage_stock
        self._refresh()

    # --- Internal helpers ----------------------------------------------------

    def _refresh(self) -> None:
        self.available_quantity = self.stock_quantity - self.reserved_quantity
        self.inventory_status = derive_status(
            self.available_quantity, self.low_stock_threshold
        )

    def _record(
        self,
        movement_type: MovementType,
        quantity: int,
        previous: int,
        new: int,
        reason: str,
        reference: str | None,
        performed_by: str | None,
        notes: str | None = None,
    ) -> None:
        self.history.append(
            InventoryHistoryEntry(
                date=datetime.now(timezone.utc),
                type=movement_type,
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=new,
                reason=reason,
                reference=reference,
                performed_by=performed_by,
                notes=notes,
            )
        )


def _require_positive(quantity: int, action: str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f"{action} quantity must be positive")
