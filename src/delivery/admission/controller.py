"""Admission controller — reserve, commit and release one unit of slot capacity.

Checkout reserves before the order exists, persists the order, then commits.
If persistence fails the reservation is released again, so a slot never
carries a claim without an order behind it for longer than one request.

A rejected reservation is never moved to another slot: the caller gets a typed
``SlotRejected`` subclass and decides what to show.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import uuid4

import structlog

from delivery.admission.ledger import SlotKey, SlotLedger, get_ledger
from delivery.errors import SlotFull, SlotInactive, SlotUnknown
from delivery.slots.catalog import SlotCatalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    """A held unit of capacity in one (supplier, day, label) slot."""

    reservation_id: str
    supplier_id: str
    day: date
    label: str
    reserved_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> SlotKey:
        return SlotKey(supplier_id=self.supplier_id, day=self.day, label=self.label)


class AdmissionController:
    def __init__(self, ledger: SlotLedger | None = None, catalog: SlotCatalog | None = None):
        self._ledger = ledger
        self._catalog = catalog or SlotCatalog()

    @property
    def ledger(self) -> SlotLedger:
        return self._ledger or get_ledger()

    def reserve(self, supplier_id, day, label, reservation_id=None) -> Reservation:
        """Claim one unit of capacity or raise SlotUnknown / SlotInactive / SlotFull."""
        key = SlotKey.of(supplier_id, day, label or "")
        slot = self._catalog.find(key.supplier_id, key.label) if key.label else None
        if slot is None:
            raise SlotUnknown(key.supplier_id, key.label, key.day)
        if not slot.is_active:
            raise SlotInactive(key.supplier_id, key.label, key.day)

        reservation_id = str(reservation_id or uuid4())
        if not self.ledger.claim(key, reservation_id, slot.max_orders_per_day):
            logger.info(
                "Slot full",
                supplier_id=key.supplier_id,
                day=key.day.isoformat(),
                label=key.label,
                capacity=slot.max_orders_per_day,
            )
            raise SlotFull(key.supplier_id, key.label, key.day)

        logger.info(
            "Slot reserved",
            reservation_id=reservation_id,
            supplier_id=key.supplier_id,
            day=key.day.isoformat(),
            label=key.label,
        )
        return Reservation(
            reservation_id=reservation_id,
            supplier_id=key.supplier_id,
            day=key.day,
            label=key.label,
        )

    def commit(self, reservation: Reservation) -> bool:
        committed = self.ledger.commit(reservation.key, reservation.reservation_id)
        if not committed:
            logger.warning(
                "Commit of a reservation that is no longer held",
                reservation_id=reservation.reservation_id,
                supplier_id=reservation.supplier_id,
                label=reservation.label,
            )
        return committed

    def release(self, supplier_id, day, label, reservation_id) -> bool:
        """Give a unit back. Releasing twice is a no-op and returns False."""
        key = SlotKey.of(supplier_id, day, label)
        released = self.ledger.release(key, reservation_id)
        logger.info(
            "Slot released" if released else "Slot release ignored",
            reservation_id=str(reservation_id),
            supplier_id=key.supplier_id,
            day=key.day.isoformat(),
            label=key.label,
        )
        return released

    def holds(self, supplier_id, day, label, reservation_id) -> bool:
        return self.ledger.holds(SlotKey.of(supplier_id, day, label), reservation_id)
