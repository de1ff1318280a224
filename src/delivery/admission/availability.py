"""Availability calculator — booked and remaining capacity per slot for a day.

Reads the same ledger the admission controller mutates, so a successful
reservation shows up in the very next availability read.
"""

from dataclasses import asdict, dataclass
from enum import Enum

from delivery.admission.ledger import SlotKey, SlotLedger, as_day, get_ledger
from delivery.slots.catalog import SlotCatalog


class SlotHint(Enum):
    UNAVAILABLE = "Unavailable"
    FULL = "Full"
    LIMITED = "Limited"
    AVAILABLE = "Available"


@dataclass(frozen=True)
class SlotAvailability:
    label: str
    max_orders_per_day: int
    booked: int
    available: int
    is_active: bool

    @property
    def hint(self) -> SlotHint:
        """Display hint for the checkout page, derived from the numbers only."""
        if not self.is_active:
            return SlotHint.UNAVAILABLE
        if self.available == 0:
            return SlotHint.FULL
        if self.available == 1:
            return SlotHint.LIMITED
        return SlotHint.AVAILABLE

    def to_dict(self) -> dict:
        return {**asdict(self), "hint": self.hint.value}


class AvailabilityCalculator:
    def __init__(self, ledger: SlotLedger | None = None, catalog: SlotCatalog | None = None):
        self._ledger = ledger
        self._catalog = catalog or SlotCatalog()

    @property
    def ledger(self) -> SlotLedger:
        return self._ledger or get_ledger()

    def get_availability(self, supplier_id, day) -> list[SlotAvailability]:
        """Every configured label of the supplier, inactive ones included."""
        day = as_day(day)
        result = []
        for slot in self._catalog.list_slots(supplier_id):
            capacity = slot.max_orders_per_day or 0
            booked = self.ledger.booked(SlotKey.of(supplier_id, day, slot.label))
            available = max(0, capacity - booked) if slot.is_active else 0
            result.append(
                SlotAvailability(
                    label=slot.label,
                    max_orders_per_day=capacity,
                    booked=booked,
                    available=available,
                    is_active=bool(slot.is_active),
                )
            )
        return result
