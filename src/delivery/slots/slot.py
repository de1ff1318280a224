"""SlotDefinition aggregate (CQRS) — one named delivery window of a supplier.

A supplier publishes a small set of labelled slots ("8–11 AM", "2–5 PM", ...),
each with a daily order capacity. The label is free text and doubles as the
source of the SLA time window, so it is never renamed: suppliers deactivate a
slot instead of deleting it, because historical orders reference the label by
value.

Identity is derived from (supplier_id, label), which makes the pair unique and
lets concurrent upserts of the same label converge on one record.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from delivery.domain import delivery
from delivery.errors import InvalidCapacity
from delivery.slots.events import SlotConfigured, SlotUpdated

DEFAULT_SLOTS = [
    {"label": "8–11 AM", "max_orders_per_day": 5},
    {"label": "11–2 PM", "max_orders_per_day": 4},
    {"label": "2–5 PM", "max_orders_per_day": 3},
]


def slot_id_for(supplier_id, label: str) -> str:
    return f"{supplier_id}::{label.strip()}"


def validate_capacity(label, max_orders_per_day) -> None:
    if max_orders_per_day is None or max_orders_per_day < 0:
        raise InvalidCapacity(label, max_orders_per_day)


@delivery.aggregate
class SlotDefinition:
    """A supplier's delivery slot and how many orders it absorbs per day."""

    supplier_id = Identifier(required=True)
    label = String(required=True, max_length=50)
    max_orders_per_day = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    position = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def configure(cls, supplier_id, label, max_orders_per_day, is_active=True, position=0):
        """Publish a new slot label for a supplier."""
        label = (label or "").strip()
        if not label:
            raise ValidationError({"label": ["Slot label is required"]})
        validate_capacity(label, max_orders_per_day)

        now = datetime.now(UTC)
        slot = cls(
            id=slot_id_for(supplier_id, label),
            supplier_id=str(supplier_id),
            label=label,
            max_orders_per_day=max_orders_per_day,
            is_active=is_active,
            position=position,
            created_at=now,
            updated_at=now,
        )
        slot.raise_(
            SlotConfigured(
                slot_id=str(slot.id),
                supplier_id=str(supplier_id),
                label=label,
                max_orders_per_day=max_orders_per_day,
                is_active=is_active,
                position=position,
                configured_at=now,
            )
        )
        return slot

    def reconfigure(self, max_orders_per_day, is_active):
        """Change capacity and/or active flag. Last writer wins."""
        validate_capacity(self.label, max_orders_per_day)

        previous_capacity = self.max_orders_per_day
        previously_active = self.is_active
        if previous_capacity == max_orders_per_day and previously_active == is_active:
            return

        now = datetime.now(UTC)
        self.max_orders_per_day = max_orders_per_day
        self.is_active = is_active
        self.updated_at = now
        self.raise_(
            SlotUpdated(
                slot_id=str(self.id),
                supplier_id=str(self.supplier_id),
                label=self.label,
                previous_max_orders_per_day=previous_capacity,
                max_orders_per_day=max_orders_per_day,
                previously_active=previously_active,
                is_active=is_active,
                updated_at=now,
            )
        )

    def to_summary(self) -> dict:
        return {
            "label": self.label,
            "max_orders_per_day": self.max_orders_per_day,
            "is_active": self.is_active,
        }


@delivery.repository(part_of=SlotDefinition)
class SlotDefinitionRepository:
    """Lookups by supplier and label on top of the standard CRUD repository."""

    def for_supplier(self, supplier_id) -> list[SlotDefinition]:
        """All slots of a supplier, active or not, in configured order."""
        slots = self._dao.query.filter(supplier_id=str(supplier_id)).all().items
        return sorted(slots, key=lambda s: s.position or 0)

    def find(self, supplier_id, label: str) -> SlotDefinition | None:
        return self._dao.query.filter(id=slot_id_for(supplier_id, label)).all().first
