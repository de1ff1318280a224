"""Slot catalog — commands, handler, and the supplier-facing catalog service.

Suppliers replace their slot set by label: labels not yet known are created,
known labels are updated, and labels left out of the request are untouched.
Removal is done by deactivating a slot, never by deleting it.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from delivery.domain import delivery
from delivery.slots.slot import DEFAULT_SLOTS, SlotDefinition, validate_capacity

logger = structlog.get_logger(__name__)


@delivery.command(part_of="SlotDefinition")
class UpsertSlots:
    """Create or update a supplier's slots by label."""

    supplier_id = Identifier(required=True)
    slots = Text(required=True)  # JSON list of {label, max_orders_per_day, is_active}


@delivery.command(part_of="SlotDefinition")
class EnsureDefaultSlots:
    """Seed the standard slot set for a supplier that has none yet."""

    supplier_id = Identifier(required=True)


def _normalise(slots_data):
    """Validate every entry up front so a bad row rejects the whole request."""
    normalised = []
    for entry in slots_data:
        label = (entry.get("label") or "").strip()
        if not label:
            raise ValidationError({"label": ["Slot label is required"]})
        capacity = entry.get("max_orders_per_day")
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise ValidationError({"max_orders_per_day": [f"Capacity for slot '{label}' must be an integer"]})
        validate_capacity(label, capacity)
        normalised.append(
            {
                "label": label,
                "max_orders_per_day": capacity,
                "is_active": bool(entry.get("is_active", True)),
            }
        )
    return normalised


@delivery.command_handler(part_of=SlotDefinition)
class SlotCatalogHandler:
    @handle(UpsertSlots)
    def upsert_slots(self, command):
        slots_data = json.loads(command.slots) if isinstance(command.slots, str) else command.slots
        entries = _normalise(slots_data or [])

        repo = current_domain.repository_for(SlotDefinition)
        existing = {slot.label: slot for slot in repo.for_supplier(command.supplier_id)}
        next_position = max((s.position or 0 for s in existing.values()), default=-1) + 1

        for entry in entries:
            slot = existing.get(entry["label"])
            if slot is None:
                slot = SlotDefinition.configure(
                    supplier_id=command.supplier_id,
                    label=entry["label"],
                    max_orders_per_day=entry["max_orders_per_day"],
                    is_active=entry["is_active"],
                    position=next_position,
                )
                next_position += 1
                existing[slot.label] = slot
            else:
                slot.reconfigure(
                    max_orders_per_day=entry["max_orders_per_day"],
                    is_active=entry["is_active"],
                )
            repo.add(slot)

        logger.info(
            "Slots upserted",
            supplier_id=str(command.supplier_id),
            labels=[e["label"] for e in entries],
        )

    @handle(EnsureDefaultSlots)
    def ensure_default_slots(self, command):
        repo = current_domain.repository_for(SlotDefinition)
        if repo.for_supplier(command.supplier_id):
            return

        for position, default in enumerate(DEFAULT_SLOTS):
            repo.add(
                SlotDefinition.configure(
                    supplier_id=command.supplier_id,
                    label=default["label"],
                    max_orders_per_day=default["max_orders_per_day"],
                    is_active=True,
                    position=position,
                )
            )
        logger.info("Default slots seeded", supplier_id=str(command.supplier_id))


class SlotCatalog:
    """Supplier-console entry points for reading and editing slot configuration."""

    def upsert_slots(self, supplier_id, slots: list[dict]) -> list[SlotDefinition]:
        current_domain.process(
            UpsertSlots(supplier_id=str(supplier_id), slots=json.dumps(slots)),
            asynchronous=False,
        )
        return self.list_slots(supplier_id)

    def list_slots(self, supplier_id) -> list[SlotDefinition]:
        return current_domain.repository_for(SlotDefinition).for_supplier(supplier_id)

    def ensure_default_slots(self, supplier_id) -> list[SlotDefinition]:
        current_domain.process(EnsureDefaultSlots(supplier_id=str(supplier_id)), asynchronous=False)
        return self.list_slots(supplier_id)

    def find(self, supplier_id, label) -> SlotDefinition | None:
        return current_domain.repository_for(SlotDefinition).find(supplier_id, label)
