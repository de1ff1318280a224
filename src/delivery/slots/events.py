"""Slot catalog events — facts about a supplier's slot configuration."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from delivery.domain import delivery


@delivery.event(part_of="SlotDefinition")
class SlotConfigured:
    """A supplier published a new delivery slot label."""

    __version__ = 1

    slot_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    label = String(required=True, max_length=50)
    max_orders_per_day = Integer(required=True)
    is_active = Boolean(required=True)
    position = Integer(required=True)
    configured_at = DateTime(required=True)


@delivery.event(part_of="SlotDefinition")
class SlotUpdated:
    """Capacity or availability of an existing slot label changed."""

    __version__ = 1

    slot_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    label = String(required=True, max_length=50)
    previous_max_orders_per_day = Integer(required=True)
    max_orders_per_day = Integer(required=True)
    previously_active = Boolean(required=True)
    is_active = Boolean(required=True)
    updated_at = DateTime(required=True)
