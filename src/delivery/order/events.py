"""Order domain events — immutable facts about an order's lifecycle.

All events are past tense and versioned. Scheduled days travel as ISO date
strings (YYYY-MM-DD).
"""

from protean.fields import DateTime, Identifier, String

from delivery.domain import delivery


@delivery.event(part_of="Order")
class OrderPlaced:
    """An order was admitted into a delivery slot."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    site_id = Identifier(required=True)
    scheduled_day = String(required=True, max_length=10)
    scheduled_slot_label = String(required=True, max_length=50)
    placed_at = DateTime(required=True)


@delivery.event(part_of="Order")
class OrderAccepted:
    """The supplier accepted the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    accepted_at = DateTime(required=True)


@delivery.event(part_of="Order")
class OrderDispatched:
    """Materials left the supplier's yard."""

    __version__ = 1

    order_id = Identifier(required=True)
    dispatched_at = DateTime(required=True)


@delivery.event(part_of="Order")
class OrderDelivered:
    """Materials were delivered to the site."""

    __version__ = 1

    order_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    scheduled_day = String(required=True, max_length=10)
    scheduled_slot_label = String(required=True, max_length=50)
    delivered_at = DateTime(required=True)


@delivery.event(part_of="Order")
class OrderSlaClassified:
    """A delivered order was classified against its booked slot window."""

    __version__ = 1

    order_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    sla_status = String(required=True, max_length=20)
    classified_at = DateTime(required=True)


@delivery.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its slot claim handed back."""

    __version__ = 1

    order_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    scheduled_day = String(required=True, max_length=10)
    scheduled_slot_label = String(required=True, max_length=50)
    previous_status = String(required=True, max_length=20)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)
