"""Hands a cancelled order's slot claim back to admission.

Runs on ``OrderCancelled``, so every cancellation path releases the claim,
whether it went through ``OrderLifecycle`` or straight through the
``TransitionOrder`` command. ``CANCELLED`` is terminal, so the event is raised
at most once per order.
"""

from protean import handle

from delivery.admission.controller import AdmissionController
from delivery.domain import delivery
from delivery.order.events import OrderCancelled
from delivery.order.order import Order


@delivery.event_handler(part_of=Order)
class SlotReleaseHandler:
    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        AdmissionController().release(
            event.supplier_id,
            event.scheduled_day,
            event.scheduled_slot_label,
            str(event.order_id),
        )
