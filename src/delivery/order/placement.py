"""Order placement — PlaceOrder command, handler, and the checkout service.

Checkout runs reserve → persist → commit. The handler only creates an order
for a slot claim that is still held, so an order can never exist without the
capacity it consumes.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.admission.controller import AdmissionController
from delivery.domain import delivery
from delivery.order.order import Order
from delivery.slots.window import parse_scheduled_slot

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Order")
class PlaceOrder:
    order_id = Identifier(required=True)  # the reservation id
    customer_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    site_id = Identifier(required=True)
    scheduled_day = String(required=True, max_length=10)  # ISO date
    scheduled_slot_label = String(required=True, max_length=50)


@delivery.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        admission = AdmissionController()
        if not admission.holds(
            command.supplier_id,
            command.scheduled_day,
            command.scheduled_slot_label,
            command.order_id,
        ):
            raise ValidationError({"scheduled_slot": ["No slot reservation is held for this order"]})

        order = Order.place(
            order_id=command.order_id,
            customer_id=command.customer_id,
            supplier_id=command.supplier_id,
            site_id=command.site_id,
            scheduled_day=command.scheduled_day,
            slot_label=command.scheduled_slot_label,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)


class Checkout:
    """Customer-facing booking flow."""

    def __init__(self, admission: AdmissionController | None = None):
        self._admission = admission or AdmissionController()

    def place_order(
        self,
        customer_id,
        supplier_id,
        site_id,
        day=None,
        label=None,
        scheduled_slot: str | None = None,
    ) -> Order:
        """Book an order into a slot.

        Either pass ``day`` and ``label`` or the raw ``scheduled_slot`` string
        from the checkout form ("Today, 8–11 AM"). Raises a ``SlotRejected``
        subclass when the slot cannot take the order.
        """
        if scheduled_slot:
            day, label = parse_scheduled_slot(scheduled_slot)
        elif day is None or not label:
            raise ValidationError({"scheduled_slot": ["Scheduled day and slot label are required"]})

        reservation = self._admission.reserve(supplier_id, day, label)
        try:
            current_domain.process(
                PlaceOrder(
                    order_id=reservation.reservation_id,
                    customer_id=customer_id,
                    supplier_id=reservation.supplier_id,
                    site_id=site_id,
                    scheduled_day=reservation.day.isoformat(),
                    scheduled_slot_label=reservation.label,
                ),
                asynchronous=False,
            )
        except Exception:
            self._admission.release(
                reservation.supplier_id,
                reservation.day,
                reservation.label,
                reservation.reservation_id,
            )
            logger.warning(
                "Order placement failed, reservation released",
                reservation_id=reservation.reservation_id,
                supplier_id=reservation.supplier_id,
                label=reservation.label,
            )
            raise

        self._admission.commit(reservation)
        logger.info(
            "Order placed",
            order_id=reservation.reservation_id,
            supplier_id=reservation.supplier_id,
            day=reservation.day.isoformat(),
            label=reservation.label,
        )
        return current_domain.repository_for(Order).get(reservation.reservation_id)
