"""Order lifecycle — supplier status updates.

Delivering stamps ``delivered_at`` and stores the SLA classification on the
order. Cancelling raises ``OrderCancelled``; ``SlotReleaseHandler`` hands the
slot claim back once the cancellation is committed.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from delivery.domain import delivery
from delivery.order.order import Order, OrderStatus
from delivery.order.sla import SlaEvaluator

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Order")
class TransitionOrder:
    order_id = Identifier(required=True)
    target_status = String(required=True, choices=OrderStatus)
    reason = String(max_length=500)


@delivery.command_handler(part_of=Order)
class TransitionOrderHandler:
    @handle(TransitionOrder)
    def transition_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        target = OrderStatus(command.target_status)

        previous = order.transition_to(target, reason=command.reason)
        if target == OrderStatus.DELIVERED:
            order.record_sla(SlaEvaluator.from_env().evaluate(order))

        repo.add(order)
        return previous.value


def coerce_status(value) -> OrderStatus:
    """Accept an ``OrderStatus``, its value ("Delivered") or its name ("DELIVERED")."""
    if isinstance(value, OrderStatus):
        return value
    raw = str(value or "").strip()
    for status in OrderStatus:
        if raw.lower() in (status.value.lower(), status.name.lower()):
            return status
    raise ValidationError({"status": [f"Unknown order status: {value}"]})


class OrderLifecycle:
    def transition(self, order_id, target_status, reason=None) -> Order:
        """Move an order forward. Raises ``InvalidTransition`` for illegal moves."""
        target = coerce_status(target_status)
        previous = current_domain.process(
            TransitionOrder(order_id=str(order_id), target_status=target.value, reason=reason),
            asynchronous=False,
        )
        order = self.get(order_id)

        logger.info(
            "Order transitioned",
            order_id=str(order.id),
            previous_status=previous,
            status=order.status,
            sla_status=order.sla_status,
        )
        return order

    def get(self, order_id) -> Order:
        return current_domain.repository_for(Order).get(str(order_id))
