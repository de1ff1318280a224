"""Order aggregate (CQRS) — an order admitted into a supplier's delivery slot.

The order keeps a denormalised copy of the slot label it was booked into, so
later capacity edits or deactivation of that label never alter history.

State Machine:
    PLACED → ACCEPTED → DISPATCHED → DELIVERED
    {PLACED, ACCEPTED} → CANCELLED

Materials already dispatched cannot be cancelled through this path.
"""

from datetime import UTC, date, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from delivery.domain import delivery
from delivery.errors import InvalidTransition
from delivery.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderDispatched,
    OrderPlaced,
    OrderSlaClassified,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "Placed"
    ACCEPTED = "Accepted"
    DISPATCHED = "Dispatched"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class SlaStatus(Enum):
    NOT_APPLICABLE = "Not_Applicable"
    ON_TIME = "On_Time"
    LATE = "Late"


_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.ACCEPTED, OrderStatus.CANCELLED},
    OrderStatus.ACCEPTED: {OrderStatus.DISPATCHED, OrderStatus.CANCELLED},
    OrderStatus.DISPATCHED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

# Statuses whose orders still hold a unit of slot capacity
CLAIMING_STATUSES = {
    OrderStatus.PLACED,
    OrderStatus.ACCEPTED,
    OrderStatus.DISPATCHED,
    OrderStatus.DELIVERED,
}


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@delivery.aggregate
class Order:
    customer_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    site_id = Identifier(required=True)
    scheduled_day = String(required=True, max_length=10)  # ISO date string
    scheduled_slot_label = String(required=True, max_length=50)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PLACED.value,
    )
    sla_status = String(choices=SlaStatus)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    accepted_at = DateTime()
    dispatched_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_id, customer_id, supplier_id, site_id, scheduled_day, slot_label):
        """Create an order in PLACED state for an already-reserved slot claim.

        The order id is the reservation id handed out by admission, which ties
        the persisted order to the capacity it consumes.
        """
        now = datetime.now(UTC)
        day = scheduled_day.isoformat() if isinstance(scheduled_day, date) else str(scheduled_day)
        order = cls(
            id=str(order_id),
            customer_id=str(customer_id),
            supplier_id=str(supplier_id),
            site_id=str(site_id),
            scheduled_day=day,
            scheduled_slot_label=slot_label,
            status=OrderStatus.PLACED.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                supplier_id=str(supplier_id),
                site_id=str(site_id),
                scheduled_day=day,
                scheduled_slot_label=slot_label,
                placed_at=now,
            )
        )
        return order

    @property
    def scheduled_date(self) -> date:
        return date.fromisoformat(self.scheduled_day)

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        if not self.can_transition_to(target_status):
            raise InvalidTransition(OrderStatus(self.status), target_status)

    def transition_to(self, target_status: OrderStatus, reason=None, at=None) -> OrderStatus:
        """Move to ``target_status`` and return the status the order left."""
        previous = OrderStatus(self.status)
        if target_status == OrderStatus.ACCEPTED:
            self.accept(at=at)
        elif target_status == OrderStatus.DISPATCHED:
            self.dispatch(at=at)
        elif target_status == OrderStatus.DELIVERED:
            self.deliver(delivered_at=at)
        elif target_status == OrderStatus.CANCELLED:
            self.cancel(reason=reason, at=at)
        else:
            raise InvalidTransition(previous, target_status)
        return previous

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def accept(self, at=None):
        """Supplier accepts the order."""
        self._assert_can_transition(OrderStatus.ACCEPTED)
        now = at or datetime.now(UTC)
        self.status = OrderStatus.ACCEPTED.value
        if not self.accepted_at:
            self.accepted_at = now
        self.updated_at = now
        self.raise_(OrderAccepted(order_id=str(self.id), accepted_at=now))

    def dispatch(self, at=None):
        """Materials leave the yard."""
        self._assert_can_transition(OrderStatus.DISPATCHED)
        now = at or datetime.now(UTC)
        self.status = OrderStatus.DISPATCHED.value
        if not self.dispatched_at:
            self.dispatched_at = now
        self.updated_at = now
        self.raise_(OrderDispatched(order_id=str(self.id), dispatched_at=now))

    def deliver(self, delivered_at=None):
        """Record delivery at the site. SLA is classified separately."""
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = delivered_at or datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                supplier_id=str(self.supplier_id),
                scheduled_day=self.scheduled_day,
                scheduled_slot_label=self.scheduled_slot_label,
                delivered_at=now,
            )
        )

    def record_sla(self, sla_status: SlaStatus):
        """Store the SLA classification computed for a delivered order."""
        self.sla_status = sla_status.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderSlaClassified(
                order_id=str(self.id),
                supplier_id=str(self.supplier_id),
                sla_status=sla_status.value,
                classified_at=now,
            )
        )

    def cancel(self, reason=None, at=None):
        """Cancel the order. Only PLACED or ACCEPTED orders can be cancelled."""
        previous = OrderStatus(self.status)
        self._assert_can_transition(OrderStatus.CANCELLED)
        now = at or datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                supplier_id=str(self.supplier_id),
                scheduled_day=self.scheduled_day,
                scheduled_slot_label=self.scheduled_slot_label,
                previous_status=previous.value,
                reason=reason,
                cancelled_at=now,
            )
        )

    def to_summary(self) -> dict:
        return {
            "order_id": str(self.id),
            "supplier_id": str(self.supplier_id),
            "site_id": str(self.site_id),
            "scheduled_day": self.scheduled_day,
            "scheduled_slot_label": self.scheduled_slot_label,
            "status": self.status,
            "sla_status": self.sla_status,
            "delivered_at": self.delivered_at.isoformat() if self.delivered_at else None,
        }


@delivery.repository(part_of=Order)
class OrderRepository:
    """Slot-level order queries used by admission and SLA reporting."""

    def claiming_slot(self, supplier_id, scheduled_day, label) -> list[Order]:
        """Orders still holding capacity in (supplier, day, label)."""
        day = scheduled_day.isoformat() if isinstance(scheduled_day, date) else str(scheduled_day)
        orders = (
            self._dao.query.filter(
                supplier_id=str(supplier_id),
                scheduled_day=day,
                scheduled_slot_label=label,
            )
            .all()
            .items
        )
        return [o for o in orders if OrderStatus(o.status) in CLAIMING_STATUSES]

    def delivered_for_supplier(self, supplier_id) -> list[Order]:
        orders = (
            self._dao.query.filter(
                supplier_id=str(supplier_id),
                status=OrderStatus.DELIVERED.value,
            )
            .all()
            .items
        )
        return orders
