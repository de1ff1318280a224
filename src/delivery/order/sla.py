"""SLA evaluation — was a delivered order inside the window it was booked into?

The window comes from parsing the order's denormalised slot label on its
scheduled day, in the supplier's local timezone. A delivery at or before the
window end (plus grace) is on time; anything later is late. Orders that are
not delivered, or whose label cannot be parsed, are not applicable.
"""

import os
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import structlog

from delivery.errors import UnparseableSlot
from delivery.order.order import OrderStatus, SlaStatus
from delivery.slots.window import local_timezone, slot_window

logger = structlog.get_logger(__name__)


class SlaEvaluator:
    def __init__(self, tz: ZoneInfo | None = None, grace_minutes: int = 0):
        self.tz = tz or ZoneInfo("UTC")
        self.grace = timedelta(minutes=grace_minutes)

    @classmethod
    def from_env(cls) -> "SlaEvaluator":
        """Timezone from ``DELIVERY_TIMEZONE``, grace from ``DELIVERY_SLA_GRACE_MINUTES``."""
        grace_minutes = int(os.environ.get("DELIVERY_SLA_GRACE_MINUTES", "0"))
        return cls(tz=local_timezone(), grace_minutes=grace_minutes)

    def evaluate(self, order) -> SlaStatus:
        if OrderStatus(order.status) != OrderStatus.DELIVERED or not order.delivered_at:
            return SlaStatus.NOT_APPLICABLE
        return self.classify(
            order.scheduled_date,
            order.scheduled_slot_label,
            order.delivered_at,
            order_id=str(order.id),
        )

    def classify(self, day: date, label: str, delivered_at: datetime, order_id=None) -> SlaStatus:
        try:
            window = slot_window(day, label, self.tz)
        except UnparseableSlot as exc:
            logger.warning(
                "Slot label cannot be parsed for SLA",
                order_id=order_id,
                label=label,
                reason=exc.reason,
            )
            return SlaStatus.NOT_APPLICABLE

        if delivered_at.tzinfo is None:
            delivered_at = delivered_at.replace(tzinfo=UTC)

        if delivered_at <= window.end + self.grace:
            return SlaStatus.ON_TIME
        return SlaStatus.LATE
