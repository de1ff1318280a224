"""SLA reporting for record keepers."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from delivery.admission.ledger import as_day
from delivery.order.order import Order, SlaStatus


def sla_summary(supplier_id, start, end) -> dict:
    """Count SLA outcomes of a supplier's delivered orders scheduled in [start, end].

    ``on_time_rate`` is on-time over classified (on-time + late) deliveries, or
    ``None`` when nothing could be classified.
    """
    start, end = as_day(start), as_day(end)
    if start > end:
        raise ValidationError({"start": ["Start date must not be after end date"]})

    counts = {status: 0 for status in SlaStatus}
    for order in current_domain.repository_for(Order).delivered_for_supplier(supplier_id):
        if not (start <= order.scheduled_date <= end):
            continue
        status = SlaStatus(order.sla_status) if order.sla_status else SlaStatus.NOT_APPLICABLE
        counts[status] += 1

    classified = counts[SlaStatus.ON_TIME] + counts[SlaStatus.LATE]
    return {
        "supplier_id": str(supplier_id),
        "start": start.isoformat(),
        "end": end.isoformat(),
        "delivered": sum(counts.values()),
        "on_time": counts[SlaStatus.ON_TIME],
        "late": counts[SlaStatus.LATE],
        "not_applicable": counts[SlaStatus.NOT_APPLICABLE],
        "on_time_rate": round(counts[SlaStatus.ON_TIME] / classified, 4) if classified else None,
    }
