"""Application tests for supplier status updates on orders."""

from datetime import date

import pytest
from delivery.admission.availability import AvailabilityCalculator
from delivery.admission.controller import AdmissionController
from delivery.errors import InvalidTransition
from delivery.order.lifecycle import OrderLifecycle, TransitionOrder, coerce_status
from delivery.order.order import Order, OrderStatus, SlaStatus
from delivery.order.placement import Checkout
from delivery.slots.catalog import SlotCatalog
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

PAST_DAY = date(2000, 1, 3)
FUTURE_DAY = date(2099, 1, 5)


@pytest.fixture(autouse=True)
def slots():
    return SlotCatalog().upsert_slots(
        "sup-001",
        [
            {"label": "8–11 AM", "max_orders_per_day": 2},
            {"label": "Anytime", "max_orders_per_day": 5},
        ],
    )


@pytest.fixture()
def releases(monkeypatch):
    """Record the claim id of every slot release."""
    calls = []
    original = AdmissionController.release

    def counting_release(self, supplier_id, day, label, reservation_id):
        calls.append(str(reservation_id))
        return original(self, supplier_id, day, label, reservation_id)

    monkeypatch.setattr(AdmissionController, "release", counting_release)
    return calls


@pytest.fixture()
def lifecycle():
    return OrderLifecycle()


def _place(day, label="8–11 AM"):
    return Checkout().place_order(
        customer_id="cust-001",
        supplier_id="sup-001",
        site_id="site-001",
        day=day,
        label=label,
    )


def _available(day, label="8–11 AM"):
    availability = AvailabilityCalculator().get_availability("sup-001", day)
    return next(a.available for a in availability if a.label == label)


class TestTransitions:
    def test_accept_persists(self, lifecycle, booking_day):
        order = _place(booking_day)
        lifecycle.transition(order.id, OrderStatus.ACCEPTED)
        persisted = current_domain.repository_for(Order).get(order.id)
        assert persisted.status == OrderStatus.ACCEPTED.value
        assert persisted.accepted_at is not None

    def test_string_status_accepted(self, lifecycle, booking_day):
        order = _place(booking_day)
        updated = lifecycle.transition(order.id, "accepted")
        assert updated.status == OrderStatus.ACCEPTED.value

    def test_command_returns_previous_status(self, booking_day):
        order = _place(booking_day)
        previous = current_domain.process(
            TransitionOrder(order_id=order.id, target_status=OrderStatus.ACCEPTED.value),
            asynchronous=False,
        )
        assert previous == OrderStatus.PLACED.value

    def test_invalid_transition_rejected(self, lifecycle, booking_day):
        order = _place(booking_day)
        with pytest.raises(InvalidTransition):
            lifecycle.transition(order.id, OrderStatus.DELIVERED)
        assert lifecycle.get(order.id).status == OrderStatus.PLACED.value

    def test_unknown_status_rejected(self, lifecycle, booking_day):
        order = _place(booking_day)
        with pytest.raises(ValidationError) as exc_info:
            lifecycle.transition(order.id, "Teleported")
        assert "status" in exc_info.value.messages

    def test_unknown_order(self, lifecycle):
        with pytest.raises(ObjectNotFoundError):
            lifecycle.transition("ord-missing", OrderStatus.ACCEPTED)


class TestCancellation:
    def test_cancel_releases_slot_exactly_once(self, releases, lifecycle, booking_day):
        order = _place(booking_day)
        assert _available(booking_day) == 1

        lifecycle.transition(order.id, OrderStatus.CANCELLED, reason="Site closed")

        assert releases == [str(order.id)]
        assert _available(booking_day) == 2

    def test_cancel_command_releases_slot(self, releases):
        SlotCatalog().upsert_slots("sup-002", [{"label": "8–11 AM", "max_orders_per_day": 1}])
        order = Checkout().place_order(
            customer_id="cust-001",
            supplier_id="sup-002",
            site_id="site-001",
            day=FUTURE_DAY,
            label="8–11 AM",
        )

        current_domain.process(
            TransitionOrder(order_id=order.id, target_status=OrderStatus.CANCELLED.value),
            asynchronous=False,
        )

        availability = AvailabilityCalculator().get_availability("sup-002", FUTURE_DAY)
        assert availability[0].booked == 0
        assert availability[0].available == 1
        assert releases == [str(order.id)]
        assert not AdmissionController().holds("sup-002", FUTURE_DAY, "8–11 AM", order.id)

    def test_cancel_command_frees_capacity_for_next_booking(self):
        SlotCatalog().upsert_slots("sup-002", [{"label": "8–11 AM", "max_orders_per_day": 1}])
        first = Checkout().place_order("cust-001", "sup-002", "site-001", day=FUTURE_DAY, label="8–11 AM")

        current_domain.process(
            TransitionOrder(order_id=first.id, target_status=OrderStatus.CANCELLED.value),
            asynchronous=False,
        )
        second = Checkout().place_order("cust-002", "sup-002", "site-001", day=FUTURE_DAY, label="8–11 AM")

        assert second.status == OrderStatus.PLACED.value

    def test_second_cancel_fails_without_second_release(self, releases, lifecycle, booking_day):
        order = _place(booking_day)
        lifecycle.transition(order.id, OrderStatus.CANCELLED)
        with pytest.raises(InvalidTransition):
            lifecycle.transition(order.id, OrderStatus.CANCELLED)
        assert releases == [str(order.id)]
        assert _available(booking_day) == 2

    def test_cancel_from_accepted_releases(self, lifecycle, booking_day):
        order = _place(booking_day)
        lifecycle.transition(order.id, OrderStatus.ACCEPTED)
        lifecycle.transition(order.id, OrderStatus.CANCELLED)
        assert _available(booking_day) == 2

    def test_dispatched_cannot_be_cancelled(self, releases, lifecycle, booking_day):
        order = _place(booking_day)
        lifecycle.transition(order.id, OrderStatus.ACCEPTED)
        lifecycle.transition(order.id, OrderStatus.DISPATCHED)
        with pytest.raises(InvalidTransition):
            lifecycle.transition(order.id, OrderStatus.CANCELLED)
        assert releases == []
        assert _available(booking_day) == 1

    def test_cancellation_reason_stored(self, lifecycle, booking_day):
        order = _place(booking_day)
        updated = lifecycle.transition(order.id, OrderStatus.CANCELLED, reason="Duplicate booking")
        assert updated.cancellation_reason == "Duplicate booking"
        assert updated.cancelled_at is not None


class TestDelivery:
    def _deliver(self, lifecycle, order):
        lifecycle.transition(order.id, OrderStatus.ACCEPTED)
        lifecycle.transition(order.id, OrderStatus.DISPATCHED)
        return lifecycle.transition(order.id, OrderStatus.DELIVERED)

    def test_delivery_after_window_is_late(self, lifecycle):
        delivered = self._deliver(lifecycle, _place(PAST_DAY))
        assert delivered.delivered_at is not None
        assert delivered.sla_status == SlaStatus.LATE.value

    def test_delivery_before_window_end_is_on_time(self, lifecycle):
        delivered = self._deliver(lifecycle, _place(FUTURE_DAY))
        assert delivered.sla_status == SlaStatus.ON_TIME.value

    def test_unparseable_label_not_applicable(self, lifecycle):
        delivered = self._deliver(lifecycle, _place(PAST_DAY, label="Anytime"))
        assert delivered.sla_status == SlaStatus.NOT_APPLICABLE.value

    def test_delivered_order_keeps_its_slot_unit(self, lifecycle):
        self._deliver(lifecycle, _place(PAST_DAY))
        assert _available(PAST_DAY) == 1

    def test_sla_unset_before_delivery(self, lifecycle, booking_day):
        order = _place(booking_day)
        updated = lifecycle.transition(order.id, OrderStatus.ACCEPTED)
        assert updated.sla_status is None


class TestCoerceStatus:
    @pytest.mark.parametrize("raw", ["Delivered", "DELIVERED", "delivered", OrderStatus.DELIVERED])
    def test_accepts_value_name_or_enum(self, raw):
        assert coerce_status(raw) == OrderStatus.DELIVERED

    def test_rejects_blank(self):
        with pytest.raises(ValidationError):
            coerce_status("")
