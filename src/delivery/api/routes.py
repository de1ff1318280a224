"""FastAPI routes for the Delivery domain — slots, availability and orders."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from delivery.admission.availability import AvailabilityCalculator
from delivery.api.schemas import (
    OrderResponse,
    PlaceOrderRequest,
    SlaSummaryResponse,
    SlotAvailabilityResponse,
    SlotRejectedResponse,
    SlotResponse,
    TransitionOrderRequest,
    UpsertSlotsRequest,
)
from delivery.errors import SlotRejected
from delivery.order.lifecycle import OrderLifecycle
from delivery.order.placement import Checkout
from delivery.order.reporting import sla_summary
from delivery.slots.catalog import SlotCatalog
from delivery.utils.logging import add_context, clear_context


async def fresh_log_context() -> None:
    """Start every request with an empty structlog context."""
    clear_context()


# ---------------------------------------------------------------------------
# Supplier Router (slot console, checkout availability, SLA reporting)
# ---------------------------------------------------------------------------
supplier_router = APIRouter(prefix="/suppliers", tags=["suppliers"], dependencies=[Depends(fresh_log_context)])


def _slots(slots) -> list[SlotResponse]:
    return [SlotResponse(**slot.to_summary()) for slot in slots]


@supplier_router.get("/{supplier_id}/availability", response_model=list[SlotAvailabilityResponse])
async def get_availability(
    supplier_id: str,
    day: date = Query(..., alias="date"),
) -> list[SlotAvailabilityResponse]:
    add_context(supplier_id=supplier_id)
    availability = AvailabilityCalculator().get_availability(supplier_id, day)
    return [SlotAvailabilityResponse(**a.to_dict()) for a in availability]


@supplier_router.get("/{supplier_id}/slots", response_model=list[SlotResponse])
async def list_slots(supplier_id: str) -> list[SlotResponse]:
    return _slots(SlotCatalog().list_slots(supplier_id))


@supplier_router.put("/{supplier_id}/slots", response_model=list[SlotResponse])
async def upsert_slots(supplier_id: str, body: UpsertSlotsRequest) -> list[SlotResponse]:
    add_context(supplier_id=supplier_id)
    slots = SlotCatalog().upsert_slots(supplier_id, [s.model_dump() for s in body.slots])
    return _slots(slots)


@supplier_router.post("/{supplier_id}/slots/defaults", response_model=list[SlotResponse])
async def ensure_default_slots(supplier_id: str) -> list[SlotResponse]:
    return _slots(SlotCatalog().ensure_default_slots(supplier_id))


@supplier_router.get("/{supplier_id}/sla-summary", response_model=SlaSummaryResponse)
async def get_sla_summary(
    supplier_id: str,
    start: date = Query(...),
    end: date = Query(...),
) -> SlaSummaryResponse:
    return SlaSummaryResponse(**sla_summary(supplier_id, start, end))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"], dependencies=[Depends(fresh_log_context)])


@order_router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    responses={409: {"model": SlotRejectedResponse}},
)
async def place_order(body: PlaceOrderRequest) -> OrderResponse:
    add_context(supplier_id=body.supplier_id, customer_id=body.customer_id)
    order = Checkout().place_order(
        customer_id=body.customer_id,
        supplier_id=body.supplier_id,
        site_id=body.site_id,
        day=body.scheduled_day,
        label=body.scheduled_slot_label,
        scheduled_slot=body.scheduled_slot,
    )
    return OrderResponse(**order.to_summary())


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse(**OrderLifecycle().get(order_id).to_summary())


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def transition_order(order_id: str, body: TransitionOrderRequest) -> OrderResponse:
    add_context(order_id=order_id)
    order = OrderLifecycle().transition(order_id, body.status, reason=body.reason)
    return OrderResponse(**order.to_summary())


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
async def slot_rejected_handler(request: Request, exc: SlotRejected) -> JSONResponse:
    """A refused booking is a conflict with current slot state, not bad input."""
    return JSONResponse(status_code=409, content=exc.to_dict())


def register_delivery_exception_handlers(app) -> None:
    app.add_exception_handler(SlotRejected, slot_rejected_handler)
