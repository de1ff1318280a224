"""Pydantic request/response schemas for the Delivery API."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

# --- Slot configuration ---


class SlotInput(BaseModel):
    label: str = Field(..., max_length=50)
    # Range is checked by the domain so a negative value surfaces as InvalidCapacity
    max_orders_per_day: int
    is_active: bool = True


class UpsertSlotsRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "slots": [
                        {"label": "8–11 AM", "max_orders_per_day": 5, "is_active": True},
                        {"label": "2–5 PM", "max_orders_per_day": 0, "is_active": False},
                    ]
                }
            ]
        }
    }

    slots: list[SlotInput]


class SlotResponse(BaseModel):
    label: str
    max_orders_per_day: int
    is_active: bool


class SlotAvailabilityResponse(BaseModel):
    label: str
    max_orders_per_day: int
    booked: int
    available: int
    is_active: bool
    hint: str


# --- Orders ---


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "supplier_id": "sup-001",
                    "site_id": "site-042",
                    "scheduled_day": "2026-03-02",
                    "scheduled_slot_label": "8–11 AM",
                },
                {
                    "customer_id": "cust-001",
                    "supplier_id": "sup-001",
                    "site_id": "site-042",
                    "scheduled_slot": "Tomorrow, 2–5 PM",
                },
            ]
        }
    }

    customer_id: str
    supplier_id: str
    site_id: str
    scheduled_day: date | None = None
    scheduled_slot_label: str | None = Field(None, max_length=50)
    scheduled_slot: str | None = Field(None, max_length=80)


class TransitionOrderRequest(BaseModel):
    status: str = Field(..., max_length=20)
    reason: str | None = Field(None, max_length=500)


class OrderResponse(BaseModel):
    order_id: str
    supplier_id: str
    site_id: str
    scheduled_day: str
    scheduled_slot_label: str
    status: str
    sla_status: str | None = None
    delivered_at: str | None = None


class SlotRejectedResponse(BaseModel):
    error: str
    detail: str
    supplier_id: str
    label: str | None = None
    day: str | None = None


# --- Reporting ---


class SlaSummaryResponse(BaseModel):
    supplier_id: str
    start: str
    end: str
    delivered: int
    on_time: int
    late: int
    not_applicable: int
    on_time_rate: float | None = None
