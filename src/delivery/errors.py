"""Error taxonomy for slot admission and the order lifecycle.

Admission rejections share the ``SlotRejected`` base so callers can tell a
refused booking apart from a generic failure. All of them are Protean
``ValidationError`` subclasses and carry the usual ``messages`` dict, so the
FastAPI exception handlers and existing ``pytest.raises(ValidationError)``
checks keep working.

``UnparseableSlot`` is different: it flags bad historical label data and is
swallowed by the SLA evaluator rather than raised to callers.
"""

from protean.exceptions import ValidationError


class InvalidCapacity(ValidationError):
    """A slot definition was submitted with a negative daily capacity."""

    def __init__(self, label, max_orders_per_day):
        self.label = label
        self.max_orders_per_day = max_orders_per_day
        super().__init__(
            {"max_orders_per_day": [f"Capacity for slot '{label}' must be zero or more, got {max_orders_per_day}"]}
        )


class SlotRejected(ValidationError):
    """Base class for a booking the slot refused to admit."""

    reason = "SlotRejected"

    def __init__(self, supplier_id, label, day=None, message=None):
        self.supplier_id = str(supplier_id)
        self.label = label
        self.day = day
        super().__init__({"slot": [message or self.describe()]})

    def describe(self) -> str:
        return f"Slot '{self.label}' rejected the booking"

    def to_dict(self) -> dict:
        return {
            "error": self.reason,
            "supplier_id": self.supplier_id,
            "label": self.label,
            "day": self.day.isoformat() if self.day else None,
            "detail": self.messages["slot"][0],
        }


class SlotUnknown(SlotRejected):
    reason = "SlotUnknown"

    def describe(self) -> str:
        return f"Supplier has no slot labelled '{self.label}'"


class SlotInactive(SlotRejected):
    reason = "SlotInactive"

    def describe(self) -> str:
        return f"Slot '{self.label}' is not currently accepting orders"


class SlotFull(SlotRejected):
    reason = "SlotFull"

    def describe(self) -> str:
        when = f" on {self.day.isoformat()}" if self.day else ""
        return f"Slot '{self.label}' is full{when}. Please choose another time."


class InvalidTransition(ValidationError):
    """An order was asked to move to a status that does not follow its current one."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__({"status": [f"Cannot transition from {current.value} to {target.value}"]})


class UnparseableSlot(ValueError):
    """A free-text slot label could not be turned into a time window."""

    def __init__(self, label, reason="unrecognised format"):
        self.label = label
        self.reason = reason
        super().__init__(f"Cannot parse slot label {label!r}: {reason}")
