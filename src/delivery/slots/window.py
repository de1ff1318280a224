"""Slot label parsing — turns free-text slot labels into time windows.

Slot labels are display strings typed by suppliers, so parsing only has to
cope with the small vocabulary actually in use:

    "8–11 AM"      08:00 – 11:00
    "11–2 PM"      11:00 – 14:00  (start meridiem inferred from the end)
    "2–5 PM"       14:00 – 17:00
    "8-11 AM"      hyphen instead of en dash
    "10:00-12:00"  24-hour clock
    "9 AM to 1 PM" explicit meridiems on both sides

Windows never span midnight. Anything else raises ``UnparseableSlot``.

Checkout submits the scheduled slot as "Today, 8–11 AM" or
"Tomorrow, 2–5 PM"; ``parse_scheduled_slot`` resolves that to a calendar date
in the supplier's local timezone plus the bare label.
"""

import os
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from protean.exceptions import ValidationError

from delivery.errors import UnparseableSlot

_LABEL_PATTERN = re.compile(
    r"""^\s*
    (?P<start_hour>\d{1,2})(?::(?P<start_minute>\d{2}))?\s*(?P<start_meridiem>[ap]\.?m\.?)?
    \s*(?:[-–—]|to)\s*
    (?P<end_hour>\d{1,2})(?::(?P<end_minute>\d{2}))?\s*(?P<end_meridiem>[ap]\.?m\.?)?
    \s*$""",
    re.IGNORECASE | re.VERBOSE,
)

_DAY_OFFSETS = {"today": 0, "tomorrow": 1}


@dataclass(frozen=True)
class SlotWindow:
    """A concrete [start, end) delivery window on a calendar day."""

    start: datetime
    end: datetime


def local_timezone() -> ZoneInfo:
    """Supplier-local timezone used for slot windows (``DELIVERY_TIMEZONE``)."""
    name = os.environ.get("DELIVERY_TIMEZONE", "UTC")
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone in DELIVERY_TIMEZONE: {name}") from exc


def _meridiem(raw):
    if not raw:
        return None
    return "pm" if raw.lower().startswith("p") else "am"


def _to_24h(hour, meridiem):
    if meridiem is None:
        return hour
    hour = hour % 12
    return hour + 12 if meridiem == "pm" else hour


def parse_slot_hours(label) -> tuple[time, time | None]:
    """Parse a slot label into (start, end) clock times.

    ``end`` is ``None`` when the window closes at midnight ("18:00-24:00").
    """
    if not label:
        raise UnparseableSlot(label, "empty label")

    match = _LABEL_PATTERN.match(label)
    if match is None:
        raise UnparseableSlot(label)

    start_hour = int(match["start_hour"])
    end_hour = int(match["end_hour"])
    start_minute = int(match["start_minute"] or 0)
    end_minute = int(match["end_minute"] or 0)
    start_meridiem = _meridiem(match["start_meridiem"])
    end_meridiem = _meridiem(match["end_meridiem"])

    if start_minute > 59 or end_minute > 59:
        raise UnparseableSlot(label, "minutes out of range")

    if start_meridiem or end_meridiem:
        if not (1 <= start_hour <= 12 and 1 <= end_hour <= 12):
            raise UnparseableSlot(label, "12-hour clock out of range")
        end_meridiem = end_meridiem or start_meridiem
        end_24 = _to_24h(end_hour, end_meridiem)
        if start_meridiem is None:
            # "11–2 PM" means 11 AM to 2 PM; "2–5 PM" means 2 PM to 5 PM.
            start_24 = _to_24h(start_hour, end_meridiem)
            if (start_24, start_minute) >= (end_24, end_minute):
                start_24 = _to_24h(start_hour, "am" if end_meridiem == "pm" else "pm")
        else:
            start_24 = _to_24h(start_hour, start_meridiem)
    else:
        start_24, end_24 = start_hour, end_hour
        if start_24 > 23 or end_24 > 24 or (end_24 == 24 and end_minute):
            raise UnparseableSlot(label, "24-hour clock out of range")

    if end_24 == 24:
        return time(start_24, start_minute), None

    if (start_24, start_minute) >= (end_24, end_minute):
        raise UnparseableSlot(label, "window ends before it starts")

    return time(start_24, start_minute), time(end_24, end_minute)


def slot_window(day: date, label: str, tz: ZoneInfo | None = None) -> SlotWindow:
    """The window a label describes on ``day``, in the supplier's local time."""
    tz = tz or local_timezone()
    start, end = parse_slot_hours(label)
    window_start = datetime.combine(day, start, tzinfo=tz)
    if end is None:
        window_end = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    else:
        window_end = datetime.combine(day, end, tzinfo=tz)
    return SlotWindow(start=window_start, end=window_end)


def local_today(tz: ZoneInfo | None = None) -> date:
    return datetime.now(UTC).astimezone(tz or local_timezone()).date()


def parse_scheduled_slot(raw: str, today: date | None = None) -> tuple[date, str]:
    """Resolve "Today, 8–11 AM" / "Tomorrow, 2–5 PM" to (date, label)."""
    if not raw or not raw.strip():
        raise ValidationError({"scheduled_slot": ["Scheduled slot is required"]})

    day_part, sep, label = raw.partition(",")
    if not sep or not label.strip():
        raise ValidationError({"scheduled_slot": ["Invalid scheduled slot format"]})

    offset = _DAY_OFFSETS.get(day_part.strip().lower())
    if offset is None:
        raise ValidationError({"scheduled_slot": ["Unsupported day in scheduled slot"]})

    base = today or local_today()
    return base + timedelta(days=offset), label.strip()
