"""Tests for slot label parsing and scheduled-slot resolution."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest
from delivery.errors import UnparseableSlot
from delivery.slots.window import local_timezone, parse_scheduled_slot, parse_slot_hours, slot_window
from protean.exceptions import ValidationError


class TestParseSlotHours:
    @pytest.mark.parametrize(
        "label, start, end",
        [
            ("8–11 AM", time(8, 0), time(11, 0)),
            ("8-11 AM", time(8, 0), time(11, 0)),
            ("11–2 PM", time(11, 0), time(14, 0)),
            ("2–5 PM", time(14, 0), time(17, 0)),
            ("12–3 PM", time(12, 0), time(15, 0)),
            ("10:00-12:00", time(10, 0), time(12, 0)),
            ("9 AM to 1 PM", time(9, 0), time(13, 0)),
            ("7:30—9:30 am", time(7, 30), time(9, 30)),
        ],
    )
    def test_known_vocabulary(self, label, start, end):
        assert parse_slot_hours(label) == (start, end)

    def test_window_closing_at_midnight(self):
        assert parse_slot_hours("18:00-24:00") == (time(18, 0), None)

    @pytest.mark.parametrize("label", ["", "Anytime", "morning", "8 AM", "25:00-26:00", "14 PM-15 PM"])
    def test_unparseable_labels(self, label):
        with pytest.raises(UnparseableSlot):
            parse_slot_hours(label)

    def test_reversed_window_rejected(self):
        with pytest.raises(UnparseableSlot) as exc_info:
            parse_slot_hours("12:00-10:00")
        assert exc_info.value.label == "12:00-10:00"


class TestSlotWindow:
    def test_window_on_day_in_utc(self):
        window = slot_window(date(2026, 3, 2), "8–11 AM", ZoneInfo("UTC"))
        assert window.start == datetime(2026, 3, 2, 8, 0, tzinfo=ZoneInfo("UTC"))
        assert window.end == datetime(2026, 3, 2, 11, 0, tzinfo=ZoneInfo("UTC"))

    def test_window_in_supplier_timezone(self):
        tz = ZoneInfo("America/New_York")
        window = slot_window(date(2026, 3, 2), "2–5 PM", tz)
        # EST is UTC-5 in early March
        assert window.end == datetime(2026, 3, 2, 22, 0, tzinfo=ZoneInfo("UTC"))

    def test_midnight_window_ends_next_day(self):
        window = slot_window(date(2026, 3, 2), "18:00-24:00", ZoneInfo("UTC"))
        assert window.end == datetime(2026, 3, 3, 0, 0, tzinfo=ZoneInfo("UTC"))


class TestParseScheduledSlot:
    def test_today(self):
        assert parse_scheduled_slot("Today, 8–11 AM", today=date(2026, 3, 2)) == (date(2026, 3, 2), "8–11 AM")

    def test_tomorrow(self):
        assert parse_scheduled_slot("Tomorrow, 2–5 PM", today=date(2026, 3, 2)) == (date(2026, 3, 3), "2–5 PM")

    def test_day_word_is_case_insensitive(self):
        day, label = parse_scheduled_slot("tomorrow,11–2 PM", today=date(2026, 2, 28))
        assert day == date(2026, 3, 1)
        assert label == "11–2 PM"

    @pytest.mark.parametrize("raw", ["", "   ", "Today", "Today, ", "Friday, 8–11 AM"])
    def test_invalid_values(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_scheduled_slot(raw, today=date(2026, 3, 2))
        assert "scheduled_slot" in exc_info.value.messages


class TestLocalTimezone:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_TIMEZONE", "Asia/Kolkata")
        assert local_timezone() == ZoneInfo("Asia/Kolkata")

    def test_defaults_to_utc(self, monkeypatch):
        monkeypatch.delenv("DELIVERY_TIMEZONE", raising=False)
        assert local_timezone() == ZoneInfo("UTC")

    def test_unknown_zone_rejected(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_TIMEZONE", "Mars/Olympus_Mons")
        with pytest.raises(ValueError):
            local_timezone()
