import os
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.core.config import settings
from labmonitor.schemas.lab import Booking, Instrument, InstrumentStatus
from labmonitor.services.calendar import (
    PALETTE,
    CalendarView,
    bookings_on,
    build_calendar,
    instrument_color_index,
    month_grid,
    shift_anchor,
    week_days,
)


@pytest.fixture(autouse=True)
def utc_display(monkeypatch):
    monkeypatch.setattr(settings, "TZ", "UTC")


def instrument(ident):
    return Instrument(
        id=ident,
        name=ident.upper(),
        type="Analyzer",
        serial_number="SN",
        location="Lab",
        status=InstrumentStatus.AVAILABLE,
        last_maintenance=datetime(2025, 1, 1, tzinfo=timezone.utc),
        next_maintenance=datetime(2025, 6, 1, tzinfo=timezone.utc),
    )


def booking(ident, start):
    return Booking(id=ident, instrument_id="a", user_id="Ada", start_time=start, end_time=start + timedelta(hours=1))


def test_month_grid_starts_on_sunday_with_blank_cells():
    # 1 March 2025 is a Saturday.
    grid = month_grid(date(2025, 3, 17))
    assert grid[:6] == [None] * 6
    assert grid[6] == date(2025, 3, 1)
    assert grid[-1] == date(2025, 3, 31)
    assert len([d for d in grid if d is not None]) == 31


def test_week_days_run_sunday_to_saturday():
    days = week_days(date(2025, 3, 5))  # Wednesday
    assert days[0] == date(2025, 3, 2)
    assert days[-1] == date(2025, 3, 8)
    assert week_days(date(2025, 3, 2))[0] == date(2025, 3, 2)


def test_bookings_bucket_by_start_day_in_order():
    late = booking("late", datetime(2025, 3, 5, 23, 30, tzinfo=timezone.utc))
    early = booking("early", datetime(2025, 3, 5, 8, 0, tzinfo=timezone.utc))
    other = booking("other", datetime(2025, 3, 6, 8, 0, tzinfo=timezone.utc))

    assert [b.id for b in bookings_on(date(2025, 3, 5), [late, other, early])] == ["early", "late"]
    assert bookings_on(date(2025, 3, 6), [late]) == []


def test_shift_anchor_per_view():
    anchor = date(2025, 1, 31)
    assert shift_anchor(anchor, CalendarView.MONTH, 1) == date(2025, 2, 28)
    assert shift_anchor(anchor, CalendarView.MONTH, -1) == date(2024, 12, 31)
    assert shift_anchor(anchor, CalendarView.WEEK, 1) == date(2025, 2, 7)
    assert shift_anchor(anchor, CalendarView.DAY, -1) == date(2025, 1, 30)


def test_instrument_color_index_is_stable_and_safe():
    instruments = [instrument(f"i{n}") for n in range(8)]
    assert instrument_color_index("i1", instruments) == 1
    assert instrument_color_index("i7", instruments) == 7 % len(PALETTE)
    assert instrument_color_index("unknown", instruments) == 0


def test_build_calendar_day_view():
    result = build_calendar(
        date(2025, 3, 5),
        CalendarView.DAY,
        [instrument("a")],
        [booking("b1", datetime(2025, 3, 5, 9, 0, tzinfo=timezone.utc))],
    )
    assert result["previous"] == "2025-03-04"
    assert result["next"] == "2025-03-06"
    (day,) = result["days"]
    assert day["bookings"][0]["instrumentName"] == "A"
    assert day["bookings"][0]["start"] == "09:00 AM"
