"""Day bucketing for the booking calendar (month, week and day views).

Weeks start on Sunday. A booking belongs to the local day its start time falls
on; bookings spanning midnight are not repeated on the following day.
"""

from __future__ import annotations

import calendar as _calendar
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..schemas.lab import Booking, Instrument
from .timecalc import fmt_time, local_date

PALETTE = ("blue", "green", "yellow", "purple", "pink", "indigo")


class CalendarView(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


def month_grid(anchor: date) -> List[Optional[date]]:
    """Days of ``anchor``'s month, preceded by ``None`` for the blank leading cells."""

    first = anchor.replace(day=1)
    leading = (first.weekday() + 1) % 7  # Monday=0 -> Sunday-first column index
    days_in_month = _calendar.monthrange(anchor.year, anchor.month)[1]
    return [None] * leading + [first.replace(day=d) for d in range(1, days_in_month + 1)]


def week_days(anchor: date) -> List[date]:
    start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def bookings_on(day: date, bookings: Iterable[Booking]) -> List[Booking]:
    return sorted(
        (b for b in bookings if local_date(b.start_time) == day),
        key=lambda b: b.start_time,
    )


def _add_months(anchor: date, months: int) -> date:
    index = anchor.month - 1 + months
    year, month = anchor.year + index // 12, index % 12 + 1
    day = min(anchor.day, _calendar.monthrange(year, month)[1])
    return date(year, month, day)


def shift_anchor(anchor: date, view: CalendarView, step: int) -> date:
    """Move the calendar ``step`` pages backwards (negative) or forwards.

    Month steps keep the day of month, clamped to the length of the target month.
    """

    if view is CalendarView.MONTH:
        return _add_months(anchor, step)
    if view is CalendarView.WEEK:
        return anchor + timedelta(days=7 * step)
    return anchor + timedelta(days=step)


def instrument_color_index(instrument_id: str, instruments: Sequence[Instrument]) -> int:
    """Stable palette slot by position in the instrument list; unknown ids share slot 0."""

    index = next((i for i, inst in enumerate(instruments) if inst.id == instrument_id), -1)
    return max(0, index) % len(PALETTE)


def visible_days(anchor: date, view: CalendarView) -> List[Optional[date]]:
    if view is CalendarView.MONTH:
        return month_grid(anchor)
    if view is CalendarView.WEEK:
        return week_days(anchor)
    return [anchor]


def build_calendar(
    anchor: date,
    view: CalendarView,
    instruments: Sequence[Instrument],
    bookings: Sequence[Booking],
) -> Dict[str, Any]:
    names = {inst.id: inst.name for inst in instruments}
    cells: List[Dict[str, Any] | None] = []
    for day in visible_days(anchor, view):
        if day is None:
            cells.append(None)
            continue
        cells.append({
            "date": day.isoformat(),
            "bookings": [
                {
                    "id": b.id,
                    "instrumentId": b.instrument_id,
                    "instrumentName": names.get(b.instrument_id, "N/A"),
                    "userId": b.user_id,
                    "start": fmt_time(b.start_time),
                    "end": fmt_time(b.end_time),
                    "color": PALETTE[instrument_color_index(b.instrument_id, instruments)],
                }
                for b in bookings_on(day, bookings)
            ],
        })
    return {
        "view": view.value,
        "anchor": anchor.isoformat(),
        "previous": shift_anchor(anchor, view, -1).isoformat(),
        "next": shift_anchor(anchor, view, 1).isoformat(),
        "days": cells,
    }
