from __future__ import annotations

from collections import Counter, defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Sequence

from ..core.display import status_style
from ..schemas.lab import Booking, Instrument, InstrumentStatus, MaintenanceLog
from .timecalc import hours_between

TWOPLACES = Decimal("0.01")


def _quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if value else Decimal("0.00")


def _to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def usage_hours_by_instrument(
    instruments: Sequence[Instrument], bookings: Iterable[Booking]
) -> List[Dict[str, Any]]:
    """Total booked hours per instrument.

    End times before start times are not rejected; they simply subtract.
    """

    hours: Dict[str, float] = defaultdict(float)
    for booking in bookings:
        hours[booking.instrument_id] += hours_between(booking.start_time, booking.end_time)
    return [
        {"instrument_id": inst.id, "name": inst.name, "hours": round(hours.get(inst.id, 0.0), 2)}
        for inst in instruments
    ]


def status_distribution(instruments: Iterable[Instrument]) -> List[Dict[str, Any]]:
    counts = Counter(inst.status for inst in instruments)
    return [
        {"status": status.value, "count": counts.get(status, 0), "color": status_style(status).color}
        for status in InstrumentStatus
    ]


def maintenance_cost_by_instrument(
    instruments: Sequence[Instrument], logs: Iterable[MaintenanceLog]
) -> List[Dict[str, Any]]:
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for log in logs:
        totals[log.instrument_id] += _to_decimal(log.cost)
    return [
        {"instrument_id": inst.id, "name": inst.name, "cost": _quantize_currency(totals.get(inst.id, Decimal("0")))}
        for inst in instruments
    ]


def calculate_lab_metrics(
    instruments: Sequence[Instrument],
    bookings: Sequence[Booking],
    logs: Sequence[MaintenanceLog],
) -> Dict[str, Any]:
    """Everything the analytics page charts, recomputed on each call."""

    usage = usage_hours_by_instrument(instruments, bookings)
    costs = maintenance_cost_by_instrument(instruments, logs)
    return {
        "totals": {
            "instruments": len(instruments),
            "bookings": len(bookings),
            "maintenance_logs": len(logs),
            "booked_hours": round(sum(row["hours"] for row in usage), 2),
            "maintenance_cost": _quantize_currency(sum((row["cost"] for row in costs), Decimal("0"))),
        },
        "usage_hours": usage,
        "status_distribution": status_distribution(instruments),
        "maintenance_cost": costs,
    }
