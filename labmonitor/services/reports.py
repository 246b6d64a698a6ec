"""CSV exports of booking usage and maintenance history.

Lines end with CRLF, the header included. Free-text columns (purpose and
description) are always quoted; every other field is quoted only when it holds
a comma, a quote or a line break.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

from ..schemas.lab import Booking, Instrument, MaintenanceLog
from .timecalc import fmt_date, fmt_dt, hours_between

CRLF = "\r\n"
MISSING_INSTRUMENT = "N/A"

USAGE_HEADER = ("Instrument Name", "User", "Start Time", "End Time", "Duration (Hours)", "Purpose")
MAINTENANCE_HEADER = ("Instrument Name", "Date", "Technician", "Description", "Cost")

USAGE_FILENAME = "instrument_usage_report.csv"
MAINTENANCE_FILENAME = "maintenance_log_report.csv"


def _cell(value: str, quoting: int = csv.QUOTE_MINIMAL) -> str:
    # A lone empty field would otherwise come back as "" under QUOTE_MINIMAL.
    if not value and quoting == csv.QUOTE_MINIMAL:
        return value
    buf = io.StringIO()
    csv.writer(buf, quoting=quoting, lineterminator="").writerow([value])
    return buf.getvalue()


def _quote(value: str) -> str:
    return _cell(value, csv.QUOTE_ALL)


def _field(value: str) -> str:
    return _cell(value)


def _rows_to_text(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    lines = [",".join(_field(h) for h in header)]
    lines.extend(",".join(row) for row in rows)
    return CRLF.join(lines) + CRLF


def _instrument_names(instruments: Iterable[Instrument]) -> dict[str, str]:
    return {inst.id: inst.name for inst in instruments}


def generate_usage_report(instruments: Iterable[Instrument], bookings: Iterable[Booking]) -> str:
    """One row per booking, newest start first."""

    names = _instrument_names(instruments)
    ordered = sorted(bookings, key=lambda b: b.start_time, reverse=True)
    rows = []
    for booking in ordered:
        duration = hours_between(booking.start_time, booking.end_time)
        rows.append((
            _field(names.get(booking.instrument_id, MISSING_INSTRUMENT)),
            _field(booking.user_id),
            _field(fmt_dt(booking.start_time)),
            _field(fmt_dt(booking.end_time)),
            f"{duration:.2f}",
            _quote(booking.purpose),
        ))
    return _rows_to_text(USAGE_HEADER, rows)


def generate_maintenance_report(instruments: Iterable[Instrument], logs: Iterable[MaintenanceLog]) -> str:
    """One row per service record, most recent first."""

    names = _instrument_names(instruments)
    ordered = sorted(logs, key=lambda log: log.date, reverse=True)
    rows = [
        (
            _field(names.get(log.instrument_id, MISSING_INSTRUMENT)),
            _field(fmt_date(log.date)),
            _field(log.technician),
            _quote(log.description),
            f"{log.cost:.2f}",
        )
        for log in ordered
    ]
    return _rows_to_text(MAINTENANCE_HEADER, rows)
