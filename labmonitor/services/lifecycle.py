"""State transitions over the lab collections.

Every function takes the current collection(s) and returns new ones; inputs are
never modified, so a caller that fails to persist the result can simply keep
the old lists.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Sequence

from ..schemas.lab import (
    Booking,
    BookingCreate,
    Consumable,
    Instrument,
    InstrumentCreate,
    InstrumentStatus,
    MaintenanceLog,
    MaintenanceLogCreate,
)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def add_instrument(
    instruments: Sequence[Instrument], payload: InstrumentCreate
) -> tuple[list[Instrument], Instrument]:
    instrument = Instrument(id=new_id("instr"), **payload.model_dump())
    return [*instruments, instrument], instrument


def update_instrument(
    instruments: Sequence[Instrument], updated: Instrument
) -> tuple[list[Instrument], bool]:
    """Replace the record with ``updated.id``. Returns ``(list, found)``."""

    found = False
    result: list[Instrument] = []
    for inst in instruments:
        if inst.id == updated.id:
            result.append(updated)
            found = True
        else:
            result.append(inst)
    return result, found


def delete_instrument(
    instruments: Sequence[Instrument], instrument_id: str
) -> tuple[list[Instrument], bool]:
    """Remove the instrument. Its bookings and logs are left as they are."""

    result = [inst for inst in instruments if inst.id != instrument_id]
    return result, len(result) != len(instruments)


def bulk_update_status(
    instruments: Sequence[Instrument], instrument_ids: Iterable[str], status: InstrumentStatus
) -> list[Instrument]:
    """Overwrite the status of every listed instrument, whatever it was before."""

    targets = set(instrument_ids)
    return [
        inst.model_copy(update={"status": status}) if inst.id in targets else inst
        for inst in instruments
    ]


def add_booking(
    bookings: Sequence[Booking],
    instruments: Sequence[Instrument],
    payload: BookingCreate,
    user_name: str,
) -> tuple[list[Booking], list[Instrument], Booking]:
    """Record a booking and check the instrument out if it was Available.

    A booking against an instrument in any other status is still recorded; the
    status is simply left alone. Overlapping bookings are not detected.
    """

    booking = Booking(
        id=new_id("book"),
        instrument_id=payload.instrument_id,
        user_id=payload.user_id or user_name,
        start_time=payload.start_time,
        end_time=payload.end_time,
        purpose=payload.purpose,
    )
    updated_instruments = [
        inst.model_copy(update={"status": InstrumentStatus.IN_USE})
        if inst.id == payload.instrument_id and inst.status is InstrumentStatus.AVAILABLE
        else inst
        for inst in instruments
    ]
    return [*bookings, booking], updated_instruments, booking


def add_maintenance_log(
    logs: Sequence[MaintenanceLog], payload: MaintenanceLogCreate
) -> tuple[list[MaintenanceLog], MaintenanceLog]:
    """Append a service record. Instrument status and dates are not touched."""

    log = MaintenanceLog(id=new_id("log"), **payload.model_dump())
    return [*logs, log], log


def adjust_consumable_quantity(
    consumables: Sequence[Consumable], consumable_id: str, delta: int
) -> tuple[list[Consumable], Consumable | None]:
    """Apply ``delta`` to the stock level, never going below zero."""

    adjusted: Consumable | None = None
    result: list[Consumable] = []
    for item in consumables:
        if item.id == consumable_id:
            adjusted = item.model_copy(update={"quantity": max(0, item.quantity + delta)})
            result.append(adjusted)
        else:
            result.append(item)
    return result, adjusted
