"""Derived, ordered views over the instrument collection."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from ..schemas.lab import Instrument, InstrumentStatus

ALL = "All"


class SortKey(str, Enum):
    NEXT_MAINTENANCE_ASC = "nextMaintenance-asc"
    NEXT_MAINTENANCE_DESC = "nextMaintenance-desc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"


def _matches_search(instrument: Instrument, needle: str) -> bool:
    if not needle:
        return True
    return (
        needle in instrument.name.lower()
        or needle in instrument.type.lower()
        or needle in instrument.location.lower()
    )


def _status_value(status: str | InstrumentStatus) -> str:
    return status.value if isinstance(status, InstrumentStatus) else status


def _name_key(instrument: Instrument) -> tuple[str, str]:
    # Case-insensitive first; the raw name breaks ties so distinct names never
    # compare equal.
    return (instrument.name.casefold(), instrument.name)


def filter_and_sort(
    instruments: Sequence[Instrument],
    search: str = "",
    status: str | InstrumentStatus = ALL,
    location: str = ALL,
    sort_by: SortKey | str = SortKey.NEXT_MAINTENANCE_ASC,
) -> list[Instrument]:
    """Return the instruments matching every filter, ordered by ``sort_by``.

    The search term matches name, type or location as a case-insensitive
    substring, whitespace included. ``status`` and ``location`` are exact
    matches unless ``"All"``.
    The input sequence is left untouched.
    """

    needle = (search or "").lower()
    wanted_status = _status_value(status or ALL)
    wanted_location = location or ALL

    result = [
        inst
        for inst in instruments
        if _matches_search(inst, needle)
        and (wanted_status == ALL or inst.status.value == wanted_status)
        and (wanted_location == ALL or inst.location == wanted_location)
    ]

    key = SortKey(sort_by)
    if key is SortKey.NEXT_MAINTENANCE_ASC:
        result.sort(key=lambda inst: inst.next_maintenance)
    elif key is SortKey.NEXT_MAINTENANCE_DESC:
        result.sort(key=lambda inst: inst.next_maintenance, reverse=True)
    elif key is SortKey.NAME_ASC:
        result.sort(key=_name_key)
    elif key is SortKey.NAME_DESC:
        result.sort(key=_name_key, reverse=True)
    return result


def unique_locations(instruments: Iterable[Instrument]) -> list[str]:
    """``"All"`` followed by each distinct location in first-seen order."""

    seen: dict[str, None] = {}
    for inst in instruments:
        seen.setdefault(inst.location, None)
    return [ALL, *seen]


def find_instrument(instruments: Iterable[Instrument], instrument_id: str) -> Instrument | None:
    return next((inst for inst in instruments if inst.id == instrument_id), None)
