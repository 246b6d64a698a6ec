"""Display attributes keyed by the status and role enumerations.

Both tables must cover every enum member; ``tests/test_display.py`` fails when
a new member is added without an entry here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from ..schemas.lab import Instrument, InstrumentStatus, UserRole
from ..services.timecalc import utcnow
from .config import settings


@dataclass(frozen=True)
class StatusStyle:
    label: str
    color: str  # chart/legend colour
    indicator: str  # dot on instrument cards


@dataclass(frozen=True)
class RoleStyle:
    label: str
    badge: str


STATUS_STYLES: Mapping[InstrumentStatus, StatusStyle] = MappingProxyType({
    InstrumentStatus.AVAILABLE: StatusStyle("Available", "#4ade80", "green"),
    InstrumentStatus.IN_USE: StatusStyle("In Use", "#facc15", "yellow"),
    InstrumentStatus.MAINTENANCE: StatusStyle("Maintenance", "#f87171", "red"),
    InstrumentStatus.OFFLINE: StatusStyle("Offline", "#9ca3af", "gray"),
})

ROLE_STYLES: Mapping[UserRole, RoleStyle] = MappingProxyType({
    UserRole.ADMIN: RoleStyle("Admin", "purple"),
    UserRole.TECHNICIAN: RoleStyle("Technician", "blue"),
    UserRole.RESEARCHER: RoleStyle("Researcher", "green"),
    UserRole.STUDENT: RoleStyle("Student", "gray"),
})


def status_style(status: InstrumentStatus) -> StatusStyle:
    return STATUS_STYLES[status]


def role_style(role: UserRole) -> RoleStyle:
    return ROLE_STYLES[role]


def maintenance_due_soon(
    instrument: Instrument,
    now: datetime | None = None,
    window_days: int | None = None,
) -> bool:
    """True when the days left until the next service, rounded up, lie in ``[0, window]``.

    Rounding up means anything due within the next 24 hours counts as day 1,
    and an instrument less than a day overdue still counts as day 0.
    """

    now = now or utcnow()
    window = settings.MAINTENANCE_DUE_SOON_DAYS if window_days is None else window_days
    remaining = (instrument.next_maintenance - now).total_seconds() / 86400
    days = math.ceil(remaining)
    return 0 <= days <= window
