import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.core import permissions
from labmonitor.core.display import ROLE_STYLES, STATUS_STYLES, maintenance_due_soon, role_style, status_style
from labmonitor.schemas.lab import Instrument, InstrumentStatus, UserRole

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_status_styles_cover_every_status():
    assert set(STATUS_STYLES) == set(InstrumentStatus)
    for status in InstrumentStatus:
        assert status_style(status).label == status.value


def test_role_styles_cover_every_role():
    assert set(ROLE_STYLES) == set(UserRole)
    for role in UserRole:
        assert role_style(role).label == role.value


@pytest.mark.parametrize(
    "offset, expected",
    [
        (timedelta(days=-1), False),
        (timedelta(hours=-12), True),
        (timedelta(hours=3), True),
        (timedelta(days=14), True),
        (timedelta(days=15), False),
    ],
)
def test_maintenance_due_soon_window(offset, expected):
    inst = Instrument(
        id="a",
        name="A",
        type="T",
        serial_number="S",
        location="L",
        last_maintenance=NOW - timedelta(days=100),
        next_maintenance=NOW + offset,
    )
    assert maintenance_due_soon(inst, now=NOW, window_days=14) is expected


def test_role_capabilities():
    assert permissions.can_manage_instruments(UserRole.ADMIN)
    assert not permissions.can_manage_instruments(UserRole.TECHNICIAN)
    assert permissions.can_log_service(UserRole.TECHNICIAN)
    assert not permissions.can_log_service(UserRole.STUDENT)
    assert not permissions.can_book(UserRole.TECHNICIAN)
    assert permissions.can_book(UserRole.STUDENT)
    assert permissions.can_view_admin_pages(UserRole.ADMIN)
    assert not permissions.can_view_admin_pages(UserRole.RESEARCHER)
