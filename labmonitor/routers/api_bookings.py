from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.permissions import BOOKERS
from ..deps.auth import get_workspace, require_roles, require_user
from ..schemas.auth import User
from ..schemas.lab import Booking, BookingCreate
from ..services.calendar import CalendarView, build_calendar
from ..services.timecalc import local_date, utcnow
from ..services.workspace import LabWorkspace

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"], dependencies=[Depends(require_user)])


@router.get("", response_model=list[Booking])
def api_list_bookings(instrument_id: Optional[str] = None, workspace: LabWorkspace = Depends(get_workspace)):
    bookings = workspace.bookings
    if instrument_id:
        bookings = [b for b in bookings if b.instrument_id == instrument_id]
    return sorted(bookings, key=lambda b: b.start_time)


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
def api_create_booking(
    payload: BookingCreate,
    user: User = Depends(require_roles(*BOOKERS)),
    workspace: LabWorkspace = Depends(get_workspace),
):
    """Book an instrument. Non-Available instruments are booked without a status change."""

    if workspace.find_instrument(payload.instrument_id) is None:
        raise HTTPException(status_code=404, detail="Instrument not found")
    return workspace.add_booking(payload, user.name)


@router.get("/calendar")
def api_booking_calendar(
    view: CalendarView = CalendarView.WEEK,
    anchor: Optional[date] = None,
    workspace: LabWorkspace = Depends(get_workspace),
):
    return build_calendar(anchor or local_date(utcnow()), view, workspace.instruments, workspace.bookings)
