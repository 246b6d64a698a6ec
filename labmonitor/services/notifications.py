"""Alerting for overdue maintenance, overdue check-ins and low stock.

Each check takes the current notified set and returns the updated one; nothing
is kept at module level. A key in the set means "already alerted". Only the
low-stock key is ever removed again (when stock recovers), which re-arms that
alert for the next drop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Protocol

from ..core.config import settings
from ..schemas.lab import Booking, Consumable, Instrument, InstrumentStatus
from .timecalc import fmt_date, fmt_dt, utcnow

if TYPE_CHECKING:
    from .workspace import LabState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alert:
    key: str
    subject: str
    body: str


class AlertChannel(Protocol):
    def send(self, alert: Alert) -> None: ...


class LoggingAlertChannel:
    """Writes each alert to the log as a simulated e-mail."""

    def __init__(self, recipient: str, sender: str) -> None:
        self.recipient = recipient
        self.sender = sender

    def send(self, alert: Alert) -> None:
        logger.info(
            "alert.email",
            extra={
                "extra_data": {
                    "to": self.recipient,
                    "from": self.sender,
                    "subject": alert.subject,
                    "body": alert.body,
                    "key": alert.key,
                }
            },
        )


def default_channel() -> LoggingAlertChannel:
    return LoggingAlertChannel(settings.ADMIN_EMAIL, settings.NOTIFICATION_SENDER)


def maintenance_key(instrument_id: str) -> str:
    return f"overdue-maintenance-{instrument_id}"


def checkin_key(booking_id: str) -> str:
    return f"overdue-checkin-{booking_id}"


def low_stock_key(consumable_id: str) -> str:
    return f"low-stock-{consumable_id}"


def _emit(channel: AlertChannel, alert: Alert) -> None:
    try:
        channel.send(alert)
    except Exception:
        # No retries; the key is recorded either way.
        logger.exception("alert.send_failed", extra={"extra_data": {"key": alert.key}})


def _overdue_maintenance_alert(inst: Instrument) -> Alert:
    body = (
        "Dear Lab Admin,\n\n"
        "This is an automated alert to inform you that the following instrument "
        "is overdue for its scheduled maintenance:\n\n"
        f"  - Instrument: {inst.name} ({inst.serial_number})\n"
        f"  - Location: {inst.location}\n"
        f"  - Maintenance Due Date: {fmt_date(inst.next_maintenance)}\n\n"
        "Please schedule the required service as soon as possible to ensure "
        "equipment reliability and safety.\n\n"
        "Thank you,\nLabMonitor System"
    )
    return Alert(maintenance_key(inst.id), f"Urgent: Maintenance Overdue for {inst.name}", body)


def _overdue_checkin_alert(booking: Booking, inst: Instrument) -> Alert:
    body = (
        "Dear Lab Admin,\n\n"
        "This is an alert that an instrument has not been checked in after its "
        "booking period ended:\n\n"
        f"  - Instrument: {inst.name} ({inst.serial_number})\n"
        f"  - User: {booking.user_id}\n"
        f"  - Booking End Time: {fmt_dt(booking.end_time)}\n\n"
        "Please verify the instrument's status and ensure it is available for "
        "the next user.\n\n"
        "Thank you,\nLabMonitor System"
    )
    return Alert(checkin_key(booking.id), f"Overdue check-in for {inst.name}", body)


def _low_stock_alert(item: Consumable) -> Alert:
    unit = item.unit.value
    body = (
        "Dear Lab Admin,\n\n"
        "This is an automated alert that a consumable item is running low on stock:\n\n"
        f"  - Item: {item.name}\n"
        f"  - Current Quantity: {item.quantity} {unit}\n"
        f"  - Low Stock Threshold: {item.low_stock_threshold} {unit}\n\n"
        "Please reorder this item soon to avoid a shortage.\n\n"
        "Thank you,\nLabMonitor System"
    )
    return Alert(low_stock_key(item.id), f"Low Stock Alert: {item.name}", body)


def check_overdue_maintenance(
    instruments: Iterable[Instrument],
    notified: frozenset[str],
    channel: AlertChannel,
    now: datetime | None = None,
) -> frozenset[str]:
    """Alert once per instrument whose next service date has passed.

    Status does not matter; an Offline instrument still alerts.
    """

    now = now or utcnow()
    keys = set(notified)
    for inst in instruments:
        key = maintenance_key(inst.id)
        if inst.next_maintenance < now and key not in keys:
            _emit(channel, _overdue_maintenance_alert(inst))
            keys.add(key)
    return frozenset(keys)


def check_overdue_bookings(
    bookings: Iterable[Booking],
    instruments: Iterable[Instrument],
    notified: frozenset[str],
    channel: AlertChannel,
    now: datetime | None = None,
) -> frozenset[str]:
    """Alert once per ended booking whose instrument is still In Use."""

    now = now or utcnow()
    by_id = {inst.id: inst for inst in instruments}
    keys = set(notified)
    for booking in bookings:
        inst = by_id.get(booking.instrument_id)
        if inst is None or inst.status is not InstrumentStatus.IN_USE:
            continue
        key = checkin_key(booking.id)
        if booking.end_time < now and key not in keys:
            _emit(channel, _overdue_checkin_alert(booking, inst))
            keys.add(key)
    return frozenset(keys)


def check_low_stock(
    consumable: Consumable, notified: frozenset[str], channel: AlertChannel
) -> frozenset[str]:
    key = low_stock_key(consumable.id)
    if consumable.is_low_stock:
        if key in notified:
            return notified
        _emit(channel, _low_stock_alert(consumable))
        return notified | {key}
    if key in notified:
        return notified - {key}
    return notified


def run_startup_checks(
    state: "LabState", channel: AlertChannel, now: datetime | None = None
) -> frozenset[str]:
    """The checks that run once when collections are first loaded."""

    now = now or utcnow()
    notified = check_overdue_maintenance(state.instruments, state.notified, channel, now)
    notified = check_overdue_bookings(state.bookings, state.instruments, notified, channel, now)
    for item in state.consumables:
        notified = check_low_stock(item, notified, channel)
    return notified
