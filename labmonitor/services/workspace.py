"""Application-owned lab state and the handlers that change it.

``LabWorkspace`` is the single owner of the four collections and the notified
set. A handler computes the new collections with the pure functions in
``lifecycle``, writes them to the store and only then swaps them in, so a
failed save leaves the in-memory state as it was.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from .. import seed
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
from . import lifecycle
from .catalog import find_instrument
from .notifications import AlertChannel, check_low_stock, run_startup_checks
from .store import BOOKINGS_KEY, CONSUMABLES_KEY, INSTRUMENTS_KEY, LOGS_KEY, CollectionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabState:
    instruments: list[Instrument] = field(default_factory=list)
    bookings: list[Booking] = field(default_factory=list)
    logs: list[MaintenanceLog] = field(default_factory=list)
    consumables: list[Consumable] = field(default_factory=list)
    notified: frozenset[str] = frozenset()


class LabWorkspace:
    def __init__(self, store: CollectionStore, channel: AlertChannel, *, seed_demo: bool = True) -> None:
        self.store = store
        self.channel = channel
        self.seed_demo = seed_demo
        self.state = LabState()
        self._lock = threading.RLock()

    def load(self, now: datetime | None = None) -> LabState:
        """Read every collection and run the load-time alert checks."""

        with self._lock:
            if self.seed_demo:
                defaults = (
                    seed.demo_instruments(now),
                    seed.demo_bookings(),
                    seed.demo_logs(),
                    seed.demo_consumables(),
                )
            else:
                defaults = ([], [], [], [])
            state = LabState(
                instruments=self.store.load(INSTRUMENTS_KEY, defaults[0], model=list[Instrument]),
                bookings=self.store.load(BOOKINGS_KEY, defaults[1], model=list[Booking]),
                logs=self.store.load(LOGS_KEY, defaults[2], model=list[MaintenanceLog]),
                consumables=self.store.load(CONSUMABLES_KEY, defaults[3], model=list[Consumable]),
                notified=self.state.notified,
            )
            notified = run_startup_checks(state, self.channel, now)
            self.state = replace(state, notified=notified)
            logger.info(
                "workspace.loaded",
                extra={
                    "extra_data": {
                        "instruments": len(state.instruments),
                        "bookings": len(state.bookings),
                        "logs": len(state.logs),
                        "consumables": len(state.consumables),
                        "alerts": len(notified),
                    }
                },
            )
            return self.state

    # -- reads -------------------------------------------------------------

    @property
    def instruments(self) -> list[Instrument]:
        return self.state.instruments

    @property
    def bookings(self) -> list[Booking]:
        return self.state.bookings

    @property
    def logs(self) -> list[MaintenanceLog]:
        return self.state.logs

    @property
    def consumables(self) -> list[Consumable]:
        return self.state.consumables

    def find_instrument(self, instrument_id: str) -> Instrument | None:
        return find_instrument(self.state.instruments, instrument_id)

    def find_consumable(self, consumable_id: str) -> Consumable | None:
        return next((c for c in self.state.consumables if c.id == consumable_id), None)

    # -- instruments -------------------------------------------------------

    def add_instrument(self, payload: InstrumentCreate) -> Instrument:
        with self._lock:
            instruments, instrument = lifecycle.add_instrument(self.state.instruments, payload)
            self.store.save(INSTRUMENTS_KEY, instruments)
            self.state = replace(self.state, instruments=instruments)
        logger.info("instrument.added", extra={"extra_data": {"id": instrument.id}})
        return instrument

    def update_instrument(self, instrument: Instrument) -> bool:
        with self._lock:
            instruments, found = lifecycle.update_instrument(self.state.instruments, instrument)
            if not found:
                return False
            self.store.save(INSTRUMENTS_KEY, instruments)
            self.state = replace(self.state, instruments=instruments)
        return True

    def delete_instrument(self, instrument_id: str) -> bool:
        with self._lock:
            instruments, removed = lifecycle.delete_instrument(self.state.instruments, instrument_id)
            if not removed:
                return False
            self.store.save(INSTRUMENTS_KEY, instruments)
            self.state = replace(self.state, instruments=instruments)
        logger.info("instrument.deleted", extra={"extra_data": {"id": instrument_id}})
        return True

    def bulk_update_status(self, instrument_ids: Iterable[str], status: InstrumentStatus) -> list[Instrument]:
        ids = list(instrument_ids)
        with self._lock:
            instruments = lifecycle.bulk_update_status(self.state.instruments, ids, status)
            self.store.save(INSTRUMENTS_KEY, instruments)
            self.state = replace(self.state, instruments=instruments)
        logger.info(
            "instrument.bulk_status",
            extra={"extra_data": {"ids": ids, "status": status.value}},
        )
        return instruments

    # -- bookings and service ----------------------------------------------

    def add_booking(self, payload: BookingCreate, user_name: str) -> Booking:
        with self._lock:
            bookings, instruments, booking = lifecycle.add_booking(
                self.state.bookings, self.state.instruments, payload, user_name
            )
            self.store.save_many({BOOKINGS_KEY: bookings, INSTRUMENTS_KEY: instruments})
            self.state = replace(self.state, bookings=bookings, instruments=instruments)
        logger.info(
            "booking.added",
            extra={"extra_data": {"id": booking.id, "instrument_id": booking.instrument_id}},
        )
        return booking

    def add_maintenance_log(self, payload: MaintenanceLogCreate) -> MaintenanceLog:
        with self._lock:
            logs, log = lifecycle.add_maintenance_log(self.state.logs, payload)
            self.store.save(LOGS_KEY, logs)
            self.state = replace(self.state, logs=logs)
        return log

    # -- consumables -------------------------------------------------------

    def adjust_consumable_quantity(self, consumable_id: str, delta: int) -> Consumable | None:
        """Apply ``delta`` (clamped at zero) and re-run the low-stock check for that item."""

        with self._lock:
            consumables, adjusted = lifecycle.adjust_consumable_quantity(
                self.state.consumables, consumable_id, delta
            )
            if adjusted is None:
                return None
            self.store.save(CONSUMABLES_KEY, consumables)
            notified = check_low_stock(adjusted, self.state.notified, self.channel)
            self.state = replace(self.state, consumables=consumables, notified=notified)
        return adjusted
