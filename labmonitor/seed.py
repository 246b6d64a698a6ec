"""Demo collections used when the store holds nothing yet.

Maintenance dates are laid out relative to ``now`` so a fresh install shows one
overdue instrument (the sequencer) and otherwise a healthy schedule.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from .schemas.lab import Booking, Consumable, ConsumableUnit, Instrument, InstrumentStatus, MaintenanceLog
from .services.timecalc import utcnow


def demo_instruments(now: datetime | None = None) -> list[Instrument]:
    now = now or utcnow()
    day = timedelta(days=1)
    rows = [
        ("instr-1", "Zeiss LSM 980", "Confocal Microscope", "SN-Z980-001", "Lab 301",
         InstrumentStatus.AVAILABLE, -150, 30),
        ("instr-2", "Thermo Orbitrap", "Mass Spectrometer", "SN-TFS-ORBI-015", "Lab 205",
         InstrumentStatus.IN_USE, -120, 60),
        ("instr-3", "Agilent 1290 Infinity II", "HPLC System", "SN-AG-1290-2023", "Lab 110",
         InstrumentStatus.MAINTENANCE, -5, 180),
        ("instr-4", "Illumina NovaSeq 6000", "DNA Sequencer", "SN-IL-NS6K-007", "Genomics Core",
         InstrumentStatus.OFFLINE, -190, -10),
        ("instr-5", "Bruker Avance NEO", "NMR Spectrometer", "SN-BRK-NEO-002", "NMR Facility",
         InstrumentStatus.AVAILABLE, -170, 10),
    ]
    return [
        Instrument(
            id=ident,
            name=name,
            type=kind,
            serial_number=serial,
            location=location,
            status=status,
            last_maintenance=now + last * day,
            next_maintenance=now + nxt * day,
        )
        for ident, name, kind, serial, location, status, last, nxt in rows
    ]


def demo_bookings() -> list[Booking]:
    return []


def demo_logs() -> list[MaintenanceLog]:
    return []


def demo_consumables() -> list[Consumable]:
    return [
        Consumable(id="cons-1", name="1000uL Pipette Tips", unit=ConsumableUnit.BOX, quantity=5, low_stock_threshold=10),
        Consumable(id="cons-2", name="Ethanol (99%)", unit=ConsumableUnit.MILLILITERS, quantity=1500, low_stock_threshold=500),
        Consumable(id="cons-3", name="Nitrile Gloves (M)", unit=ConsumableUnit.BOX, quantity=22, low_stock_threshold=5),
        Consumable(id="cons-4", name="SYBR Green Master Mix", unit=ConsumableUnit.ITEMS, quantity=3, low_stock_threshold=2),
    ]
