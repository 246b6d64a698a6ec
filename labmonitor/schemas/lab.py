"""Domain records for instruments, bookings, maintenance logs and consumables.

Records serialize with camelCase keys (``serialNumber``, ``nextMaintenance``,
``instrumentId`` ...). That is the layout stored in the collection store and
returned by the API; Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..services.timecalc import ensure_aware


class InstrumentStatus(str, Enum):
    AVAILABLE = "Available"
    IN_USE = "In Use"
    MAINTENANCE = "Maintenance"
    OFFLINE = "Offline"


class UserRole(str, Enum):
    ADMIN = "Admin"
    TECHNICIAN = "Technician"
    RESEARCHER = "Researcher"
    STUDENT = "Student"


class ConsumableUnit(str, Enum):
    ITEMS = "items"
    MILLILITERS = "mL"
    GRAMS = "g"
    BOX = "box"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class LabRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InstrumentFields(LabRecord):
    name: str = Field(min_length=1)
    type: str
    serial_number: str
    location: str
    status: InstrumentStatus = InstrumentStatus.AVAILABLE
    last_maintenance: datetime
    next_maintenance: datetime

    @field_validator("last_maintenance", "next_maintenance")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class InstrumentCreate(InstrumentFields):
    pass


class Instrument(InstrumentFields):
    id: str


class BookingCreate(LabRecord):
    instrument_id: str
    # Display name of the person booking; the API fills in the signed-in user.
    user_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    purpose: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class Booking(BookingCreate):
    id: str
    user_id: str


class MaintenanceLogCreate(LabRecord):
    instrument_id: str
    date: datetime
    technician: str
    description: str = ""
    cost: float = 0.0

    @field_validator("date")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class MaintenanceLog(MaintenanceLogCreate):
    id: str


class Consumable(LabRecord):
    id: str
    name: str
    unit: ConsumableUnit
    quantity: int = Field(ge=0)
    low_stock_threshold: int

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold


class BulkStatusUpdate(LabRecord):
    instrument_ids: list[str]
    status: InstrumentStatus


class StatusUpdate(LabRecord):
    status: InstrumentStatus


class QuantityAdjustment(LabRecord):
    delta: int


class ConsumableOut(Consumable):
    low_stock: bool = False


class InstrumentCard(Instrument):
    """Instrument as listed on the dashboard, with derived display fields."""

    selected: bool = False
    maintenance_due_soon: bool = False
    status_color: str = ""
