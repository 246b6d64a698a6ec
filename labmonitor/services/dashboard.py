"""Per-browser dashboard state: filter inputs plus the instrument selection.

The state round-trips through the signed session cookie as a plain dict. Every
time a snapshot is taken the selection is pruned to the filtered list, so the
selection count and the "all selected" flag always describe what is on screen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from ..core.display import maintenance_due_soon, status_style
from ..schemas.lab import Instrument, InstrumentCard
from .catalog import ALL, SortKey, filter_and_sort, unique_locations
from .selection import SelectionModel

SESSION_KEY = "dashboard"


@dataclass
class DashboardFilters:
    search: str = ""
    status: str = ALL
    location: str = ALL
    sort_by: SortKey = SortKey.NEXT_MAINTENANCE_ASC

    def as_dict(self) -> dict[str, str]:
        return {
            "search": self.search,
            "status": self.status,
            "location": self.location,
            "sortBy": self.sort_by.value,
        }


@dataclass
class DashboardSnapshot:
    instruments: list[InstrumentCard]
    locations: list[str]
    filters: DashboardFilters
    selected_ids: list[str]
    all_selected: bool
    visible_count: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "instruments": [card.model_dump(by_alias=True, mode="json") for card in self.instruments],
            "locations": self.locations,
            "filters": self.filters.as_dict(),
            "selection": {
                "ids": self.selected_ids,
                "count": len(self.selected_ids),
                "allSelected": self.all_selected,
            },
            "visibleCount": self.visible_count,
        }


@dataclass
class DashboardView:
    filters: DashboardFilters = field(default_factory=DashboardFilters)
    selection: SelectionModel = field(default_factory=SelectionModel)

    @classmethod
    def from_session(cls, data: Mapping[str, Any] | None) -> "DashboardView":
        data = data or {}
        try:
            sort_by = SortKey(data.get("sortBy") or SortKey.NEXT_MAINTENANCE_ASC)
        except ValueError:
            sort_by = SortKey.NEXT_MAINTENANCE_ASC
        filters = DashboardFilters(
            search=str(data.get("search") or ""),
            status=str(data.get("status") or ALL),
            location=str(data.get("location") or ALL),
            sort_by=sort_by,
        )
        return cls(filters=filters, selection=SelectionModel(data.get("selected") or []))

    def to_session(self) -> dict[str, Any]:
        return {**self.filters.as_dict(), "selected": self.selection.ids}

    def update_filters(
        self,
        *,
        search: str | None = None,
        status: str | None = None,
        location: str | None = None,
        sort_by: SortKey | None = None,
    ) -> None:
        if search is not None:
            self.filters.search = search
        if status is not None:
            self.filters.status = status
        if location is not None:
            self.filters.location = location
        if sort_by is not None:
            self.filters.sort_by = sort_by

    def reset(self) -> None:
        self.filters = DashboardFilters()
        self.selection.clear()

    def visible(self, instruments: Sequence[Instrument]) -> list[Instrument]:
        return filter_and_sort(
            instruments,
            search=self.filters.search,
            status=self.filters.status,
            location=self.filters.location,
            sort_by=self.filters.sort_by,
        )

    def toggle_all(self, instruments: Sequence[Instrument]) -> None:
        visible_ids = [inst.id for inst in self.visible(instruments)]
        self.selection.prune(visible_ids)
        self.selection.toggle_all(visible_ids)

    def snapshot(self, instruments: Sequence[Instrument], now: datetime | None = None) -> DashboardSnapshot:
        visible = self.visible(instruments)
        visible_ids = [inst.id for inst in visible]
        self.selection.prune(visible_ids)
        cards = [
            InstrumentCard(
                **inst.model_dump(),
                selected=inst.id in self.selection,
                maintenance_due_soon=maintenance_due_soon(inst, now),
                status_color=status_style(inst.status).color,
            )
            for inst in visible
        ]
        return DashboardSnapshot(
            instruments=cards,
            locations=unique_locations(instruments),
            filters=self.filters,
            selected_ids=self.selection.ids,
            all_selected=self.selection.all_selected(visible_ids),
            visible_count=len(visible),
        )
