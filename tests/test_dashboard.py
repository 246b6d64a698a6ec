import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.schemas.lab import Instrument, InstrumentStatus
from labmonitor.services.catalog import SortKey
from labmonitor.services.dashboard import DashboardView
from labmonitor.services.selection import SelectionModel

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make(ident, name, location, due_in=30, status=InstrumentStatus.AVAILABLE):
    return Instrument(
        id=ident,
        name=name,
        type="Analyzer",
        serial_number=f"SN-{ident}",
        location=location,
        status=status,
        last_maintenance=NOW - timedelta(days=90),
        next_maintenance=NOW + timedelta(days=due_in),
    )


INSTRUMENTS = [
    make("a", "Alpha", "Lab 1"),
    make("b", "Beta", "Lab 1", due_in=3),
    make("c", "Gamma", "Lab 2", status=InstrumentStatus.MAINTENANCE),
]


def test_selection_toggle_and_select_all_replaces():
    selection = SelectionModel()
    selection.toggle("x")
    selection.toggle("a")
    selection.toggle("x")
    assert selection.ids == ["a"]

    selection.select_all(["b", "c"])
    assert selection.ids == ["b", "c"]
    assert selection.all_selected(["b", "c"])

    selection.clear()
    assert len(selection) == 0
    assert not selection.all_selected([])


def test_toggle_all_clears_when_everything_visible_is_selected():
    selection = SelectionModel()
    selection.toggle_all(["a", "b"])
    assert selection.ids == ["a", "b"]
    selection.toggle_all(["a", "b"])
    assert selection.ids == []


def test_narrowing_filter_prunes_selection_to_visible():
    view = DashboardView()
    view.toggle_all(INSTRUMENTS)
    snapshot = view.snapshot(INSTRUMENTS, now=NOW)
    assert snapshot.selected_ids == ["a", "b", "c"]
    assert snapshot.all_selected is True

    view.update_filters(search="gamma")
    snapshot = view.snapshot(INSTRUMENTS, now=NOW)
    assert snapshot.visible_count == 1
    assert snapshot.selected_ids == ["c"]
    assert snapshot.all_selected is True
    assert snapshot.as_dict()["selection"] == {"ids": ["c"], "count": 1, "allSelected": True}

    # Widening again does not bring the pruned ids back.
    view.update_filters(search="")
    snapshot = view.snapshot(INSTRUMENTS, now=NOW)
    assert snapshot.selected_ids == ["c"]
    assert snapshot.all_selected is False


def test_session_round_trip_and_reset():
    view = DashboardView()
    view.update_filters(status="Maintenance", location="Lab 2", sort_by=SortKey.NAME_DESC)
    view.selection.toggle("c")

    restored = DashboardView.from_session(view.to_session())
    assert restored.filters == view.filters
    assert restored.selection.ids == ["c"]

    restored.reset()
    assert restored.filters.sort_by is SortKey.NEXT_MAINTENANCE_ASC
    assert restored.selection.ids == []


def test_from_session_ignores_unknown_sort_key():
    view = DashboardView.from_session({"sortBy": "bogus", "selected": ["a"]})
    assert view.filters.sort_by is SortKey.NEXT_MAINTENANCE_ASC


def test_snapshot_cards_carry_display_fields():
    view = DashboardView()
    view.selection.toggle("b")
    cards = {card.id: card for card in view.snapshot(INSTRUMENTS, now=NOW).instruments}

    assert cards["b"].selected is True
    assert cards["b"].maintenance_due_soon is True
    assert cards["a"].maintenance_due_soon is False
    assert cards["c"].status_color == "#f87171"
    payload = view.snapshot(INSTRUMENTS, now=NOW).as_dict()
    assert payload["locations"] == ["All", "Lab 1", "Lab 2"]
    assert payload["instruments"][0]["nextMaintenance"]
