import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.schemas.lab import Instrument, InstrumentStatus
from labmonitor.services.catalog import ALL, SortKey, filter_and_sort, find_instrument, unique_locations

BASE = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def make(ident, name, kind="Microscope", location="Lab 1", status=InstrumentStatus.AVAILABLE, due_in=30):
    return Instrument(
        id=ident,
        name=name,
        type=kind,
        serial_number=f"SN-{ident}",
        location=location,
        status=status,
        last_maintenance=BASE - timedelta(days=100),
        next_maintenance=BASE + timedelta(days=due_in),
    )


def sample():
    return [
        make("i1", "Zeiss LSM 980", "Confocal Microscope", "Lab 301", due_in=30),
        make("i2", "Thermo Orbitrap", "Mass Spectrometer", "Lab 205", InstrumentStatus.IN_USE, due_in=60),
        make("i3", "agilent HPLC", "HPLC System", "Lab 110", InstrumentStatus.MAINTENANCE, due_in=5),
        make("i4", "NovaSeq", "DNA Sequencer", "Genomics Core", InstrumentStatus.OFFLINE, due_in=-10),
        make("i5", "Bruker NMR", "NMR Spectrometer", "Lab 301", due_in=10),
    ]


def test_default_sort_is_next_maintenance_ascending():
    result = filter_and_sort(sample())
    assert [inst.id for inst in result] == ["i4", "i3", "i5", "i1", "i2"]


def test_search_matches_name_type_or_location_case_insensitively():
    instruments = sample()
    assert {i.id for i in filter_and_sort(instruments, search="ZEISS")} == {"i1"}
    assert {i.id for i in filter_and_sort(instruments, search="spectro")} == {"i2", "i5"}
    assert {i.id for i in filter_and_sort(instruments, search="genomics")} == {"i4"}
    assert filter_and_sort(instruments, search="nothing-like-this") == []


def test_status_and_location_filters_are_anded():
    instruments = sample()
    result = filter_and_sort(instruments, status=InstrumentStatus.AVAILABLE.value, location="Lab 301")
    assert {i.id for i in result} == {"i1", "i5"}

    result = filter_and_sort(instruments, status="In Use", location="Lab 301")
    assert result == []


def test_name_sorts_are_exact_reverses():
    instruments = sample()
    ascending = filter_and_sort(instruments, sort_by=SortKey.NAME_ASC)
    descending = filter_and_sort(instruments, sort_by=SortKey.NAME_DESC)

    assert [i.name for i in ascending] == ["agilent HPLC", "Bruker NMR", "NovaSeq", "Thermo Orbitrap", "Zeiss LSM 980"]
    assert [i.id for i in descending] == [i.id for i in reversed(ascending)]


def test_never_fabricates_or_duplicates_and_leaves_input_alone():
    instruments = sample()
    before = [i.id for i in instruments]
    for key in SortKey:
        for status in (ALL, *[s.value for s in InstrumentStatus]):
            result = filter_and_sort(instruments, search="l", status=status, sort_by=key)
            ids = [i.id for i in result]
            assert len(ids) == len(set(ids))
            assert set(ids) <= set(before)
    assert [i.id for i in instruments] == before


def test_unique_locations_keeps_first_seen_order():
    assert unique_locations(sample()) == [ALL, "Lab 301", "Lab 205", "Lab 110", "Genomics Core"]


def test_find_instrument():
    instruments = sample()
    assert find_instrument(instruments, "i3").name == "agilent HPLC"
    assert find_instrument(instruments, "missing") is None


def test_search_term_is_not_trimmed():
    instruments = [
        make("a", "Orbitrap", "Spectrometer", "Lab1"),
        make("b", "Zeiss LSM", "Microscope", "Lab2"),
    ]
    assert [i.id for i in filter_and_sort(instruments, search=" ")] == ["b"]
    assert [i.id for i in filter_and_sort(instruments, search="zeiss ")] == ["b"]
    assert filter_and_sort(instruments, search="orbitrap ") == []


def test_search_lowercases_without_folding():
    instruments = [make("a", "Straße Sensor", "Probe", "Lab1")]
    assert filter_and_sort(instruments, search="strasse") == []
    assert [i.id for i in filter_and_sort(instruments, search="STRAßE")] == ["a"]
