import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.crud.blobs import put_blob
from labmonitor.db.session import build_session_factory, init_db, session_scope
from labmonitor.schemas.lab import Instrument, InstrumentStatus, Theme
from labmonitor.services.store import INSTRUMENTS_KEY, THEME_KEY, CollectionStore


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    return build_session_factory(engine)


def _instrument(ident="instr-1", name="Zeiss LSM 980"):
    return Instrument(
        id=ident,
        name=name,
        type="Confocal Microscope",
        serial_number="SN-1",
        location="Lab 301",
        status=InstrumentStatus.AVAILABLE,
        last_maintenance=datetime(2024, 1, 1, tzinfo=timezone.utc),
        next_maintenance=datetime(2024, 7, 1, tzinfo=timezone.utc),
    )


def _write_raw(session_factory, key, payload):
    with session_scope(session_factory) as db:
        put_blob(db, key, payload)


def test_load_missing_key_returns_default_and_warns(session_factory, caplog):
    store = CollectionStore(session_factory)
    default = [_instrument()]

    with caplog.at_level(logging.WARNING, logger="labmonitor.services.store"):
        assert store.load(INSTRUMENTS_KEY, default, model=list[Instrument]) is default

    assert [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING] == ["store.load_missing"]


def test_save_then_load_uses_camel_case_documents(session_factory):
    store = CollectionStore(session_factory)
    store.save(INSTRUMENTS_KEY, [_instrument()])

    raw = store.load(INSTRUMENTS_KEY, None)
    assert raw[0]["serialNumber"] == "SN-1"
    assert "nextMaintenance" in raw[0]

    loaded = store.load(INSTRUMENTS_KEY, [], model=list[Instrument])
    assert loaded == [_instrument()]


def test_save_replaces_whole_collection(session_factory):
    store = CollectionStore(session_factory)
    store.save(INSTRUMENTS_KEY, [_instrument("a"), _instrument("b")])
    store.save(INSTRUMENTS_KEY, [_instrument("c")])

    loaded = store.load(INSTRUMENTS_KEY, [], model=list[Instrument])
    assert [inst.id for inst in loaded] == ["c"]


def test_corrupt_json_falls_back_to_default_and_warns(session_factory, caplog):
    store = CollectionStore(session_factory)
    _write_raw(session_factory, INSTRUMENTS_KEY, "{not json")

    with caplog.at_level(logging.WARNING, logger="labmonitor.services.store"):
        result = store.load(INSTRUMENTS_KEY, ["fallback"], model=list[Instrument])

    assert result == ["fallback"]
    assert any(record.getMessage() == "store.load_failed" for record in caplog.records)


def test_payload_failing_validation_falls_back(session_factory):
    store = CollectionStore(session_factory)
    _write_raw(session_factory, INSTRUMENTS_KEY, '[{"id": "x"}]')

    assert store.load(INSTRUMENTS_KEY, [], model=list[Instrument]) == []


def test_save_many_writes_every_key(session_factory):
    store = CollectionStore(session_factory)
    store.save_many({INSTRUMENTS_KEY: [_instrument()], THEME_KEY: Theme.LIGHT})

    assert store.load(THEME_KEY, Theme.DARK, model=Theme) is Theme.LIGHT
    assert len(store.load(INSTRUMENTS_KEY, [], model=list[Instrument])) == 1
