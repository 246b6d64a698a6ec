"""Typed load/save of whole collections on top of the key/value blob table.

``load`` never fails the caller for a missing or unreadable document: it logs a
warning and hands back the default it was given. ``save`` always writes the
complete value; there are no partial updates.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from ..crud.blobs import get_blob, put_blob
from ..db.session import SessionFactory, session_scope

logger = logging.getLogger(__name__)

T = TypeVar("T")

INSTRUMENTS_KEY = "instruments"
BOOKINGS_KEY = "bookings"
LOGS_KEY = "logs"
CONSUMABLES_KEY = "consumables"
THEME_KEY = "theme"


def _serialize(value: Any) -> str:
    return json.dumps(to_jsonable_python(value, by_alias=True), separators=(",", ":"), ensure_ascii=False)


class CollectionStore:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._adapters: dict[Any, TypeAdapter] = {}

    def _adapter(self, model: Any) -> TypeAdapter:
        adapter = self._adapters.get(model)
        if adapter is None:
            adapter = TypeAdapter(model)
            self._adapters[model] = adapter
        return adapter

    def load(self, key: str, default: T, *, model: Any = None) -> T:
        """Return the stored value for ``key``, or ``default`` when it cannot be read.

        ``model`` is any type pydantic can validate (``list[Instrument]``,
        ``Theme`` ...). Without it the decoded JSON is returned as-is.
        """

        with session_scope(self._session_factory) as db:
            blob = get_blob(db, key)
            raw = blob.payload if blob is not None else None
        if raw is None:
            logger.warning("store.load_missing", extra={"extra_data": {"key": key}})
            return default
        try:
            decoded = json.loads(raw)
            if model is None:
                return decoded
            return self._adapter(model).validate_python(decoded)
        except (ValueError, ValidationError) as exc:
            # json.JSONDecodeError is a ValueError subclass.
            logger.warning(
                "store.load_failed",
                extra={"extra_data": {"key": key, "error": str(exc).splitlines()[0]}},
            )
            return default

    def save(self, key: str, value: Any) -> None:
        self.save_many({key: value})

    def save_many(self, values: Mapping[str, Any]) -> None:
        """Persist several collections in a single transaction."""

        payloads = {key: _serialize(value) for key, value in values.items()}
        with session_scope(self._session_factory) as db:
            for key, payload in payloads.items():
                put_blob(db, key, payload)
        logger.debug("store.saved", extra={"extra_data": {"keys": sorted(payloads)}})
