"""Row-level helpers for the ``stored_blobs`` table."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ..models.blob import StoredBlob


def get_blob(db: Session, key: str) -> StoredBlob | None:
    """Return the stored document for ``key`` or ``None`` when absent."""

    return db.get(StoredBlob, key)


def put_blob(db: Session, key: str, payload: str) -> StoredBlob:
    """Insert or replace the document for ``key``. The caller commits."""

    now = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    blob = db.get(StoredBlob, key)
    if blob is None:
        blob = StoredBlob(key=key, payload=payload, updated_at=now)
        db.add(blob)
    else:
        blob.payload = payload
        blob.updated_at = now
    return blob


def delete_blob(db: Session, key: str) -> None:
    blob = db.get(StoredBlob, key)
    if blob is not None:
        db.delete(blob)
