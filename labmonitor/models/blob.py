from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class StoredBlob(Base):
    """One serialized collection, addressed by its logical name.

    The store never patches a payload in place: every save replaces the whole
    document for ``key``.
    """

    __tablename__ = "stored_blobs"

    key = Column(Text, primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
