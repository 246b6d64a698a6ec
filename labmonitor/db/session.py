"""SQLAlchemy engine and session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ..core.config import settings

# ``Base`` is the parent class for every SQLAlchemy model defined in labmonitor/models.
Base = declarative_base()

SessionFactory = Callable[[], Session]


def build_engine(url: str) -> Engine:
    """Create an engine; SQLite connections may be shared across worker threads."""

    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = build_engine(settings.database_url)
SessionLocal = build_session_factory(engine)


def init_db(bind: Engine) -> None:
    """Create any missing tables. Importing the models registers them with ``Base``."""

    from ..models import blob as _blob  # noqa: F401
    from ..models import account as _account  # noqa: F401

    Base.metadata.create_all(bind=bind)


@contextmanager
def session_scope(factory: SessionFactory) -> Iterator[Session]:
    """Provide a transactional scope: commit on success, roll back on error."""

    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
