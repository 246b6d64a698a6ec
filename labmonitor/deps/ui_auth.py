"""Browser session helpers: which account the signed cookie belongs to."""

from __future__ import annotations

from fastapi import Request

from ..schemas.auth import SessionOut

SESSION_UID = "uid"
SESSION_PROVIDER = "provider"


def session_uid(request: Request) -> str | None:
    try:
        return request.session.get(SESSION_UID)
    except AssertionError:
        # SessionMiddleware not installed.
        return None


def start_session(request: Request, session: SessionOut) -> None:
    request.session.clear()
    request.session[SESSION_UID] = session.uid
    request.session[SESSION_PROVIDER] = session.provider


def end_session(request: Request) -> None:
    request.session.clear()
