"""Application factory: wires storage, the lab workspace, identity and routers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import AuthError, auth_exception_handler, http_exception_handler, validation_exception_handler
from .db import session as db_session
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware
from .routers import (
    api_assistant,
    api_auth,
    api_bookings,
    api_consumables,
    api_dashboard,
    api_instruments,
    api_maintenance,
    api_preferences,
    api_reports,
)
from .schemas.auth import SessionOut
from .services.identity import LocalIdentityProvider
from .services.notifications import AlertChannel, default_channel
from .services.store import CollectionStore
from .services.theme import ThemeController
from .services.workspace import LabWorkspace

logger = logging.getLogger(__name__)


def _log_session_change(session: Optional[SessionOut]) -> None:
    if session is None:
        logger.info("auth.session_ended")
    else:
        logger.info(
            "auth.session_started",
            extra={"extra_data": {"uid": session.uid, "provider": session.provider}},
        )


def create_app(
    engine: Optional[Engine] = None,
    *,
    seed_demo: Optional[bool] = None,
    channel: Optional[AlertChannel] = None,
) -> FastAPI:
    bind = engine or db_session.engine
    factory = db_session.SessionLocal if engine is None else db_session.build_session_factory(bind)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_session.init_db(bind)
        store = CollectionStore(factory)
        workspace = LabWorkspace(
            store,
            channel or default_channel(),
            seed_demo=settings.SEED_DEMO_DATA if seed_demo is None else seed_demo,
        )
        identity = LocalIdentityProvider(factory)
        unsubscribe = identity.on_session_change(_log_session_change)
        app.state.store = store
        app.state.workspace = workspace
        app.state.identity = identity
        app.state.theme = ThemeController(store)
        app.state.conversations = {}
        workspace.load()
        try:
            yield
        finally:
            unsubscribe()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.APP_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=False,  # set True once the app is always served over HTTPS
    )
    if settings.ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AuthError, auth_exception_handler)

    for module in (
        api_auth,
        api_instruments,
        api_dashboard,
        api_bookings,
        api_maintenance,
        api_consumables,
        api_reports,
        api_assistant,
        api_preferences,
    ):
        app.include_router(module.router)

    return app
