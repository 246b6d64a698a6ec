from __future__ import annotations

import hmac
from typing import Callable

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

from ..core.config import settings
from ..core.security import decode_token
from ..middlewares import principal_ctx_var
from ..schemas.auth import User
from ..schemas.lab import UserRole
from ..services.identity import IdentityProvider
from ..services.theme import ThemeController
from ..services.workspace import LabWorkspace
from .ui_auth import session_uid

# Principal used for requests authenticated by the static API key.
SERVICE_USER = User(uid="service", name="API client", email="", role=UserRole.ADMIN)


def get_workspace(request: Request) -> LabWorkspace:
    return request.app.state.workspace


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_theme(request: Request) -> ThemeController:
    return request.app.state.theme


def _unauthorized(detail: str = "Authorization required") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _set_principal(request: Request, user: User, scheme: str) -> User:
    principal = f"{scheme}:{user.uid}"
    principal_ctx_var.set(principal)
    request.state.principal = principal
    request.state.user = user
    return user


async def optional_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> User | None:
    """Resolve the caller from the session cookie, a bearer token or the API key."""

    identity = get_identity(request)

    user = identity.resolve_user(session_uid(request))
    if user is not None:
        return _set_principal(request, user, "session")

    api_key = (settings.API_KEY or "").strip()
    provided = (x_api_key or "").strip()
    if api_key and provided:
        if not hmac.compare_digest(api_key, provided):
            raise _unauthorized("Invalid API key")
        return _set_principal(request, SERVICE_USER, "api-key")

    if authorization:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if scheme.lower() == "bearer" and credentials:
            try:
                payload = decode_token(credentials, verify_type="access")
            except ValueError as exc:
                raise _unauthorized(str(exc)) from exc
            user = identity.resolve_user(payload.sub)
            if user is None:
                raise _unauthorized("Unknown user")
            request.state.token_payload = payload
            return _set_principal(request, user, "jwt")
    return None


async def require_user(user: User | None = Depends(optional_user)) -> User:
    if user is None:
        raise _unauthorized()
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency allowing only the given roles through."""

    allowed = frozenset(roles)

    async def dependency(user: User = Depends(require_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted for your role")
        return user

    return dependency
