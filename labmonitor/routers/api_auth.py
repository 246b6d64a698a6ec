from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..core.errors import AuthError
from ..core.security import issue_token_pair, refresh_access_token
from ..deps.auth import SERVICE_USER, get_identity, optional_user, require_user
from ..deps.ui_auth import end_session, session_uid, start_session
from ..schemas.auth import (
    FederatedLoginRequest,
    LoginRequest,
    RefreshRequest,
    SessionOut,
    SignUpRequest,
    TokenRequest,
    TokenResponse,
    User,
)
from ..services.identity import IdentityProvider

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _signed_in_user(identity: IdentityProvider, session: SessionOut) -> User:
    user = identity.resolve_user(session.uid)
    if user is None:
        raise AuthError("auth/missing-profile")
    return user


@router.post("/signup", response_model=User, status_code=status.HTTP_201_CREATED)
def signup(payload: SignUpRequest, request: Request, identity: IdentityProvider = Depends(get_identity)):
    user = identity.sign_up(payload.name, payload.email, payload.password, payload.role)
    start_session(request, SessionOut(uid=user.uid, email=user.email, provider="password"))
    return user


@router.post("/login", response_model=User)
def login(payload: LoginRequest, request: Request, identity: IdentityProvider = Depends(get_identity)):
    session = identity.log_in(payload.email, payload.password)
    user = _signed_in_user(identity, session)
    start_session(request, session)
    return user


@router.post("/federated/{provider}", response_model=User)
def federated_login(
    provider: str,
    payload: FederatedLoginRequest,
    request: Request,
    identity: IdentityProvider = Depends(get_identity),
):
    session = identity.log_in_with_federated_provider(provider, payload.identity)
    user = _signed_in_user(identity, session)
    start_session(request, session)
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, identity: IdentityProvider = Depends(get_identity)):
    uid = session_uid(request)
    identity.log_out(SessionOut(uid=uid, email="", provider="") if uid else None)
    end_session(request)


@router.get("/me", response_model=User)
def me(user: User = Depends(require_user)):
    return user


@router.post("/token", response_model=TokenResponse, summary="Issue JWTs for the session or for credentials")
def exchange_token(
    payload: TokenRequest,
    identity: IdentityProvider = Depends(get_identity),
    current: User | None = Depends(optional_user),
):
    if payload.email and payload.password:
        session = identity.log_in(payload.email, payload.password)
        subject = _signed_in_user(identity, session).uid
    elif current is not None and current.uid != SERVICE_USER.uid:
        subject = current.uid
    else:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credentials required")
    pair = issue_token_pair(subject=subject)
    return TokenResponse(**pair.model_dump())


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def refresh_token(payload: RefreshRequest):
    try:
        pair = refresh_access_token(payload.refresh_token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return TokenResponse(**pair.model_dump())
