"""Identity collaborator: accounts, sessions and user profiles.

``IdentityProvider`` is the interface the HTTP layer depends on.
``LocalIdentityProvider`` keeps password and federated accounts in the
application database; federated providers hand over already-verified claims
(subject, e-mail, display name) after their own popup flow.

Failures are raised as ``AuthError`` with a provider code; the error handlers
turn the code into a fixed user-facing message.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from ..core.config import settings
from ..core.errors import AuthError
from ..core.security import hash_password, verify_password
from ..crud import accounts as crud
from ..db.session import SessionFactory, session_scope
from ..schemas.auth import FederatedIdentity, SessionOut, User
from ..schemas.lab import UserRole

logger = logging.getLogger(__name__)

PASSWORD_PROVIDER = "password"

SessionCallback = Callable[[Optional[SessionOut]], None]


class IdentityProvider(ABC):
    def __init__(self) -> None:
        self._listeners: List[SessionCallback] = []

    @abstractmethod
    def sign_up(self, name: str, email: str, password: str, role: UserRole) -> User: ...

    @abstractmethod
    def log_in(self, email: str, password: str) -> SessionOut: ...

    @abstractmethod
    def log_in_with_federated_provider(
        self, provider: str, identity: Optional[FederatedIdentity]
    ) -> SessionOut: ...

    @abstractmethod
    def get_profile(self, uid: str) -> Optional[User]: ...

    def log_out(self, session: Optional[SessionOut] = None) -> None:
        if session is not None:
            logger.info("auth.logout", extra={"extra_data": {"uid": session.uid}})
        self._notify(None)

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """Register ``callback``; the returned function unsubscribes it."""

        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, session: Optional[SessionOut]) -> None:
        for callback in list(self._listeners):
            try:
                callback(session)
            except Exception:
                logger.exception("auth.listener_failed")

    def resolve_user(self, uid: Optional[str]) -> Optional[User]:
        """User for a session uid, or ``None`` when there is no usable profile.

        A signed-in account without a profile row is treated as signed out.
        """

        if not uid:
            return None
        user = self.get_profile(uid)
        if user is None:
            logger.error(
                "auth.missing_profile",
                extra={"extra_data": {"uid": uid, "code": "auth/missing-profile"}},
            )
        return user


class LocalIdentityProvider(IdentityProvider):
    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        min_password_length: Optional[int] = None,
        allowed_providers: Optional[List[str]] = None,
        default_role: Optional[UserRole] = None,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory
        self.min_password_length = (
            settings.MIN_PASSWORD_LENGTH if min_password_length is None else min_password_length
        )
        providers = settings.FEDERATED_PROVIDERS if allowed_providers is None else allowed_providers
        self.allowed_providers = {p.strip().lower() for p in providers if p.strip()}
        self.default_role = default_role or UserRole(settings.DEFAULT_FEDERATED_ROLE)

    def sign_up(self, name: str, email: str, password: str, role: UserRole) -> User:
        if len(password or "") < self.min_password_length:
            raise AuthError("auth/weak-password")
        try:
            with session_scope(self._session_factory) as db:
                if crud.get_accounts_by_email(db, email):
                    raise AuthError("auth/email-already-in-use")
                account = crud.create_account(db, email=email, password_hash=hash_password(password))
                profile = crud.create_profile(
                    db, uid=account.uid, name=name, email=account.email, role=role.value
                )
                user = User(uid=profile.uid, name=profile.name, email=profile.email, role=role)
        except IntegrityError as exc:
            raise AuthError("auth/email-already-in-use", str(exc)) from exc
        logger.info("auth.signup", extra={"extra_data": {"uid": user.uid, "role": role.value}})
        self._notify(SessionOut(uid=user.uid, email=user.email, provider=PASSWORD_PROVIDER))
        return user

    def log_in(self, email: str, password: str) -> SessionOut:
        with session_scope(self._session_factory) as db:
            account = next(
                (a for a in crud.get_accounts_by_email(db, email) if a.provider == PASSWORD_PROVIDER),
                None,
            )
            if account is None or not verify_password(password or "", account.password_hash):
                raise AuthError("auth/invalid-credential")
            session = SessionOut(uid=account.uid, email=account.email, provider=PASSWORD_PROVIDER)
        logger.info("auth.login", extra={"extra_data": {"uid": session.uid}})
        self._notify(session)
        return session

    def log_in_with_federated_provider(
        self, provider: str, identity: Optional[FederatedIdentity]
    ) -> SessionOut:
        """Sign in with claims from an external provider, creating the account on first use.

        ``identity`` is ``None`` when the user abandoned the provider popup.
        """

        provider = (provider or "").strip().lower()
        if provider not in self.allowed_providers:
            raise AuthError("auth/unauthorized-domain")
        if identity is None:
            raise AuthError("auth/popup-closed-by-user")

        with session_scope(self._session_factory) as db:
            account = crud.get_federated_account(db, provider, identity.subject)
            if account is None:
                others = [a for a in crud.get_accounts_by_email(db, identity.email) if a.provider != provider]
                if others:
                    raise AuthError("auth/account-exists-with-different-credential")
                account = crud.create_account(
                    db, email=identity.email, provider=provider, provider_subject=identity.subject
                )
                logger.info(
                    "auth.federated_signup",
                    extra={"extra_data": {"uid": account.uid, "provider": provider}},
                )
            if crud.get_profile(db, account.uid) is None:
                crud.create_profile(
                    db,
                    uid=account.uid,
                    name=identity.display_name or identity.email,
                    email=identity.email,
                    role=self.default_role.value,
                )
            session = SessionOut(uid=account.uid, email=account.email, provider=provider)
        self._notify(session)
        return session

    def get_profile(self, uid: str) -> Optional[User]:
        with session_scope(self._session_factory) as db:
            profile = crud.get_profile(db, uid)
            if profile is None:
                return None
            return User(uid=profile.uid, name=profile.name, email=profile.email, role=UserRole(profile.role))
