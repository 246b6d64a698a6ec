import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from labmonitor.core.errors import AuthError, auth_error_message
from labmonitor.crud.accounts import create_account
from labmonitor.db.session import build_session_factory, init_db, session_scope
from labmonitor.schemas.auth import FederatedIdentity
from labmonitor.schemas.lab import UserRole
from labmonitor.services.identity import LocalIdentityProvider


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    return build_session_factory(engine)


@pytest.fixture()
def provider(session_factory):
    return LocalIdentityProvider(
        session_factory,
        min_password_length=6,
        allowed_providers=["google", "github"],
        default_role=UserRole.RESEARCHER,
    )


def test_sign_up_creates_profile_and_log_in_returns_session(provider):
    user = provider.sign_up("Ada", "Ada@Example.com", "secret1", UserRole.TECHNICIAN)
    assert user.role is UserRole.TECHNICIAN
    assert user.email == "ada@example.com"

    session = provider.log_in("ada@example.com", "secret1")
    assert session.uid == user.uid
    assert provider.get_profile(user.uid) == user


def test_sign_up_rejects_weak_password_and_duplicates(provider):
    with pytest.raises(AuthError) as exc:
        provider.sign_up("Ada", "ada@example.com", "123", UserRole.STUDENT)
    assert exc.value.code == "auth/weak-password"

    provider.sign_up("Ada", "ada@example.com", "secret1", UserRole.STUDENT)
    with pytest.raises(AuthError) as exc:
        provider.sign_up("Other", "ADA@example.com", "secret2", UserRole.STUDENT)
    assert exc.value.code == "auth/email-already-in-use"


def test_log_in_with_wrong_password_or_unknown_email(provider):
    provider.sign_up("Ada", "ada@example.com", "secret1", UserRole.STUDENT)
    for email, password in (("ada@example.com", "nope!!"), ("who@example.com", "secret1")):
        with pytest.raises(AuthError) as exc:
            provider.log_in(email, password)
        assert exc.value.code == "auth/invalid-credential"
    assert auth_error_message("auth/invalid-credential") == "Invalid email or password."


def test_federated_sign_in_creates_default_profile_once(provider):
    identity = FederatedIdentity(subject="gh-42", email="octo@example.com", displayName=None)

    first = provider.log_in_with_federated_provider("GitHub", identity)
    second = provider.log_in_with_federated_provider("github", identity)

    assert first.uid == second.uid
    user = provider.get_profile(first.uid)
    assert user.role is UserRole.RESEARCHER
    assert user.name == "octo@example.com"


def test_federated_errors(provider):
    identity = FederatedIdentity(subject="g-1", email="ada@example.com", displayName="Ada L")

    with pytest.raises(AuthError) as exc:
        provider.log_in_with_federated_provider("google", None)
    assert exc.value.code == "auth/popup-closed-by-user"

    with pytest.raises(AuthError) as exc:
        provider.log_in_with_federated_provider("myspace", identity)
    assert exc.value.code == "auth/unauthorized-domain"

    provider.sign_up("Ada", "ada@example.com", "secret1", UserRole.STUDENT)
    with pytest.raises(AuthError) as exc:
        provider.log_in_with_federated_provider("google", identity)
    assert exc.value.code == "auth/account-exists-with-different-credential"


def test_account_without_profile_resolves_to_signed_out(provider, session_factory):
    with session_scope(session_factory) as db:
        uid = create_account(db, email="ghost@example.com").uid

    assert provider.resolve_user(uid) is None
    assert provider.resolve_user(None) is None


def test_session_listeners_and_unsubscribe(provider):
    events = []
    unsubscribe = provider.on_session_change(events.append)

    user = provider.sign_up("Ada", "ada@example.com", "secret1", UserRole.STUDENT)
    provider.log_out()
    unsubscribe()
    provider.log_in("ada@example.com", "secret1")

    assert [e.uid if e else None for e in events] == [user.uid, None]
