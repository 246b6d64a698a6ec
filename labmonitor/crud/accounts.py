"""Account and profile persistence used by the local identity provider."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.account import Account, Profile


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_account_by_uid(db: Session, uid: str) -> Account | None:
    stmt = select(Account).where(Account.uid == uid)
    return db.execute(stmt).scalars().first()


def get_accounts_by_email(db: Session, email: str) -> list[Account]:
    """Every account registered under ``email`` (case-insensitive)."""

    stmt = select(Account).where(func.lower(Account.email) == _normalize_email(email)).order_by(Account.id)
    return list(db.execute(stmt).scalars().all())


def get_federated_account(db: Session, provider: str, subject: str) -> Account | None:
    stmt = select(Account).where(Account.provider == provider, Account.provider_subject == subject)
    return db.execute(stmt).scalars().first()


def create_account(
    db: Session,
    *,
    email: str,
    provider: str = "password",
    password_hash: str | None = None,
    provider_subject: str | None = None,
) -> Account:
    """Add a new account row with a fresh uid. The caller commits."""

    account = Account(
        uid=uuid4().hex,
        email=_normalize_email(email),
        provider=provider,
        provider_subject=provider_subject,
        password_hash=password_hash,
        created_at=datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
    )
    db.add(account)
    db.flush()
    return account


def get_profile(db: Session, uid: str) -> Profile | None:
    return db.get(Profile, uid)


def create_profile(db: Session, *, uid: str, name: str, email: str, role: str) -> Profile:
    """Write the profile document for ``uid``. Profiles are written once, at sign-up."""

    profile = Profile(uid=uid, name=name.strip(), email=_normalize_email(email), role=role)
    db.add(profile)
    db.flush()
    return profile
