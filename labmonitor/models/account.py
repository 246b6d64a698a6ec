from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint

from ..db.session import Base


class Account(Base):
    """Credentials known to the identity provider.

    Password accounts carry ``password_hash``; federated accounts carry the
    provider name and the subject the provider issued.
    """

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("provider", "provider_subject", name="uq_accounts_provider_subject"),)

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(Text, nullable=False, unique=True, index=True)
    email = Column(Text, nullable=False, index=True)
    provider = Column(Text, nullable=False, default="password")
    provider_subject = Column(Text, nullable=True)
    password_hash = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


class Profile(Base):
    """User profile document keyed by the account uid."""

    __tablename__ = "profiles"

    uid = Column(Text, ForeignKey("accounts.uid", ondelete="CASCADE"), primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
