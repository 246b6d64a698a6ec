"""Coarse role capabilities, mirroring which actions the dashboard offers."""

from __future__ import annotations

from ..schemas.lab import UserRole

INSTRUMENT_MANAGERS = frozenset({UserRole.ADMIN})
SERVICE_LOGGERS = frozenset({UserRole.ADMIN, UserRole.TECHNICIAN})
ADMIN_PAGE_VIEWERS = frozenset({UserRole.ADMIN, UserRole.TECHNICIAN})
# Technicians service instruments; they do not book them.
BOOKERS = frozenset(role for role in UserRole if role is not UserRole.TECHNICIAN)


def can_manage_instruments(role: UserRole) -> bool:
    return role in INSTRUMENT_MANAGERS


def can_log_service(role: UserRole) -> bool:
    return role in SERVICE_LOGGERS


def can_book(role: UserRole) -> bool:
    return role in BOOKERS


def can_view_admin_pages(role: UserRole) -> bool:
    return role in ADMIN_PAGE_VIEWERS
