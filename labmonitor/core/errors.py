from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Failure reported by the identity provider, identified by a provider code."""

    def __init__(self, code: str, detail: str | None = None) -> None:
        super().__init__(detail or code)
        self.code = code
        self.detail = detail


# Provider codes map onto fixed user-facing text; raw provider messages are
# only ever logged.
AUTH_ERROR_MESSAGES: dict[str, str] = {
    "auth/user-not-found": "Invalid email or password.",
    "auth/wrong-password": "Invalid email or password.",
    "auth/invalid-credential": "Invalid email or password.",
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/weak-password": "Password should be at least 6 characters.",
    "auth/popup-closed-by-user": "Sign-in cancelled. Please try again.",
    "auth/unauthorized-domain": "This sign-in provider is not authorized for this application.",
    "auth/account-exists-with-different-credential": (
        "An account already exists with the same email but different sign-in method."
    ),
    "auth/missing-profile": "No user profile was found for this account.",
}
DEFAULT_AUTH_MESSAGE = "An unexpected error occurred. Please try again."

AUTH_ERROR_STATUS: dict[str, int] = {
    "auth/email-already-in-use": status.HTTP_409_CONFLICT,
    "auth/account-exists-with-different-credential": status.HTTP_409_CONFLICT,
    "auth/weak-password": status.HTTP_400_BAD_REQUEST,
    "auth/popup-closed-by-user": status.HTTP_400_BAD_REQUEST,
    "auth/unauthorized-domain": status.HTTP_403_FORBIDDEN,
}


def auth_error_message(code: str) -> str:
    return AUTH_ERROR_MESSAGES.get(code, DEFAULT_AUTH_MESSAGE)


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str):
        message = detail
    else:
        message = "Unauthorized" if exc.status_code == status.HTTP_401_UNAUTHORIZED else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def auth_exception_handler(request: Request, exc: AuthError):
    logger.info(
        "auth.rejected",
        extra={"extra_data": {"code": exc.code, "path": request.url.path}},
    )
    return ErrorEnvelope(
        status_code=AUTH_ERROR_STATUS.get(exc.code, status.HTTP_401_UNAUTHORIZED),
        code=exc.code,
        message=auth_error_message(exc.code),
    )
