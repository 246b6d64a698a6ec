from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .lab import UserRole


class User(BaseModel):
    uid: str
    name: str
    email: str
    role: UserRole


class SignUpRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str
    role: UserRole = UserRole.RESEARCHER

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Ada Researcher",
                "email": "ada@example.com",
                "password": "s3cret-pass",
                "role": "Researcher",
            }
        },
    }


class LoginRequest(BaseModel):
    email: str
    password: str


class FederatedIdentity(BaseModel):
    """Claims handed over by an external identity provider after its popup flow."""

    subject: str = Field(..., min_length=1)
    email: str
    display_name: Optional[str] = Field(default=None, alias="displayName")

    model_config = {"populate_by_name": True}


class FederatedLoginRequest(BaseModel):
    # ``None`` means the user closed the provider popup before finishing.
    identity: Optional[FederatedIdentity] = None


class SessionOut(BaseModel):
    uid: str
    email: str
    provider: str


class TokenRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "<jwt>",
                "refresh_token": "<jwt>",
                "token_type": "bearer",
                "expires_in": 900,
            }
        }
    }


class RefreshRequest(BaseModel):
    refresh_token: str

    model_config = {
        "json_schema_extra": {
            "example": {"refresh_token": "<jwt>"}
        }
    }
