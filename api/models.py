"""
API request and response models for the account service REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

UserBrief is the only shape a User ever leaves the server in: password_hash
and salt have no field here, so they cannot be serialized by accident.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from auth.models import User

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /signup.

    username and email are stripped; password is hashed exactly as sent,
    since login compares it byte for byte.
    """

    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    email: Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)]
    password: str = Field(min_length=1, max_length=1024)

    @field_validator("username")
    @classmethod
    def reject_separator(cls, value: str) -> str:
        """Usernames cannot contain ':' -- the login header splits on it."""
        if ":" in value:
            raise ValueError("username must not contain ':'")
        return value


class ProfileUpdate(BaseModel):
    """Request body for PATCH /self. Username is immutable."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = Field(default=None, max_length=255)


class PasswordChange(BaseModel):
    """Request body for PATCH /self/password."""

    password: str = Field(min_length=1, max_length=1024)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserBrief(BaseModel):
    """Public view of a user: every field except password_hash and salt."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str]
    username: str
    email: str
    auth_token: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    last_login: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserBrief":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            auth_token=user.auth_token,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login=user.last_login,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
