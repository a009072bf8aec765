"""
Shared Pydantic models for the tracker service.

These models define the structure for API requests and responses. Request
bodies are validated here, before they reach the services.
"""

from datetime import date as date_type
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# bcrypt rejects passwords longer than 72 bytes
MAX_PASSWORD_BYTES = 72


def check_password_length(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# === Auth ===

class CredentialsRequest(BaseModel):
    """Request body for register and login."""

    username: str = Field(..., min_length=1, description="Unique account name")
    password: str = Field(..., min_length=1, description="Plaintext password (never stored)")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_length(v)


class TokenResponse(BaseModel):
    """Response carrying a freshly issued access token."""

    message: str
    token: str


class UserIdentity(BaseModel):
    """Identity carried inside an access token."""

    id: str
    username: str


class MeResponse(BaseModel):
    user: UserIdentity


class MessageResponse(BaseModel):
    message: str


# === Jobs ===

class JobCreateRequest(BaseModel):
    """Request body for adding a job."""

    company: str = Field(..., description="Company name")
    position: str = Field(..., description="Position title")
    date: date_type = Field(..., description="Application date (YYYY-MM-DD)")

    @field_validator("company", "position")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _strip_required(v)


class JobUpdateRequest(BaseModel):
    """
    Partial update for a job.

    Only fields present in the body are applied. An empty stage is a valid
    value, distinct from omitting the field.
    """

    company: Optional[str] = None
    position: Optional[str] = None
    date: Optional[date_type] = None
    stage: Optional[str] = None

    @field_validator("company", "position")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _strip_required(v)

    def supplied_fields(self) -> dict:
        """Fields explicitly set in the request, ignoring nulls."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class JobOut(BaseModel):
    """A job as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    company: str
    position: str
    date: datetime
    stage: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        """ObjectIds (and stand-in ids) are exposed as strings."""
        return str(v)


class JobCreatedResponse(BaseModel):
    message: str
    job: JobOut


class JobListResponse(BaseModel):
    """One page of jobs plus the total matching the filters."""

    jobs: List[JobOut]
    total: int


class JobUpdatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    modified_count: int = Field(..., alias="modifiedCount")


class JobsDeletedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    deleted_count: int = Field(..., alias="deletedCount")


# === Service ===

class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    storage: str
    version: str
    timestamp: datetime
