"""Request / response models for the HTTP API."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from otp_auth.utils.pagination import Pagination

PHONE_NUMBER_PATTERN = r"^09[0-9]{9}$"

T = TypeVar("T")


# ── Auth ─────────────────────────────────────────────────

class OTPRequest(BaseModel):
    phone_number: str = Field(..., pattern=PHONE_NUMBER_PATTERN)


class LoginRequest(BaseModel):
    phone_number: str = Field(..., pattern=PHONE_NUMBER_PATTERN)
    otp: str = Field(..., pattern=r"^[0-9]+$")


class BasicResponse(BaseModel):
    """Envelope shared by every JSON response."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode")
    status: str
    message: str | None = None


class ErrorResponse(BasicResponse):
    status: str = "error"


class TokenData(BaseModel):
    access_token: str


class TokenResponse(BasicResponse):
    data: TokenData


# ── Users ────────────────────────────────────────────────

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    phone_number: str


class PaginatedResponse(BaseModel, Generic[T]):
    data: list[T]
    pagination: Pagination
