"""Auth request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    # Email format and password strength are checked by AuthService.register
    # so that every failing rule is reported together.
    model_config = ConfigDict(extra="forbid")
    email: str
    password: str


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return v.strip().lower()


class AccessTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    access_token: str = Field(alias="accessToken")


class MessageResponse(BaseModel):
    message: str


class ValidationErrorResponse(BaseModel):
    errors: list[str]


class MeResponse(BaseModel):
    id: str
    email: str
