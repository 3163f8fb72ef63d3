"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)
    phone_number: str = Field(..., min_length=3, max_length=32)
    age: int | None = Field(default=None, ge=1)
    mac: str | None = Field(default=None, max_length=64)
    image: str | None = Field(default=None, max_length=2048)


class LoginRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class SendResetCodeRequest(BaseModel):
    phone_number: str = Field(..., min_length=3, max_length=32)


class VerifyResetCodeRequest(BaseModel):
    phone_number: str = Field(..., min_length=3, max_length=32)
    code: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class ResetPasswordRequest(BaseModel):
    reset_token: str = Field(..., min_length=20)
    new_password: str = Field(..., min_length=8, max_length=128)


class UserResponse(BaseModel):
    id: int
    name: str
    age: int | None = None
    mac: str | None = None
    phone_number: str
    image: str | None = None
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class VerifyResetCodeResponse(BaseModel):
    verified: bool = True
    reset_token: str
