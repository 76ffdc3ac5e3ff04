"""Auth stub schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PlanId = Literal["free", "pro", "team"]


class User(BaseModel):
    id: str
    email: str
    name: str
    plan: PlanId = "free"
    token_limit: int = 1000
    tokens_used: int = 0
    created_at: datetime
    last_login_at: datetime
    password_hash: str = Field("", exclude=True)  # never serialized


class RegisterRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$", max_length=256)
    password: str = Field(..., min_length=8)
    name: str = Field(..., max_length=128)


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    user: User
    token: str
