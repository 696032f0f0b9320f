from pydantic import BaseModel, Field

from datetime import datetime
from typing import Optional


class RegisterRequest(BaseModel):
    # Presence is checked by the service so that a missing field gets the
    # uniform success/message body instead of a 422
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    message: str


class ReadinessResponse(BaseModel):
    status: str
    database: str


# Canonical inputs produced by normalization
class RegisterInput(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class LoginInput(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


# Store rows
class AccountRecord(BaseModel):
    id: int
    username: str
    password_hash: Optional[str] = Field(default=None, repr=False)
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
