"""Pydantic schemas for login and user data."""

from typing import Optional
from pydantic import BaseModel, field_validator


class LoginRequest(BaseModel):
    """Credentials posted to /login. Both fields are required."""
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None


class User(BaseModel):
    """Public projection of a user. Never carries the password hash."""
    id: int
    username: str
    full_name: str
    phone_number: Optional[str] = None
    email: str
    available_balance: int
    program: Optional[str] = None
    student_id: Optional[str] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    success: bool
    message: str
    user: Optional[User] = None
    token: Optional[str] = None
