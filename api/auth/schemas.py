"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"


@dataclass(frozen=True)
class CurrentUser:
    """
    Identity resolved from a bearer token, re-read from the users table.
    """

    id: int
    username: str
    email: str
    role: Role

    def to_response(self) -> "UserResponse":
        return UserResponse(id=self.id, username=self.username, email=self.email, role=self.role)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.STUDENT


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: Role


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserResponse


class MeResponse(BaseModel):
    success: bool = True
    user: UserResponse
