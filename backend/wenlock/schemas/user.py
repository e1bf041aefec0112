from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional
from wenlock.enums import Role
from wenlock.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role = Role.GENERAL_STAFF


class UserUpdate(CamelModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
