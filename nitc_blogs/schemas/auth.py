"""
NITC Blogs — Pydantic schemas (users and auth flows)
"""
from datetime import datetime

from pydantic import EmailStr, Field

from nitc_blogs.schemas.common import CamelModel


class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., max_length=128)
    password_confirm: str = Field(..., max_length=128)


class EmailRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class ResetPasswordRequest(CamelModel):
    password: str = Field(..., max_length=128)
    password_confirm: str = Field(..., max_length=128)


class UpdatePasswordRequest(CamelModel):
    password_current: str = Field(..., max_length=128)
    password: str = Field(..., max_length=128)
    password_confirm: str = Field(..., max_length=128)


class UserPublic(CamelModel):
    """Login projection: password, role and verification flag are stripped."""

    id: str
    name: str
    email: str
    photo: str | None = None
    bio: str = ""
    created_at: datetime
    updated_at: datetime


class UserData(CamelModel):
    user: UserPublic


class LoginResponse(CamelModel):
    status: str = "success"
    token: str
    data: UserData


class ProfileUser(CamelModel):
    name: str
    photo: str | None = None
    email: str
    bio: str = ""


class ProfileUpdateRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    photo: str | None = Field(None, max_length=512)
    bio: str | None = Field(None, max_length=2000)


class ProfileUserData(CamelModel):
    user: ProfileUser


class ProfileUserResponse(CamelModel):
    status: str = "success"
    data: ProfileUserData
