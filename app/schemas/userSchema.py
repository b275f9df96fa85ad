from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegisterRequest(BaseModel):
    """Request schema for registering a new account."""
    username: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=5, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=30)
    last_name: str = Field(..., min_length=1, max_length=30)
    birth_date: Optional[date] = None
    city: Optional[str] = None
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    phone_number: Optional[str] = None
    email: EmailStr


class UserLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class AuthUser(BaseModel):
    username: str
    is_admin: bool


class UserUpdateRequest(BaseModel):
    """Partial profile update; unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1, max_length=30)
    last_name: Optional[str] = Field(None, min_length=1, max_length=30)
    birth_date: Optional[date] = None
    city: Optional[str] = None
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    phone_number: Optional[str] = None
    profile_img: Optional[str] = None
    email: Optional[EmailStr] = None
    is_private: Optional[bool] = None


class PasswordUpdateRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=5, max_length=72)


class AdminUpdateRequest(BaseModel):
    key: str


class UserSummary(BaseModel):
    username: str
    first_name: str
    last_name: str
    city: Optional[str] = None
    state: Optional[str] = None
    profile_img: Optional[str] = None
    is_private: bool

    class Config:
        from_attributes = True


class UserDetail(BaseModel):
    username: str
    first_name: str
    last_name: str
    birth_date: Optional[date] = None
    city: Optional[str] = None
    state: Optional[str] = None
    profile_img: Optional[str] = None
    created_on: datetime
    is_private: bool
    email: str
    is_admin: bool
    phone_number: Optional[str] = None
    following: List[str] = []
    followed: List[str] = []


class FollowUser(BaseModel):
    username: str
    first_name: str
    last_name: str
    profile_img: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class FollowToggleResponse(BaseModel):
    action: str
    follower: str
    followed: str
