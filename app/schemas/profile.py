# app/schemas/profile.py
from datetime import date, datetime
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, EmailStr, ConfigDict, Field

Role = Literal["admin", "applicant", "reviewer"]


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str


class ProfileResponse(BaseModel):
    id: str
    email: EmailStr
    full_name: Optional[str] = None
    preferred_name: Optional[str] = None
    role: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    notification_preferences: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, title="ProfileResponse")


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    preferred_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    website_url: Optional[str] = None
    notification_preferences: Optional[Dict[str, Any]] = None


class RoleUpdate(BaseModel):
    role: Role


class DeleteUsersRequest(BaseModel):
    user_ids: List[str] = Field(min_length=1)


class DeleteUsersResult(BaseModel):
    deleted_count: int
    failed_count: int
    errors: List[str] = []
