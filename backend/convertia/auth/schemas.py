"""
Authentication Pydantic schemas
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

ConsoleRole = Literal["admin", "recruiter", "manager", "rrhh"]


class Token(BaseModel):
    """Access/refresh pair issued at login"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class UserCreate(BaseModel):
    """Console account created by an administrator"""
    email: EmailStr
    full_name: Optional[str] = None
    password: str = Field(..., min_length=8)
    role_names: List[ConsoleRole] = Field(default_factory=lambda: ["recruiter"], min_length=1)


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    is_active: bool
    is_verified: bool
    roles: List[str]
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str
