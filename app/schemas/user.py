# ============================================================================
# FILE: app/schemas/user.py
# ============================================================================
from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
from app.db.models.user import UserRole
from app.schemas.common import CamelModel

class UserCreate(CamelModel):
    """Schema for user registration"""
    email: EmailStr
    username: str = Field(min_length=3, max_length=32)
    password: str = Field(min_length=6, max_length=128)
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    avatar: Optional[str] = None

class UserLogin(CamelModel):
    """Schema for user login (identifier is an email or a username)"""
    identifier: str = Field(min_length=1)
    password: str = Field(min_length=6, max_length=128)

class UserProfileUpdate(CamelModel):
    """Schema for updating the current user's profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    avatar: Optional[str] = None

class UserRoleUpdate(CamelModel):
    role: UserRole

class AdminUserCreate(UserCreate):
    """Schema for an admin creating an account with any role"""
    role: UserRole = UserRole.USER

class AdminUserUpdate(CamelModel):
    """Schema for an admin editing an account; a password resets it"""
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=32)
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    avatar: Optional[str] = None
    role: Optional[UserRole] = None

class UserSummary(CamelModel):
    """Public view of a user, embedded in playlists"""
    id: int
    username: str
    name: Optional[str] = None
    avatar: Optional[str] = None

class UserResponse(CamelModel):
    """Schema for user response"""
    id: int
    email: str
    username: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole
    created_at: datetime
