# stockpos/schemas/user.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

RoleName = Literal["admin", "stock_manager", "cashier"]
UserStatusName = Literal["active", "disabled"]


# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr


# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str


# Schema for account creation by an administrator
class UserCreate(UserBase):
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    role: RoleName


# Partial update of role, status or names (Admin only)
class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[RoleName] = None
    status: Optional[UserStatusName] = None


# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: str
    status: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Login response: the session token plus the profile the dashboard needs
class LoginResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


class PaginatedUsersResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
