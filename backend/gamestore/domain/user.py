"""
User models for back-office authentication
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime


USER_ROLES = ["admin", "user"]

# Permission names granted per role ("*" grants everything)
ROLE_PERMISSIONS = {
    "admin": ["*"],
    "user": ["view_products", "add_to_cart", "view_profile"],
}


def _check_role(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in USER_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
    return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @property
    def permissions(self) -> List[str]:
        return ROLE_PERMISSIONS.get(self.role, [])


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = None
    role: str = "user"

    validate_role = field_validator("role")(_check_role)


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None

    validate_role = field_validator("role")(_check_role)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)
