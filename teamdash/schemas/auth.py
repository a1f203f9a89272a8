from enum import Enum
from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"
    ADMIN = "admin"


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(max_length=255)
    role: UserRole = UserRole.EMPLOYEE


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
