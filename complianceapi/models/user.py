from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Role = Literal["admin", "standard_user"]


class User(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: Role
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class UserIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: Role


class UserUpdateIn(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class LoginIn(BaseModel):
    email: str
    password: str


class UserSummary(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: Role


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary
