from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from sermon_buddy.modules.churches.schemas import ChurchCreate


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    username: str = Field(min_length=1)
    full_name: Optional[str] = None
    church: Optional[ChurchCreate] = None  # Register as the admin of a new church


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    church_id: Optional[str] = None
    message: str
