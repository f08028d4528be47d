from datetime import datetime

from pydantic import EmailStr, Field

from study_planner.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserPublic(CamelModel):
    id: int
    email: str
    display_name: str
    created_at: datetime | None = None


class AuthResponse(CamelModel):
    token: str
    user: UserPublic
