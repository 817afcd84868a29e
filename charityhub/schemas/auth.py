from datetime import datetime

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class WhoAmIResponse(BaseModel):
    id: int
    user: EmailStr
    role: str
    status: str
    full_name: str | None = None
    suspended_until: datetime | None = None
