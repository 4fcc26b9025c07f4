from pydantic import BaseModel, EmailStr
from typing import Optional, Literal


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthTokens(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class AuthUser(BaseModel):
    id: int
    username: str
    role: str
    tenancy_id: Optional[int]


class LoginData(BaseModel):
    auth: AuthTokens
    user: AuthUser
