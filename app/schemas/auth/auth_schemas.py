from typing import Literal

from pydantic import BaseModel, EmailStr

from app.models.enums.user_role import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthTokens(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class AuthUser(BaseModel):
    id: int
    username: str
    role: UserRole


class LoginData(BaseModel):
    auth: AuthTokens
    user: AuthUser


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    data: LoginData
