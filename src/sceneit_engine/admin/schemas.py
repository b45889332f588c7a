"""Pydantic schemas for admin endpoints."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    password: str = ""


class LoginResponse(BaseModel):
    success: bool = True


class AuthStatus(BaseModel):
    authenticated: bool
