from __future__ import annotations
from pydantic import BaseModel

class LoginRequest(BaseModel):
    password: str

class SessionTokens(BaseModel):
    authenticated: bool = True
    access: str
    refresh: str

class SessionStatus(BaseModel):
    authenticated: bool
