from __future__ import annotations
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from gateway.security import ADMIN_SUBJECT, decode_token

security = HTTPBearer(auto_error=False)

def bearer_claims(credentials: HTTPAuthorizationCredentials | None, token_type: str) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing token")
    try:
        data = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != token_type:
        raise HTTPException(status_code=401, detail="Wrong token type")
    if data.get("sub") != ADMIN_SUBJECT:
        raise HTTPException(status_code=401, detail="Not an admin token")
    return data

async def require_admin(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> dict:
    return bearer_claims(credentials, "access")
