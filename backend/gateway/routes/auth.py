from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
import structlog
from gateway.auth_deps import bearer_claims, require_admin, security
from gateway.schemas.auth import LoginRequest, SessionStatus, SessionTokens
from gateway.security import check_admin_password, make_access_token, make_refresh_token

router = APIRouter(prefix="/auth", tags=["auth"])
log = structlog.get_logger()

@router.post("/login", response_model=SessionTokens)
async def login(payload: LoginRequest):
    if not check_admin_password(payload.password):
        log.warning("admin_login_failed")
        raise HTTPException(status_code=401, detail="Invalid credentials")
    log.info("admin_login")
    return SessionTokens(access=make_access_token(), refresh=make_refresh_token())

@router.post("/refresh", response_model=SessionTokens)
async def refresh(credentials: HTTPAuthorizationCredentials | None = Depends(security)):
    data = bearer_claims(credentials, "refresh")
    sub = data["sub"]
    return SessionTokens(access=make_access_token(sub), refresh=make_refresh_token(sub))

@router.get("/session", response_model=SessionStatus)
async def session(_: dict = Depends(require_admin)):
    return SessionStatus(authenticated=True)
