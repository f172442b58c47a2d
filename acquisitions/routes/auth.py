"""
Auth routes: register, login, logout, me.

Route prefix: /api/auth
"""
from typing import Any, Optional
import logging

from fastapi import APIRouter, Body, Depends, Request, Response, status

from ..auth import SessionClaims
from ..auth_flow import AuthFlow
from ..config import Settings
from ..dependencies import (
    ensure_role_allowed,
    get_auth_flow,
    get_current_session,
    get_optional_session,
    get_settings_dep,
)
from ..limiter import limiter, rate_limit
from ..schemas import AuthResponse, Envelope
from ..utils.responses import envelope
from ..validation import unwrap, validate_login, validate_register

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(rate_limit)
def register(
    request: Request,
    response: Response,
    payload: Any = Body(None),
    flow: AuthFlow = Depends(get_auth_flow),
    session: Optional[SessionClaims] = Depends(get_optional_session),
    settings: Settings = Depends(get_settings_dep),
):
    data = unwrap(validate_register(payload))
    ensure_role_allowed(data.role, session, settings)

    result = flow.register(name=data.name, email=data.email, password=data.password, role=data.role)
    request.app.state.carrier.set(response, result.token)

    return {"success": True, "message": "User registered successfully", "user": result.user}


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
@limiter.limit(rate_limit)
def login(
    request: Request,
    response: Response,
    payload: Any = Body(None),
    flow: AuthFlow = Depends(get_auth_flow),
):
    data = unwrap(validate_login(payload))

    result = flow.login(email=data.email, password=data.password)
    request.app.state.carrier.set(response, result.token)

    return {"success": True, "message": "Login successful", "user": result.user}


@router.post("/logout")
@limiter.limit(rate_limit)
def logout(request: Request, response: Response, flow: AuthFlow = Depends(get_auth_flow)):
    flow.logout()
    request.app.state.carrier.clear(response)
    return {"success": True, "message": "Logout successful"}


@router.get("/me", response_model=Envelope)
@limiter.limit(rate_limit)
def me(request: Request, session: SessionClaims = Depends(get_current_session)):
    """Identity carried by the caller's session token."""
    return envelope(True, "Session is valid", data={"user": session.to_dict()})
