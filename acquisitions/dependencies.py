"""
FastAPI Depends() helpers.

Components live on app.state (built once in create_app); these helpers hand
them to route handlers and resolve the caller's session.
"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .auth import SessionClaims
from .auth_flow import AuthFlow
from .config import Settings
from .db import get_db
from .errors import ForbiddenError, InvalidTokenError
from .schemas import UserOut
from .store import UserStore


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_user_store(request: Request, db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db, request.app.state.hasher)


def get_auth_flow(request: Request, store: UserStore = Depends(get_user_store)) -> AuthFlow:
    return AuthFlow(store, request.app.state.hasher, request.app.state.issuer)


def get_optional_session(request: Request) -> Optional[SessionClaims]:
    """The caller's session claims, or None when there is no valid token."""
    token = request.app.state.carrier.read(request)
    if not token:
        return None
    try:
        return request.app.state.issuer.verify(token)
    except InvalidTokenError:
        return None


def get_current_session(request: Request) -> SessionClaims:
    """Require a valid session token (cookie or Bearer). Raises InvalidTokenError -> 401."""
    token = request.app.state.carrier.read(request)
    if not token:
        raise InvalidTokenError("Authentication required")
    return request.app.state.issuer.verify(token)


def users_access(request: Request) -> Optional[SessionClaims]:
    if request.app.state.settings.USERS_REQUIRE_AUTH:
        return get_current_session(request)
    return get_optional_session(request)


def ensure_role_allowed(role: Optional[str], session: Optional[SessionClaims], settings: Settings) -> None:
    """Only an admin session may hand out the admin role, unless the policy is switched off."""
    if role != "admin" or not settings.ADMIN_ROLE_REQUIRES_ADMIN:
        return
    if session is None or session.role != "admin":
        raise ForbiddenError("Only an admin can assign the admin role")


def ensure_can_modify(target: UserOut, session: Optional[SessionClaims], settings: Settings) -> None:
    """An admin may change any record; anyone else only their own."""
    if session is None or not settings.USERS_OWNER_OR_ADMIN:
        return
    if session.role != "admin" and session.email != target.email:
        raise ForbiddenError("You can only modify your own account")
