"""
User record management.

Route prefix: /api/users
"""
from typing import Any, Optional
import logging

from fastapi import APIRouter, Body, Depends, Request, status

from ..auth import SessionClaims
from ..config import Settings
from ..dependencies import ensure_can_modify, ensure_role_allowed, get_settings_dep, get_user_store, users_access
from ..errors import NotFoundError
from ..limiter import limiter, rate_limit
from ..schemas import Envelope, UserOut
from ..store import UserStore
from ..utils.responses import envelope
from ..validation import unwrap, validate_create_user, validate_update_user, validate_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

INVALID_ID = "Invalid user ID provided"


def _existing(store: UserStore, uid: int) -> UserOut:
    user = store.find_by_id(uid)
    if user is None:
        raise NotFoundError()
    return user


@router.get("", response_model=Envelope)
@limiter.limit(rate_limit)
def get_all_users(
    request: Request,
    store: UserStore = Depends(get_user_store),
    session: Optional[SessionClaims] = Depends(users_access),
):
    logger.info("Getting all users request")
    users = store.list_all()
    return envelope(True, "Users retrieved successfully", data={"users": users, "count": len(users)})


@router.get("/{user_id}", response_model=Envelope)
@limiter.limit(rate_limit)
def get_user_by_id(
    request: Request,
    user_id: str,
    store: UserStore = Depends(get_user_store),
    session: Optional[SessionClaims] = Depends(users_access),
):
    uid = unwrap(validate_user_id(user_id), INVALID_ID)
    logger.info("Getting user by ID request: id=%s", uid)

    user = _existing(store, uid)
    return envelope(True, "User retrieved successfully", data={"user": user})


@router.post("", response_model=Envelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(rate_limit)
def create_user(
    request: Request,
    payload: Any = Body(None),
    store: UserStore = Depends(get_user_store),
    session: Optional[SessionClaims] = Depends(users_access),
    settings: Settings = Depends(get_settings_dep),
):
    data = unwrap(validate_create_user(payload))
    ensure_role_allowed(data.role, session, settings)
    logger.info("Creating user request: email=%s", data.email)

    user = store.insert(name=data.name, email=data.email, password=data.password, role=data.role)
    return envelope(True, "User created successfully", data={"user": user})


@router.put("/{user_id}", response_model=Envelope)
@limiter.limit(rate_limit)
def update_user(
    request: Request,
    user_id: str,
    payload: Any = Body(None),
    store: UserStore = Depends(get_user_store),
    session: Optional[SessionClaims] = Depends(users_access),
    settings: Settings = Depends(get_settings_dep),
):
    uid = unwrap(validate_user_id(user_id), INVALID_ID)
    data = unwrap(validate_update_user(payload))
    changes = data.changes()
    ensure_role_allowed(changes.get("role"), session, settings)
    ensure_can_modify(_existing(store, uid), session, settings)
    logger.info("Updating user request: id=%s fields=%s", uid, sorted(changes))

    user = store.update(uid, changes)
    return envelope(True, "User updated successfully", data={"user": user})


@router.delete("/{user_id}", response_model=Envelope)
@limiter.limit(rate_limit)
def delete_user(
    request: Request,
    user_id: str,
    store: UserStore = Depends(get_user_store),
    session: Optional[SessionClaims] = Depends(users_access),
    settings: Settings = Depends(get_settings_dep),
):
    uid = unwrap(validate_user_id(user_id), INVALID_ID)
    ensure_can_modify(_existing(store, uid), session, settings)
    logger.info("Deleting user request: id=%s", uid)

    store.delete(uid)
    return envelope(True, "User deleted successfully")
