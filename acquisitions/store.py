"""
Credential store: persistence for user records.

Reads return the public UserOut projection. The password hash leaves this
module only through find_credentials(), which the login path uses.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import PasswordHasher
from .errors import DuplicateEmailError, InternalError, NotFoundError, ValidationError
from .models import User, utcnow
from .schemas import UserOut

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "email", "role", "password")


@dataclass(frozen=True)
class UserCredentials:
    id: int
    name: str
    email: str
    role: str
    password_hash: str


class UserStore:
    def __init__(self, db: Session, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    def _get(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def _commit(self, action: str, duplicate_message: Optional[str] = None, **context) -> None:
        """Commit the pending change; a unique violation on email becomes DuplicateEmailError."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Integrity error while %s: %s %s", action, context, e.orig)
            raise DuplicateEmailError(duplicate_message) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error while %s: %s", action, context, exc_info=True)
            raise InternalError(f"Failed {action}") from e

    def find_by_email(self, email: str) -> Optional[UserOut]:
        user = self._get_by_email(email)
        return UserOut.model_validate(user) if user else None

    def find_by_id(self, user_id: int) -> Optional[UserOut]:
        user = self._get(user_id)
        if not user:
            logger.warning("User not found: id=%s", user_id)
            return None
        return UserOut.model_validate(user)

    def find_credentials(self, email: str) -> Optional[UserCredentials]:
        user = self._get_by_email(email)
        if not user:
            return None
        return UserCredentials(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            password_hash=user.password,
        )

    def list_all(self) -> List[UserOut]:
        users = self.db.query(User).order_by(User.id.asc()).all()
        logger.info("Fetched %s users", len(users))
        return [UserOut.model_validate(u) for u in users]

    def insert(self, name: str, email: str, password: str, role: str = "user") -> UserOut:
        email = email.strip().lower()
        if self._get_by_email(email):
            raise DuplicateEmailError()

        now = utcnow()
        user = User(
            name=name,
            email=email,
            password=self.hasher.hash(password),
            role=role,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        self._commit("creating user", email=email)
        self.db.refresh(user)

        logger.info("User created: id=%s email=%s", user.id, user.email)
        return UserOut.model_validate(user)

    def update(self, user_id: int, fields: Dict[str, Any]) -> UserOut:
        user = self._get(user_id)
        if not user:
            raise NotFoundError()

        updates = {}
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                logger.warning("Ignoring unknown field in update: %s", key)
                continue
            if value is None or value == "":
                continue
            if key == "password":
                updates["password"] = self.hasher.hash(value)
            elif key == "email":
                value = value.strip().lower()
                other = self._get_by_email(value)
                if other and other.id != user.id:
                    raise DuplicateEmailError("Email is already taken by another user")
                updates["email"] = value
            else:
                updates[key] = value

        if not updates:
            raise ValidationError("No valid fields provided for update")

        for key, value in updates.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        self._commit("updating user", "Email is already taken by another user", id=user_id)
        self.db.refresh(user)

        logger.info("User updated: id=%s fields=%s", user.id, sorted(updates))
        return UserOut.model_validate(user)

    def delete(self, user_id: int) -> bool:
        user = self._get(user_id)
        if not user:
            raise NotFoundError()

        email = user.email
        self.db.delete(user)
        self._commit("deleting user", id=user_id)

        logger.info("User deleted: id=%s email=%s", user_id, email)
        return True
