from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

import jwt
from passlib.context import CryptContext

from .config import Settings
from .errors import HashingError, InvalidTokenError, SigningError, VerificationError

logger = logging.getLogger(__name__)

SESSION_CLAIMS = ("name", "email", "role")


class PasswordHasher:
    """Salted one-way password hashing."""

    # Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
    def __init__(self, schemes=("pbkdf2_sha256",)):
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")
        self._dummy_digest = self.hash("acquisitions-timing-dummy")

    def hash(self, plaintext: str) -> str:
        try:
            return self._context.hash(plaintext)
        except (TypeError, ValueError) as e:
            logger.error("Error hashing password: %s", e)
            raise HashingError() from e

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Return True iff plaintext matches digest.

        A mismatch returns False. A digest passlib cannot identify raises
        VerificationError.
        """
        try:
            return self._context.verify(plaintext, digest)
        except (TypeError, ValueError) as e:
            logger.error("Error verifying password: %s", e)
            raise VerificationError() from e

    def dummy_verify(self, plaintext: str) -> None:
        """Spend one verification's worth of work when there is no user to check."""
        self._context.verify(plaintext, self._dummy_digest)


@dataclass(frozen=True)
class SessionClaims:
    name: str
    email: str
    role: str
    expires_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "email": self.email, "role": self.role}


class TokenIssuer:
    """Signs and verifies HS256 session tokens carrying {name, email, role}."""

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET
        self._algorithm = settings.JWT_ALGORITHM
        self.expires_in = settings.JWT_EXPIRES_IN

    def issue(self, claims: Dict[str, Any], expires_in: Optional[int] = None) -> str:
        if not self._secret:
            logger.error("Token signing failed: JWT secret is not configured")
            raise SigningError()

        now = datetime.now(timezone.utc)
        payload = {key: claims[key] for key in SESSION_CLAIMS if key in claims}
        payload["iat"] = now
        payload["exp"] = now + timedelta(seconds=expires_in or self.expires_in)
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.error("Token signing failed: %s", e)
            raise SigningError() from e

    def verify(self, token: str) -> SessionClaims:
        if not token:
            raise InvalidTokenError("Authentication required")
        try:
            data = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", *SESSION_CLAIMS]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Session expired") from e
        except jwt.PyJWTError as e:
            logger.warning("JWT verification failed: %s", e)
            raise InvalidTokenError() from e

        return SessionClaims(
            name=data["name"],
            email=data["email"],
            role=data["role"],
            expires_at=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
        )
