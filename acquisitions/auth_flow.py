"""
Register / login / logout orchestration.

AuthFlow only talks to the store, hasher and issuer through the protocols
below, and returns plain data. Attaching the token to a response is the
route's job (see utils/cookie.py).
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol
import logging

from .auth import SessionClaims
from .errors import DuplicateEmailError, InvalidCredentialsError, VerificationError
from .schemas import UserOut

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def find_by_email(self, email: str) -> Optional[UserOut]: ...

    def find_credentials(self, email: str) -> Optional[Any]: ...

    def insert(self, name: str, email: str, password: str, role: str = "user") -> UserOut: ...


class Hasher(Protocol):
    def verify(self, plaintext: str, digest: str) -> bool: ...

    def dummy_verify(self, plaintext: str) -> None: ...


class Issuer(Protocol):
    def issue(self, claims: Dict[str, Any]) -> str: ...

    def verify(self, token: str) -> SessionClaims: ...


@dataclass(frozen=True)
class AuthResult:
    user: Dict[str, Any]
    token: str


class AuthFlow:
    def __init__(self, store: CredentialStore, hasher: Hasher, issuer: Issuer):
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    def register(self, name: str, email: str, password: str, role: str = "user") -> AuthResult:
        email = email.lower()
        logger.info("Registering user: email=%s", email)

        # The unique constraint is the real guard; this only avoids hashing for a known duplicate.
        if self.store.find_by_email(email):
            logger.warning("Registration rejected, email already exists: %s", email)
            raise DuplicateEmailError()

        user = self.store.insert(name=name, email=email, password=password, role=role)
        token = self.issuer.issue({"name": user.name, "email": user.email, "role": user.role})

        logger.info("User registered: id=%s email=%s", user.id, user.email)
        return AuthResult(
            user={"id": user.id, "name": user.name, "email": user.email, "role": user.role},
            token=token,
        )

    def login(self, email: str, password: str) -> AuthResult:
        email = email.lower()
        logger.info("Login attempt: email=%s", email)

        creds = self.store.find_credentials(email)
        if creds is None:
            self.hasher.dummy_verify(password)
            logger.warning("Login failed, unknown email: %s", email)
            raise InvalidCredentialsError()

        try:
            matched = self.hasher.verify(password, creds.password_hash)
        except VerificationError:
            logger.error("Stored password hash is unreadable: user_id=%s", creds.id)
            matched = False

        if not matched:
            logger.warning("Login failed, incorrect password: %s", email)
            raise InvalidCredentialsError()

        token = self.issuer.issue({"name": creds.name, "email": creds.email, "role": creds.role})
        logger.info("User logged in: id=%s email=%s", creds.id, creds.email)
        return AuthResult(
            user={"name": creds.name, "email": creds.email, "role": creds.role},
            token=token,
        )

    def logout(self) -> None:
        # Stateless: nothing to revoke, the token stays valid until it expires.
        logger.info("User logged out")

    def authorize(self, token: Optional[str]) -> SessionClaims:
        return self.issuer.verify(token or "")
