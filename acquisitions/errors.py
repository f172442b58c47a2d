"""
Error taxonomy for the service.

Every error the service raises on purpose derives from ServiceError and
carries the HTTP status it maps to. main.py renders them as the standard
response envelope.
"""
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[FieldError]] = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Validation failed"


class InvalidCredentialsError(ServiceError):
    status_code = 401
    default_message = "Invalid email or password"


class InvalidTokenError(ServiceError):
    status_code = 401
    default_message = "Invalid or expired session"


class ForbiddenError(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "User not found"


class DuplicateEmailError(ServiceError):
    status_code = 409
    default_message = "User with this email already exists"


class InternalError(ServiceError):
    status_code = 500


class HashingError(InternalError):
    default_message = "Error hashing password"


class VerificationError(InternalError):
    default_message = "Error verifying password"


class SigningError(InternalError):
    default_message = "Failed to sign session token"
