"""
Request validation.

Each validate_* function takes raw client input and returns either
Ok(value) with the normalized model, or Err(errors) with one FieldError per
problem. Nothing here touches the database or raises for bad input.
"""
from dataclasses import dataclass, field
from typing import Any, Generic, List, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import FieldError, ValidationError
from .schemas import CreateUserRequest, LoginRequest, RegisterRequest, UpdateUserRequest

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

# largest id a 32-bit INTEGER column can hold
MAX_USER_ID = 2**31 - 1


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok = True


@dataclass(frozen=True)
class Err:
    errors: List[FieldError] = field(default_factory=list)
    ok = False


Result = Union[Ok[T], Err]


def format_validation_errors(exc: PydanticValidationError) -> List[FieldError]:
    """Flatten pydantic errors into field/message pairs."""
    errors = []
    for issue in exc.errors():
        path = ", ".join(str(part) for part in issue.get("loc", ()))
        errors.append(FieldError(field=path or "body", message=issue.get("msg", "Invalid value")))
    return errors


def validate(schema: Type[M], raw: Any) -> Result[M]:
    if not isinstance(raw, dict):
        return Err([FieldError(field="body", message="Request body must be a JSON object")])
    try:
        return Ok(schema.model_validate(raw))
    except PydanticValidationError as exc:
        return Err(format_validation_errors(exc))


def validate_register(raw: Any) -> Result[RegisterRequest]:
    return validate(RegisterRequest, raw)


def validate_login(raw: Any) -> Result[LoginRequest]:
    return validate(LoginRequest, raw)


def validate_create_user(raw: Any) -> Result[CreateUserRequest]:
    return validate(CreateUserRequest, raw)


def validate_update_user(raw: Any) -> Result[UpdateUserRequest]:
    return validate(UpdateUserRequest, raw)


def validate_user_id(raw: Any) -> Result[int]:
    value = str(raw) if raw is not None else ""
    if value.isascii() and value.isdigit() and len(value) <= 10 and 0 < int(value) <= MAX_USER_ID:
        return Ok(int(value))
    return Err([FieldError(field="id", message="User ID must be a positive integer")])


def unwrap(result: Result[T], message: str = "Validation failed") -> T:
    """Return the Ok value, or raise ValidationError carrying the field errors."""
    if isinstance(result, Err):
        raise ValidationError(message, errors=result.errors)
    return result.value
