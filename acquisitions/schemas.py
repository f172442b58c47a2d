from datetime import datetime
from typing import Any, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

Role = Literal["user", "admin"]

NAME_FIELD = dict(min_length=2, max_length=255)
EMAIL_FIELD = dict(max_length=255)
PASSWORD_FIELD = dict(min_length=6, max_length=125)


class _Request(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @field_validator("email", mode="after", check_fields=False)
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        """Check the address and lowercase it; emails compare case-insensitively."""
        if v is None:
            return v
        try:
            email = validate_email(v, check_deliverability=False).normalized
        except EmailNotValidError as exc:
            raise PydanticCustomError("value_error", "Invalid email format") from exc
        return email.lower()


class RegisterRequest(_Request):
    name: str = Field(..., **NAME_FIELD)
    email: str = Field(..., **EMAIL_FIELD)
    password: str = Field(..., **PASSWORD_FIELD)
    role: Role = "user"


class LoginRequest(_Request):
    email: str = Field(..., **EMAIL_FIELD)
    password: str = Field(..., **PASSWORD_FIELD)


class CreateUserRequest(RegisterRequest):
    pass


class UpdateUserRequest(_Request):
    name: Optional[str] = Field(None, **NAME_FIELD)
    email: Optional[str] = Field(None, **EMAIL_FIELD)
    password: Optional[str] = Field(None, **PASSWORD_FIELD)
    role: Optional[Role] = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "UpdateUserRequest":
        if not self.model_fields_set:
            raise PydanticCustomError("value_error", "At least one field must be provided for update")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent with a value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# Responses

class UserOut(BaseModel):
    """Public projection of a user record. Has no password field."""
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SessionUser(BaseModel):
    id: Optional[int] = None
    name: str
    email: str
    role: str


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: SessionUser


class Envelope(BaseModel):
    """Success body. Error bodies are built by utils.responses.error_response."""
    success: bool
    message: str
    data: Optional[Any] = None
