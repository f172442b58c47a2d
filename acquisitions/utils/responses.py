"""
Response envelope shared by every endpoint: {success, message, data, errors?}.
"""
from typing import Any, Iterable, Optional

from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from ..errors import FieldError


def envelope(success: bool, message: str, data: Any = None, errors: Optional[Iterable[FieldError]] = None) -> dict:
    body = {"success": success, "message": message, "data": data}
    if errors:
        body["errors"] = [e.to_dict() for e in errors]
    return body


def error_response(status_code: int, message: str, errors: Optional[Iterable[FieldError]] = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope(False, message, errors=errors)),
        headers=headers,
    )
