"""
Session cookie handling.

The signed session token travels in an http-only, same-site strict cookie.
It is secure-only when ENVIRONMENT=production.
"""
from typing import Optional

from fastapi import Request, Response

from ..config import Settings


class SessionCarrier:
    def __init__(self, settings: Settings):
        self.name = settings.COOKIE_NAME
        self.max_age = settings.COOKIE_MAX_AGE
        self.secure = settings.is_production

    def options(self) -> dict:
        return {
            "httponly": True,
            "secure": self.secure,
            "samesite": "strict",
            "path": "/",
        }

    def set(self, response: Response, token: str) -> None:
        response.set_cookie(self.name, token, max_age=self.max_age, **self.options())

    def clear(self, response: Response) -> None:
        # Clearing a cookie the client never had is fine.
        response.delete_cookie(self.name, **self.options())

    def read(self, request: Request) -> Optional[str]:
        """Token from the session cookie, falling back to an Authorization: Bearer header."""
        token = request.cookies.get(self.name)
        if token:
            return token
        authorization = request.headers.get("authorization", "")
        if authorization.lower().startswith("bearer "):
            return authorization.split(" ", 1)[1].strip() or None
        return None
