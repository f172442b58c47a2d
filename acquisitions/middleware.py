"""
HTTP middleware: request logging, security headers and the security gate.

The gate is an opaque allow/deny decision made before routing. Any callable
taking the request and returning a GateDecision can stand in for ShieldGate.
"""
from dataclasses import dataclass
from typing import Callable, Iterable
import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from .utils.responses import error_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    status_code: int = 403
    reason: str = "Forbidden"


ALLOW = GateDecision(allowed=True, status_code=200, reason="")

Gate = Callable[[Request], GateDecision]


class ShieldGate:
    """Denies requests from known attack tooling, matched on User-Agent."""

    def __init__(self, blocked_user_agents: Iterable[str]):
        self.blocked = tuple(ua.lower() for ua in blocked_user_agents if ua)

    def __call__(self, request: Request) -> GateDecision:
        user_agent = request.headers.get("user-agent", "").lower()
        for marker in self.blocked:
            if marker in user_agent:
                return GateDecision(allowed=False, status_code=403, reason="Forbidden")
        return ALLOW


class SecurityGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, gate: Gate):
        super().__init__(app)
        self.gate = gate

    async def dispatch(self, request: Request, call_next):
        decision = self.gate(request)
        if not decision.allowed:
            logger.warning(
                "Request denied by security gate: %s %s ip=%s ua=%s reason=%s",
                request.method, request.url.path,
                request.client.host if request.client else "unknown",
                request.headers.get("user-agent"), decision.reason,
            )
            return error_response(decision.status_code, decision.reason)
        return await call_next(request)


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Origin-Agent-Cluster": "?1",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if self.hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
        return response


def register_request_logging(app: FastAPI) -> None:
    """Access log line per request: method, path, status, duration."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %s %.1fms ip=%s",
            request.method, request.url.path, response.status_code, elapsed_ms,
            request.client.host if request.client else "unknown",
        )
        return response
