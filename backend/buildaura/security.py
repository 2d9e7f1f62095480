"""
Request hardening for the BuildAura API.

Every request passes through, in order: the request size check, the
security-header/request-id middleware and the slowapi rate limiter (per
client IP).  Generation endpoints additionally carry a tighter per-route
limit because each call is a paid LLM completion.  Errors leave the API as
JSON with a ``request_id`` so logs and client reports can be correlated.

Environment:
- RATE_LIMIT_PER_MINUTE: default per-IP limit for all routes (100)
- GENERATION_RATE_LIMIT: per-IP limit on /functions/v1/* ("10/minute")
- MAX_REQUEST_SIZE_MB: largest accepted body (1)
- TRUSTED_PROXY_COUNT: reverse proxies appending to X-Forwarded-For (1)
- ENVIRONMENT: "production" hides exception details and enables HSTS
"""

import ipaddress
import logging
import os
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================

RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "100"))
DEFAULT_RATE_LIMIT = f"{RATE_LIMIT_PER_MINUTE}/minute"

# Wizard payloads are small text fields
MAX_REQUEST_SIZE_MB = int(os.getenv("MAX_REQUEST_SIZE_MB", "1"))
MAX_REQUEST_SIZE_BYTES = MAX_REQUEST_SIZE_MB * 1024 * 1024

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT.lower() == "production"

TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "1"))

# Each generation is one paid LLM call
GENERATION_RATE_LIMIT = os.getenv("GENERATION_RATE_LIMIT", "10/minute")


# =============================================================================
# Client IP extraction
# =============================================================================


def _is_valid_ip(ip_str: str) -> bool:
    """Validate that a string is a valid IP address (IPv4 or IPv6)."""
    if not ip_str or len(ip_str) > 45:
        return False
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address, resisting X-Forwarded-For spoofing.

    Proxies append the connecting IP, so the entry just left of the trusted
    proxy chain is the real client; anything further left may be forged.

    Returns:
        The client IP address, or "unknown" if not determinable
    """
    direct_ip = request.client.host if request.client else None

    if forwarded_for := request.headers.get("X-Forwarded-For"):
        if ips := [ip.strip() for ip in forwarded_for.split(",") if ip.strip()]:
            if len(ips) > TRUSTED_PROXY_COUNT:
                client_ip = ips[-(TRUSTED_PROXY_COUNT + 1)]
            else:
                client_ip = ips[0]

            if _is_valid_ip(client_ip):
                return client_ip
            logger.warning(
                "Invalid IP in X-Forwarded-For header: %r (direct_ip=%s)",
                client_ip[:50],
                direct_ip,
            )

    if real_ip := request.headers.get("X-Real-IP"):
        real_ip = real_ip.strip()
        if _is_valid_ip(real_ip):
            return real_ip
        logger.warning(
            "Invalid X-Real-IP header: %r (direct_ip=%s)", real_ip[:50], direct_ip
        )

    return direct_ip if direct_ip and _is_valid_ip(direct_ip) else "unknown"


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[DEFAULT_RATE_LIMIT],
    storage_uri="memory://",
    strategy="fixed-window",
)


def get_rate_limiter() -> Limiter:
    """Get the configured rate limiter instance."""
    return limiter


# =============================================================================
# Middleware
# =============================================================================

_STATIC_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=()",
}
_HSTS = "max-age=31536000; includeSubDomains; preload"
_NO_STORE = "no-store, no-cache, must-revalidate, private"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, add browser hardening headers, log the outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        response.headers.update(_STATIC_HEADERS)
        if IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = _HSTS
        response.headers["X-Request-ID"] = request_id
        response.headers.setdefault("Cache-Control", _NO_STORE)

        logger.info(
            "%s %s -> %s in %.3fs (request_id=%s client_ip=%s)",
            request.method,
            request.url.path,
            response.status_code,
            time.perf_counter() - started,
            request_id,
            get_client_ip(request),
        )
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than MAX_REQUEST_SIZE_MB."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if content_length := request.headers.get("content-length"):
            try:
                size = int(content_length)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={
                        "detail": "Invalid Content-Length header",
                        "code": "INVALID_CONTENT_LENGTH",
                    },
                )
            if size > MAX_REQUEST_SIZE_BYTES:
                return JSONResponse(
                    status_code=413,
                    content={
                        "detail": f"Request body too large. Maximum size is {MAX_REQUEST_SIZE_MB}MB.",
                        "code": "REQUEST_TOO_LARGE",
                    },
                )

        return await call_next(request)


# =============================================================================
# Exception handlers
# =============================================================================


def _error_response(
    request: Request,
    allowed_origins: list[str],
    status_code: int,
    content: dict,
    extra_headers: Optional[dict] = None,
) -> JSONResponse:
    """JSON error body tagged with the request id, keeping CORS headers for allowed origins."""
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    headers = {"X-Request-ID": request_id}
    origin = request.headers.get("origin", "")
    if origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
    if extra_headers:
        headers.update(extra_headers)
    return JSONResponse(
        status_code=status_code,
        content={**content, "request_id": request_id},
        headers=headers,
    )


def create_secure_exception_handler(allowed_origins: list[str]) -> Callable:
    """Handler for unhandled exceptions; internal details are hidden in production."""

    async def secure_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled %s on %s %s (client_ip=%s): %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            get_client_ip(request),
            exc,
            exc_info=True,
        )
        if IS_PRODUCTION:
            content = {
                "detail": "An internal server error occurred. Please try again later.",
                "code": "INTERNAL_ERROR",
            }
        else:
            content = {"detail": str(exc), "error_type": type(exc).__name__}
        return _error_response(request, allowed_origins, 500, content)

    return secure_exception_handler


def create_rate_limit_exceeded_handler(allowed_origins: list[str]) -> Callable:
    """429 handler; generation and default limits share it."""

    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning(
            "Rate limit %s exceeded: client_ip=%s path=%s",
            exc.detail,
            get_client_ip(request),
            request.url.path,
        )
        return _error_response(
            request,
            allowed_origins,
            429,
            {
                "detail": "Rate limit exceeded. Please slow down your requests.",
                "code": "RATE_LIMIT_EXCEEDED",
                "retry_after_seconds": 60,
            },
            {"Retry-After": "60"},
        )

    return rate_limit_handler


def create_http_exception_handler(allowed_origins: list[str]) -> Callable:
    """HTTPException handler preserving the exception's own headers (WWW-Authenticate)."""

    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        if exc.status_code == 401:
            logger.warning(
                "Authentication failed: client_ip=%s path=%s",
                get_client_ip(request),
                request.url.path,
            )
        return _error_response(
            request, allowed_origins, exc.status_code, {"detail": exc.detail}, exc.headers
        )

    return http_exception_handler


# =============================================================================
# Setup
# =============================================================================


def setup_security(app: FastAPI, allowed_origins: list[str]) -> None:
    """
    Configure rate limiting, security headers, request size limits and
    secure error handling for *app*. Call after the CORS middleware is added.
    """
    app.state.limiter = limiter

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware)

    app.add_exception_handler(
        RateLimitExceeded, create_rate_limit_exceeded_handler(allowed_origins)
    )
    app.add_exception_handler(Exception, create_secure_exception_handler(allowed_origins))
    app.add_exception_handler(HTTPException, create_http_exception_handler(allowed_origins))

    logger.info(
        "Security middleware configured: rate_limit=%s/min, max_request_size=%sMB, environment=%s",
        RATE_LIMIT_PER_MINUTE,
        MAX_REQUEST_SIZE_MB,
        ENVIRONMENT,
    )


def rate_limit_generation():
    """Decorator for generation endpoints (one LLM call per request)."""
    return limiter.limit(GENERATION_RATE_LIMIT)


# =============================================================================
# Audit Logging
# =============================================================================


def log_security_event(
    event_type: str, request: Request, details: Optional[dict] = None
) -> None:
    """Log a security-relevant event (auth failure, rejected token) for audit."""
    log_data = {
        "event_type": event_type,
        "request_id": getattr(request.state, "request_id", "unknown"),
        "client_ip": get_client_ip(request),
        "path": request.url.path,
        "method": request.method,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        log_data |= details

    logger.warning("SECURITY_EVENT: %s", log_data)
