"""Shared dependencies for all BuildAura API routers.

Centralises the Supabase client singleton, the authentication dependency,
the HTTPBearer scheme, the rate-limiter reference and the generation
service, so every router module can ``from buildaura.deps import ...``
without pulling in ``main``.
"""

import asyncio
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client, create_client

from buildaura.database import get_db  # noqa: F401  (re-exported for routers)
from buildaura.generation_service import GenerationService
from buildaura.security import get_rate_limiter, log_security_event

load_dotenv()

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Supabase client (singleton)
# ---------------------------------------------------------------------------
_supabase_url = os.getenv("SUPABASE_URL")
_supabase_anon_key = os.getenv("SUPABASE_ANON_KEY")

# Tokens are verified against Supabase Auth; the app still boots without it
supabase: Optional[Client] = None
if _supabase_url and _supabase_anon_key:
    supabase = create_client(_supabase_url, _supabase_anon_key)
else:
    logger.warning("SUPABASE_URL/SUPABASE_ANON_KEY not set; authenticated endpoints return 503")

# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------
limiter = get_rate_limiter()

# ---------------------------------------------------------------------------
# HTTPBearer security scheme
# ---------------------------------------------------------------------------
# auto_error=False so a missing header is reported as 401, not 403
security = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Generation service (singleton)
# ---------------------------------------------------------------------------
_generation_service = GenerationService()


def get_generation_service() -> GenerationService:
    return _generation_service


# ---------------------------------------------------------------------------
# Small utility helpers
# ---------------------------------------------------------------------------


def _safe_error(operation: str, e: Exception) -> str:
    """Log *e* with its traceback; return a client-facing message naming only *operation*."""
    logger.exception("Error during %s", operation)
    return f"{operation} failed. Please try again or contact support."


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---------------------------------------------------------------------------
# Authentication dependency
# ---------------------------------------------------------------------------


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Resolve the caller from a Supabase access token.

    Supabase Auth verifies the signature, expiry and revocation status.
    Returns ``{"id": <user uuid>, "email": <email or None>}``.
    """
    if credentials is None or not credentials.credentials:
        log_security_event("auth_missing_token", request)
        raise _unauthorized()

    token = credentials.credentials
    if len(token) < 20:
        log_security_event("auth_invalid_token_format", request)
        raise _unauthorized()

    if supabase is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured",
        )

    try:
        # supabase-py is synchronous; keep it off the event loop
        response = await asyncio.to_thread(supabase.auth.get_user, token)
    except Exception as e:
        log_security_event(
            "auth_error",
            request,
            {"error_type": type(e).__name__, "error_msg": str(e)[:100]},
        )
        raise _unauthorized() from e

    if response is None or response.user is None:
        log_security_event("auth_invalid_session", request)
        raise _unauthorized()

    logger.debug("Authenticated user: %s", response.user.id)
    return {"id": str(response.user.id), "email": response.user.email}
