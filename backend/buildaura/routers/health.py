"""Health-check router."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from buildaura import __version__, database, deps, openai_provider

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    """Health check"""
    return {"status": "ok", "message": "BuildAura API is running"}


@router.get("/api/v1/health")
async def health_check():
    """Report which backing services are configured."""
    capabilities = []
    degraded = []

    if openai_provider.is_configured():
        capabilities.append("generation")
    else:
        degraded.append("generation")

    if database.is_configured():
        capabilities.append("records")
    else:
        degraded.append("records")

    if deps.supabase is not None:
        capabilities.append("auth")
    else:
        degraded.append("auth")

    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "capabilities": capabilities,
        "degraded": degraded if degraded else None,
        "mode": "full" if not degraded else "degraded",
    }
