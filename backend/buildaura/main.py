"""
BuildAura API - FastAPI backend for the guided business-generation tools
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from buildaura import __version__  # noqa: E402
from buildaura import database  # noqa: E402
from buildaura.errors import ERROR_CODE_HEADER  # noqa: E402
from buildaura.routers import (  # noqa: E402
    dashboard,
    functions,
    generations,
    health,
    ideas,
    launch_assets,
    plans,
    prompt_history,
    tasks,
)
from buildaura.security import setup_security  # noqa: E402

# =============================================================================
# CORS Configuration
# =============================================================================
# Production uses strict HTTPS origins only; development allows localhost.

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
DEFAULT_PRODUCTION_ORIGIN = "https://buildaura.app"


def _load_allowed_origins() -> list[str]:
    if ENVIRONMENT == "production":
        raw = os.getenv("ALLOWED_ORIGINS", DEFAULT_PRODUCTION_ORIGIN).split(",")
        origins = []
        for origin in raw:
            origin = origin.strip()
            if not origin:
                continue
            if not origin.startswith("https://"):
                logger.warning("[CORS] Rejecting non-HTTPS origin in production: %s", origin)
                continue
            if "localhost" in origin or "127.0.0.1" in origin:
                logger.warning("[CORS] Rejecting localhost origin in production: %s", origin)
                continue
            origins.append(origin)
        if not origins:
            logger.warning("[CORS] No valid origins configured, using default production origin")
            origins = [DEFAULT_PRODUCTION_ORIGIN]
        return origins

    raw = os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://localhost:8080",
    ).split(",")
    return [origin.strip() for origin in raw if origin.strip()]


ALLOWED_ORIGINS = _load_allowed_origins()
if not ALLOWED_ORIGINS:
    raise ValueError("CORS configuration error: No valid allowed origins configured")

logger.info("[CORS] Environment: %s", ENVIRONMENT)
logger.info("[CORS] Allowed origins: %s", ALLOWED_ORIGINS)


# Lifecycle management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    create_tables = os.getenv("BUILDAURA_CREATE_TABLES", "false").strip().lower() in (
        "1",
        "true",
        "yes",
        "on",
    )
    if create_tables and database.engine is not None:
        await database.create_tables()
    logger.info("BuildAura API started")
    yield
    if database.engine is not None:
        await database.engine.dispose()
    logger.info("BuildAura API shutdown complete")


app = FastAPI(
    title="BuildAura API",
    description="Idea, business plan, launch toolkit and task generation",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
    expose_headers=["X-Request-ID", ERROR_CODE_HEADER],
)

# =============================================================================
# Security Middleware Setup
# =============================================================================
# Must be called after the CORS middleware is added
setup_security(app, ALLOWED_ORIGINS)

app.include_router(health.router)
app.include_router(functions.router)
app.include_router(generations.router)
app.include_router(ideas.router)
app.include_router(plans.router)
app.include_router(launch_assets.router)
app.include_router(tasks.router)
app.include_router(prompt_history.router)
app.include_router(dashboard.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
