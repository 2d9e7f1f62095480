"""
Shared fixtures for the BuildAura test suite.

Server tests run the real FastAPI app against a per-test SQLite database
(aiosqlite) with two dependency overrides: ``get_db`` and
``get_current_user`` (bearer tokens map to fixed test users).  The LLM is
replaced by ``FakeChatClient`` injected into ``GenerationService``.

Usage:
    pytest backend/tests -v
"""

import os
import sys

# Generous limits so the shared in-memory rate limiter never trips in tests
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["GENERATION_RATE_LIMIT"] = "100000/minute"
for _var in ("DATABASE_URL", "SUPABASE_URL", "SUPABASE_ANON_KEY"):
    os.environ.pop(_var, None)

# Add backend to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi import HTTPException, Request, status  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from buildaura.client.session import SessionContext  # noqa: E402
from buildaura.database import create_tables  # noqa: E402
from buildaura.generation_service import GenerationService  # noqa: E402

from factories import FakeChatClient, generate_uuid, make_idea_payload  # noqa: E402

USER_A = {"id": generate_uuid(), "email": "alice@example.com"}
USER_B = {"id": generate_uuid(), "email": "bob@example.com"}
TOKEN_A = "token-for-alice-0123456789"
TOKEN_B = "token-for-bob-0123456789"
USERS_BY_TOKEN = {TOKEN_A: USER_A, TOKEN_B: USER_B}


# ============================================================================
# DATABASE
# ============================================================================


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'buildaura.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ============================================================================
# LLM + SERVICE
# ============================================================================


@pytest.fixture
def fake_llm():
    return FakeChatClient(make_idea_payload())


@pytest.fixture
def service(fake_llm):
    return GenerationService(client=fake_llm, model="test-model")


# ============================================================================
# APP + HTTP CLIENTS
# ============================================================================


async def _current_user_from_token(request: Request) -> dict:
    auth = request.headers.get("Authorization", "")
    token = auth[len("Bearer "):].strip() if auth.startswith("Bearer ") else ""
    user = USERS_BY_TOKEN.get(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return user


@pytest.fixture
def app(session_factory, service):
    from buildaura.deps import get_current_user, get_db, get_generation_service
    from buildaura.main import app as fastapi_app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_current_user] = _current_user_from_token
    fastapi_app.dependency_overrides[get_generation_service] = lambda: service
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def asgi_transport(app):
    return httpx.ASGITransport(app=app)


@pytest.fixture
async def api(asgi_transport):
    async with httpx.AsyncClient(
        transport=asgi_transport, base_url="http://testserver"
    ) as client:
        yield client


@pytest.fixture
def auth_a():
    return {"Authorization": f"Bearer {TOKEN_A}"}


@pytest.fixture
def auth_b():
    return {"Authorization": f"Bearer {TOKEN_B}"}


@pytest.fixture
def session_a():
    return SessionContext(user_id=USER_A["id"], access_token=TOKEN_A, email=USER_A["email"])


@pytest.fixture
def session_b():
    return SessionContext(user_id=USER_B["id"], access_token=TOKEN_B, email=USER_B["email"])
