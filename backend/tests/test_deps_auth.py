"""
Unit Tests for the get_current_user dependency

Supabase Auth is replaced by a fake client on ``buildaura.deps.supabase``.

Usage:
    pytest backend/tests/test_deps_auth.py -v
"""

import os
import sys
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

# Add backend to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from buildaura import deps

from factories import generate_uuid

VALID_TOKEN = "a-valid-looking-access-token-123456"


def make_request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "path": "/api/v1/me/ideas",
            "root_path": "",
            "query_string": b"",
            "headers": [],
            "client": ("127.0.0.1", 50000),
            "server": ("testserver", 80),
        }
    )


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class FakeAuth:
    def __init__(self, user=None, error: Exception = None):
        self.user = user
        self.error = error
        self.tokens = []

    def get_user(self, token):
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=self.user)


@pytest.fixture
def fake_supabase(monkeypatch):
    def install(**kwargs):
        auth = FakeAuth(**kwargs)
        monkeypatch.setattr(deps, "supabase", SimpleNamespace(auth=auth))
        return auth

    return install


class TestGetCurrentUser:
    async def test_missing_credentials_is_401(self, fake_supabase):
        fake_supabase()
        with pytest.raises(HTTPException) as exc_info:
            await deps.get_current_user(make_request(), None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    async def test_short_token_is_401_without_lookup(self, fake_supabase):
        auth = fake_supabase()
        with pytest.raises(HTTPException) as exc_info:
            await deps.get_current_user(make_request(), bearer("short"))
        assert exc_info.value.status_code == 401
        assert auth.tokens == []

    async def test_unconfigured_supabase_is_503(self, monkeypatch):
        monkeypatch.setattr(deps, "supabase", None)
        with pytest.raises(HTTPException) as exc_info:
            await deps.get_current_user(make_request(), bearer(VALID_TOKEN))
        assert exc_info.value.status_code == 503

    async def test_valid_token_returns_user(self, fake_supabase):
        user_id = generate_uuid()
        auth = fake_supabase(user=SimpleNamespace(id=user_id, email="alice@example.com"))

        user = await deps.get_current_user(make_request(), bearer(VALID_TOKEN))

        assert user == {"id": user_id, "email": "alice@example.com"}
        assert auth.tokens == [VALID_TOKEN]

    async def test_no_user_is_401(self, fake_supabase):
        fake_supabase(user=None)
        with pytest.raises(HTTPException) as exc_info:
            await deps.get_current_user(make_request(), bearer(VALID_TOKEN))
        assert exc_info.value.status_code == 401

    async def test_lookup_error_is_401(self, fake_supabase):
        fake_supabase(error=RuntimeError("JWT expired"))
        with pytest.raises(HTTPException) as exc_info:
            await deps.get_current_user(make_request(), bearer(VALID_TOKEN))
        assert exc_info.value.status_code == 401
