"""
tests/conftest.py -- Shared test fixtures for the lab's integration tests.

This module provides:
  - FakeClock: a callable clock the OTP store reads instead of time.time()
  - _make_test_stores(): creates isolated in-memory DBs for users + OTPs
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - lab: a fresh TestClient + stores + clock per test
  - register: helper that walks send-otp -> verify-otp -> register

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

SESSION_SECRET is set before any app import so get_settings() does not log
the fallback-secret warning on every test run.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

os.environ.setdefault("SESSION_SECRET", "test-session-secret-0123456789abcdef")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from api.main import app
from auth.service import AuthService
from auth.store import OtpStore, UserStore

OTP_TTL = 30


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class Lab:
    client: TestClient
    user_store: UserStore
    otp_store: OtpStore
    clock: FakeClock


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str, clock: FakeClock) -> tuple[UserStore, OtpStore]:
    """Create named shared-memory SQLite stores unique to db_suffix.

    StaticPool keeps one open connection per store, which is what holds the
    shared in-memory database alive between requests.
    """
    url = f"sqlite:///file:test_lab_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url, poolclass=StaticPool), OtpStore(url, ttl=OTP_TTL, clock=clock, poolclass=StaticPool)


def _patch_lifespan(user_store: UserStore, otp_store: OtpStore):
    """Return an async context manager that replaces the real lifespan.

    The purge_task is a long-sleeping coroutine so shutdown's .cancel() has a
    real asyncio.Task to act on.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.otp_store = otp_store
        app.state.auth_service = AuthService(user_store, otp_store)
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def lab() -> Generator[Lab, None, None]:
    """Yield a Lab with an empty database and a cookie jar holding no session.

    Function-scoped: every test starts Anonymous, which the session state
    machine tests depend on.
    """
    clock = FakeClock()
    user_store, otp_store = _make_test_stores(uuid.uuid4().hex, clock)
    app.router.lifespan_context = _patch_lifespan(user_store, otp_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield Lab(client=client, user_store=user_store, otp_store=otp_store, clock=clock)

    otp_store.close()
    user_store.close()


@pytest.fixture
def register(lab: Lab) -> Callable[..., dict]:
    """Return a helper that registers email through the real OTP flow.

    The code is read straight from the OTP store, the way the lab's fake
    inbox would show it. Returns the /api/user payload after registration.
    """

    def _register(email: str, password: str = "Secr3t!pass", **profile) -> dict:
        assert lab.client.post("/api/send-otp", json={"email": email}).json()["success"] is True
        code = lab.otp_store.find_by_email(email).otp
        assert lab.client.post("/api/verify-otp", json={"email": email, "otp": code}).json() == {"success": True}
        resp = lab.client.post("/api/register", json={"email": email, "password": password, **profile})
        assert resp.status_code == 200, resp.text
        return lab.client.get("/api/user").json()

    return _register
