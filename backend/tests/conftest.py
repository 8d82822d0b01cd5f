"""Pytest configuration and fixtures for the draft API tests."""
import os
import tempfile
import uuid

# Set test env BEFORE any imports that use config
_DB_PATH = os.path.join(tempfile.gettempdir(), f"frc_draft_test_{uuid.uuid4().hex}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["APP_ENV"] = "dev"
os.environ["AUTH_OPTIONAL_IN_DEV"] = "true"
os.environ["CLERK_JWKS_URL"] = ""
os.environ["SEASON_YEAR"] = "2026"
os.environ["SEASON_TOTAL_WEEKS"] = "3"

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from frc_draft.database import SessionLocal, engine
from frc_draft.main import app
from frc_draft.models import Base, Team

_SIGNING_SECRET = "frc-draft-test-signing-secret-0123456789"

CATALOG = [
    ("frc118", 118, "Robonauts"),
    ("frc148", 148, "Robowranglers"),
    ("frc254", 254, "The Cheesy Poofs"),
    ("frc330", 330, "Beach Bots"),
    ("frc971", 971, "Spartan Robotics"),
    ("frc1114", 1114, "Simbotics"),
    ("frc1678", 1678, "Citrus Circuits"),
    ("frc2056", 2056, "OP Robotics"),
    ("frc2910", 2910, "Jack in the Bot"),
    ("frc3310", 3310, "Black Hawk Robotics"),
]


def bearer(subject: str, name: str | None = None) -> dict[str, str]:
    """Authorization header for a user. Dev auth decodes the token without verifying it."""
    token = jwt.encode({"sub": subject, "name": name or subject.title()}, _SIGNING_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
async def _init_db():
    """Fresh schema and team catalog for every test (ASGI lifespan doesn't run with httpx)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with SessionLocal() as db:
        db.add_all([Team(id=key, number=number, name=name) for key, number, name in CATALOG])
        await db.commit()
    yield
    await engine.dispose()


@pytest.fixture
async def client():
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def make_room(client):
    """Create a room as `owner` and join the given users in order. Returns the room JSON."""

    async def _make(owner: str = "owner", joiners: tuple[str, ...] = (), **settings):
        body = {"name": "Test Draft", "capacity": 4, "round_count": 2, "snake_format": True, **settings}
        r = await client.post("/api/drafts", json=body, headers=bearer(owner))
        assert r.status_code == 200, r.text
        room = r.json()
        for user in joiners:
            jr = await client.post(f"/api/drafts/{room['id']}/join", headers=bearer(user))
            assert jr.status_code == 200, jr.text
        return room

    return _make


@pytest.fixture
async def started_room(client, make_room):
    """Start a room created by make_room(...). Returns the started room JSON."""

    async def _start(owner: str = "owner", joiners: tuple[str, ...] = ("p2", "p3", "p4"), **settings):
        room = await make_room(owner, joiners, **settings)
        r = await client.post(f"/api/drafts/{room['id']}/start", headers=bearer(owner))
        assert r.status_code == 200, r.text
        return r.json()

    return _start
