"""Test fixtures — a fresh in-memory database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own Settings pointing at "sqlite+aiosqlite://"
   (in-memory; the engine shares one connection via StaticPool), and a
   temp upload directory.
2. The AppContext is built from those settings, tables are created,
   and create_app(ctx=...) wires it in — no globals to patch.
3. httpx's ASGITransport talks to the app in-process. The lifespan does
   not run, so Redis stays disconnected and rate limiting is off.

Service-level tests use the in-memory fake stores below instead of a
database at all.
"""

import dataclasses
import itertools
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from marketplace.auth.password import PasswordHasher
from marketplace.auth.tokens import TokenService
from marketplace.config import Settings
from marketplace.context import AppContext
from marketplace.db.engine import create_tables
from marketplace.errors import ConflictError
from marketplace.main import create_app
from marketplace.records import Identity, Item
from marketplace.storage import ImageStorage

TEST_SECRET = "test-secret-6f1d2c9a4b7e8f0a1c3d5e7f9a0b2c4d"


# ═══════════════════════════════════════════════════════════
# App + HTTP client
# ═══════════════════════════════════════════════════════════


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_SECRET,
        environment="test",
        bcrypt_rounds=4,  # bcrypt's minimum — keeps tests fast
        upload_dir=str(tmp_path / "uploads"),
        public_base_url="http://test",
        create_tables_on_startup=False,
    )


@pytest_asyncio.fixture()
async def app_ctx(settings):
    ctx = AppContext.from_settings(settings)
    await create_tables(ctx.engine)
    try:
        yield ctx
    finally:
        await ctx.close()


@pytest_asyncio.fixture()
async def app(app_ctx):
    application = create_app(ctx=app_ctx)
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def register_user(client):
    """Register a user through the API and return Authorization headers."""
    counter = itertools.count(1)

    async def _register(email=None, name="Test User", password="secret-pass", phone=""):
        email = email or f"user{next(counter)}@example.com"
        r = await client.post(
            "/api/register",
            json={"email": email, "name": name, "password": password, "phone": phone},
        )
        assert r.status_code == 201, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _register


# ═══════════════════════════════════════════════════════════
# Clock + collaborators for unit tests
# ═══════════════════════════════════════════════════════════


class FrozenClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


@pytest.fixture()
def clock():
    return FrozenClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def tokens(clock):
    return TokenService(secret=TEST_SECRET, clock=clock)


@pytest.fixture()
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture()
def images(tmp_path):
    return ImageStorage(tmp_path / "images")


# ═══════════════════════════════════════════════════════════
# In-memory stores
# ═══════════════════════════════════════════════════════════


class InMemoryCredentialStore:
    def __init__(self):
        self.users: dict[int, Identity] = {}
        self._ids = itertools.count(1)

    async def find_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_id(self, user_id):
        return self.users.get(user_id)

    async def create(self, *, email, name, phone, password_hash):
        if await self.find_by_email(email):
            raise ConflictError("User already exists", field="email")
        user = Identity(
            id=next(self._ids),
            email=email,
            name=name,
            phone=phone,
            password_hash=password_hash,
        )
        self.users[user.id] = user
        return user


class InMemoryItemStore:
    def __init__(self):
        self.items: dict[int, Item] = {}
        self._ids = itertools.count(1)
        self.update_calls: list[tuple[int, dict]] = []

    async def find_by_id(self, item_id):
        return self.items.get(item_id)

    async def find_all(self):
        return [self.items[k] for k in sorted(self.items)]

    async def create(self, *, title, price, image, user_id):
        item = Item(
            id=next(self._ids),
            title=title,
            price=price,
            image=image,
            user_id=user_id,
            created_at=datetime.now(timezone.utc),
        )
        self.items[item.id] = item
        return item

    async def update(self, item_id, fields):
        self.update_calls.append((item_id, dict(fields)))
        if item_id in self.items:
            self.items[item_id] = dataclasses.replace(self.items[item_id], **fields)

    async def delete(self, item_id):
        self.items.pop(item_id, None)


@pytest.fixture()
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture()
def item_store():
    return InMemoryItemStore()
