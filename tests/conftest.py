import itertools
import random
from collections.abc import Iterator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.security import create_access_token
from app.main import create_app
from app.schemas.records import Category, GiveawayRecord, UserRecord
from app.store import EntityStore, MemoryStore, SqlStore

JAN_1_2024 = datetime(2024, 1, 1)
JAN_2_2024 = datetime(2024, 1, 2)
DEC_1_2023 = datetime(2023, 12, 1)


def _build_store(kind: str, tmp_path) -> EntityStore:
    if kind == "memory":
        return MemoryStore()
    store = SqlStore(f"sqlite:///{tmp_path / 'giveaways-test.db'}")
    store.create_schema()
    return store


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path) -> Iterator[EntityStore]:
    """Every store-backed test runs against both backings."""
    backing = _build_store(request.param, tmp_path)
    yield backing
    backing.close()


@pytest.fixture
def make_user(store):
    counter = itertools.count(1)

    def _make_user(username: str | None = None, **overrides) -> UserRecord:
        n = next(counter)
        username = username or f"user{n}"
        data = {
            "username": username,
            "password_hash": "not-a-real-hash",
            "email": f"{username}@example.com",
            "full_name": username.title(),
            "country": "Global",
        }
        data.update(overrides)
        return store.create(UserRecord, data)

    return _make_user


@pytest.fixture
def make_giveaway(store):
    def _make_giveaway(**overrides) -> GiveawayRecord:
        data = {
            "title": "Netflix Premium 12 months",
            "description": "A year of Netflix Premium",
            "image_url": "https://img.example.com/netflix.png",
            "prize": "Netflix Premium",
            "category": Category.netflix,
            "eligibility_requirements": "18+, one entry per person",
            "start_date": DEC_1_2023,
            "end_date": JAN_1_2024,
        }
        data.update(overrides)
        return store.create(GiveawayRecord, data)

    return _make_giveaway


class FixedRandom(random.Random):
    """Deterministic draw: always returns the configured index."""

    def __init__(self, index: int = 0):
        super().__init__(0)
        self.index = index
        self.calls: list[int] = []

    def randrange(self, *args, **kwargs):
        self.calls.append(args[0])
        return self.index


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def api_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def client(api_store) -> Iterator[TestClient]:
    settings = Settings(STORAGE_BACKEND="memory", ADMIN_PASSWORD="", DEBUG=False)
    with TestClient(create_app(settings=settings, store=api_store)) as test_client:
        yield test_client


@pytest.fixture
def headers_for():
    def _headers_for(user: UserRecord) -> dict:
        token = create_access_token(user.id, user.username, user.is_admin)
        return {"Authorization": f"Bearer {token}"}

    return _headers_for


@pytest.fixture
def api_admin(api_store) -> UserRecord:
    return api_store.create(
        UserRecord,
        {
            "username": "admin",
            "password_hash": "not-a-real-hash",
            "email": "admin@example.com",
            "full_name": "Admin User",
            "country": "Global",
            "is_admin": True,
        },
    )


@pytest.fixture
def admin_headers(api_admin, headers_for) -> dict:
    return headers_for(api_admin)
