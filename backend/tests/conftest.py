"""Pytest fixtures for barter backend tests."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.models.schemas import Item, Profile
from app.store.memory import InMemoryRepository


JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"
BASE_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_token(user_id: str, secret: str = JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    """Mint an access token the way Supabase does (HS256, audience 'authenticated')."""
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_header(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def add_item(repo: InMemoryRepository, item_id: str, owner: str, available: bool = True) -> None:
    repo.add_item(
        Item(
            id=item_id,
            user_id=owner,
            name=f"Item {item_id}",
            image_url=f"https://cdn.example.com/{item_id}.jpg",
            is_available=available,
        )
    )


def like(repo: InMemoryRepository, user_id: str, item_id: str, hours: float = 0) -> None:
    repo.add_like(user_id, item_id, created_at=BASE_TIME + timedelta(hours=hours))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="",
        supabase_service_key="",
        jwt_secret=JWT_SECRET,
        snapshot_dir="",
        liker_fan_out_cap=50,
        max_suggestions=200,
        suggestion_workers=4,
        suggestion_timeout_seconds=5.0,
    )


@pytest.fixture
def three_way_repo() -> InMemoryRepository:
    """A owns item1 (liked by B), B owns item2 (liked by C), C owns item3 (liked by A)."""
    repo = InMemoryRepository(
        profiles=[
            Profile(id="A", name="Alice", avatar_url="https://cdn.example.com/a.png"),
            Profile(id="B", name="Bob", avatar_url="https://cdn.example.com/b.png"),
            Profile(id="C", name="Carol", avatar_url=None),
        ]
    )
    add_item(repo, "item1", "A")
    add_item(repo, "item2", "B")
    add_item(repo, "item3", "C")
    like(repo, "B", "item1", hours=1)
    like(repo, "C", "item2", hours=2)
    like(repo, "A", "item3", hours=3)
    return repo


@pytest.fixture
def client(settings: Settings, three_way_repo: InMemoryRepository) -> TestClient:
    return TestClient(create_app(settings, three_way_repo))
