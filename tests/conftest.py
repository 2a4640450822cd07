import io
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from review_api.config import Settings
from review_api.core.service import ReviewService
from review_api.core.store import ReviewStore
from review_api.main import create_app
from review_api.schemas.reviews import Review


class TickingClock:
    """Clock advancing one second per call."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture()
def png():
    """Bytes of a small valid PNG image."""
    buffer = io.BytesIO()
    PILImage.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def clock():
    return TickingClock()


@pytest.fixture()
def store():
    return ReviewStore()


@pytest.fixture()
def service(store, clock):
    return ReviewService(store, clock=clock)


@pytest.fixture()
def make_review():
    counter = {"n": 0}
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "id": f"r{n}",
            "author_id": f"u{n}",
            "author_name": f"User {n}",
            "item_id": "p1",
            "rating": 5,
            "created_at": base + timedelta(minutes=n),
            "updated_at": base + timedelta(minutes=n),
        }
        data.update(overrides)
        return Review(**data)

    return _make


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        upload_dir=tmp_path / "uploads",
        summary_cache_backend="memory",
        log_level="WARNING"
    )


@pytest.fixture()
def app(settings, clock):
    app = create_app(settings)
    app.state.review_service.clock = clock
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
