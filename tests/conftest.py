import sys
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from watermark_app.config import Settings
from watermark_app.deps import init_store
from watermark_app.main import create_app

BACKUP_SECRET = "backup-secret-123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'data' / 'app.db'}",
        jwt_secret="test-secret",
        backup_secret=BACKUP_SECRET,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(settings):
    engine, session_factory = init_store(settings)
    session = session_factory()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def register(client):
    """Sign up a user and return the Authorization headers for it"""
    def _register(name="Ada", email="ada@example.com", password="password123"):
        response = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _register


@pytest.fixture
def make_image():
    """Encode a solid-colour test image"""
    def _make_image(width=800, height=600, fmt="PNG", mode="RGB", color=(30, 60, 90)):
        if mode == "RGBA" and len(color) == 3:
            color = color + (255,)
        buffer = BytesIO()
        Image.new(mode, (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()
    return _make_image
