import pytest
from fastapi.testclient import TestClient

import app.api.dependencies as dependencies
import app.api.routes.admin as admin_routes
from app.main import app
from app.services import auth


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(dependencies, "db_configured", lambda: True)
    monkeypatch.setattr(admin_routes, "db_configured", lambda: True)
    return TestClient(app)


@pytest.fixture
def as_user(monkeypatch):
    """Resolve any bearer token to the given user id."""

    def _login(user_id="8d0f3c3e-5a55-4a7e-9d38-7f1d2b6c1a01"):
        monkeypatch.setattr(
            auth, "resolve_user", lambda token: auth.AuthUser(id=user_id, email="player@example.com")
        )
        return {"Authorization": "Bearer test-token"}

    return _login
