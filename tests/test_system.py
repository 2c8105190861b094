import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from rentdesk.core.config import settings
from rentdesk.database import get_db
from rentdesk.main import app


@pytest.fixture()
def anonymous_client(db):
    """Real token verification, test database"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(sub, audience=None, secret=None):
    claims = {"sub": str(sub), "aud": audience or settings.JWT_AUDIENCE}
    return jwt.encode(claims, secret or settings.SUPABASE_JWT_SECRET, algorithm=settings.ALGORITHM)


def test_missing_token_is_unauthorized(anonymous_client):
    assert anonymous_client.get("/api/properties").status_code == 401


def test_valid_token_scopes_requests(anonymous_client, building, user_id):
    headers = {"Authorization": f"Bearer {make_token(user_id)}"}

    response = anonymous_client.get("/api/properties", headers=headers)

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [str(building.id)]

    stranger = {"Authorization": f"Bearer {make_token(uuid.uuid4())}"}
    assert anonymous_client.get("/api/properties", headers=stranger).json() == []


@pytest.mark.parametrize("token", [
    "not-a-jwt",
    make_token(uuid.uuid4(), audience="anon"),
    make_token(uuid.uuid4(), secret="wrong-secret"),
    make_token("not-a-uuid"),
])
def test_bad_tokens_are_rejected(anonymous_client, token):
    response = anonymous_client.get("/api/clients", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_root_and_version(client):
    assert client.get("/").json()["app_name"] == settings.PROJECT_NAME
    assert client.get("/api/version").json()["api_version"] == settings.VERSION


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_validation_error_shape(client):
    response = client.post("/api/clients", json={"phone": "0500"})
    assert response.status_code == 422
    assert response.json()["success"] is False
    assert response.json()["errors"]
