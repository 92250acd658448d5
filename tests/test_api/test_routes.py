"""HTTP tests for the versioned API."""

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app import app
from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.settings import settings
from core.validators import validate_csrf_dependency

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def client(db):
    """API client bound to the test session with CSRF checks disabled."""

    async def override_db():
        yield db

    app.dependency_overrides[get_db_async] = override_db
    app.dependency_overrides[validate_csrf_dependency] = lambda: None
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """Make the given user the authenticated caller."""

    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user

    return _login


@pytest.mark.asyncio
async def test_health(client):
    """Health check answers without authentication."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_missing_token_is_unauthenticated(client):
    """Protected routes need an access token."""
    response = await client.get("/v1/houses")

    assert response.status_code == 401
    assert response.json()["error"] == "NOT_AUTHENTICATED"


@pytest.mark.asyncio
async def test_bearer_token_identifies_user(client, tenant):
    """A signed token with the user id as subject authenticates the caller."""
    token = jwt.encode({"sub": str(tenant.id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    response = await client.get(
        "/v1/notifications", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_house_lifecycle_over_http(client, login, landlord, tenant, other_tenant):
    """List a house, request it, accept one request and see the other rejected."""
    login(landlord)
    created = await client.post(
        "/v1/houses",
        json={
            "title": "Hillside bungalow",
            "description": "Three rooms with a view.",
            "address": "7 Hill Lane",
            "rent_amount": "650.00",
            "bedrooms": 3,
            "bathrooms": 2,
        },
    )
    assert created.status_code == 201
    house_id = created.json()["id"]
    assert created.json()["status"] == "available"

    login(tenant)
    first = await client.post("/v1/rent-requests", json={"house_id": house_id})
    assert first.status_code == 201
    login(other_tenant)
    second = await client.post("/v1/rent-requests", json={"house_id": house_id})
    assert second.status_code == 201

    login(landlord)
    accepted = await client.patch(
        f"/v1/rent-requests/{first.json()['id']}/status", json={"status": "accepted"}
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    house = await client.get(f"/v1/houses/{house_id}")
    assert house.json()["status"] == "rented"
    assert house.json()["tenant_id"] == str(tenant.id)

    login(other_tenant)
    rejected = await client.get(f"/v1/rent-requests/{second.json()['id']}")
    assert rejected.json()["status"] == "rejected"

    again = await client.post("/v1/rent-requests", json={"house_id": house_id})
    assert again.status_code == 400
    assert again.json() == {
        "success": False,
        "error": "HOUSE_NOT_AVAILABLE",
        "message": "House Not Available",
    }


@pytest.mark.asyncio
async def test_invalid_body_is_422(client, login, landlord):
    """Schema violations use the validation envelope."""
    login(landlord)

    response = await client.post(
        "/v1/houses",
        json={
            "title": "Shed",
            "description": "Small.",
            "address": "1 Yard",
            "rent_amount": "0",
            "bedrooms": 0,
            "bathrooms": 0,
        },
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"


@pytest.mark.asyncio
async def test_forbidden_action_uses_error_envelope(client, login, tenant, house):
    """Domain errors render as success/error/message."""
    login(tenant)

    response = await client.patch(f"/v1/houses/{house.id}", json={"title": "Taken"})

    assert response.status_code == 403
    assert response.json()["error"] == "NOT_AUTHORIZED"


@pytest.mark.asyncio
async def test_unsafe_routes_need_csrf_token(client, login, landlord):
    """Without the double-submit token, writes are refused."""
    app.dependency_overrides.pop(validate_csrf_dependency, None)
    login(landlord)

    response = await client.delete("/v1/notifications")

    assert response.status_code == 403
    assert response.json()["error"] == "CSRF_FAILED"
