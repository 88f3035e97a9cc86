"""
Error boundary: envelope shape per environment, validation mapping and the
generic 500 for programming errors.
"""
import httpx
import pytest
import pytest_asyncio


async def explode():
    raise RuntimeError("database password is hunter2")


@pytest_asyncio.fixture
async def lenient_client(app):
    """Client that lets unexpected errors reach the 500 handler response."""
    app.add_api_route("/boom", explode)
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_operational_error_in_development_carries_debug_fields(client):
    r = await client.get("/api/v1/users/editProfile")
    body = r.json()
    assert r.status_code == 401
    assert body["status"] == "fail"
    assert body["error"] == "Unauthenticated"
    assert "Traceback" in body["stack"]


@pytest.mark.asyncio
async def test_request_validation_maps_to_400(client):
    r = await client.post("/api/v1/users/login", json={"email": "a@nitc.ac.in"})
    assert r.status_code == 400
    body = r.json()
    assert body["status"] == "fail"
    assert body["message"].startswith("Invalid input data.")
    assert "password" in body["message"]


@pytest.mark.asyncio
async def test_unexpected_error_in_development(lenient_client):
    r = await lenient_client.get("/boom")
    assert r.status_code == 500
    body = r.json()
    assert body["status"] == "error"
    assert body["error"] == "RuntimeError"


@pytest.mark.asyncio
async def test_health_and_root(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["dependencies"] == {"database": "ok"}

    r = await client.get("/")
    assert r.json()["service"] == "nitc-blogs"


class TestProduction:
    @pytest.fixture
    def settings(self, settings):
        return settings.model_copy(update={"ENVIRONMENT": "production"})

    @pytest.mark.asyncio
    async def test_operational_error_hides_internals(self, client):
        r = await client.get("/api/v1/users/editProfile")
        assert r.status_code == 401
        assert r.json() == {
            "status": "fail",
            "message": "You are not logged in! Please log in to get access.",
        }

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic(self, lenient_client):
        r = await lenient_client.get("/boom")
        assert r.status_code == 500
        assert r.json() == {"status": "error", "message": "Something went wrong"}
