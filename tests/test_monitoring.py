import pytest
import pytest_asyncio
from fastapi import FastAPI
from pydantic import BaseModel
import httpx
import json
import logging
from app.core.logging import setup_test_logging, RequestLoggingMiddleware, CustomJsonFormatter
from app.core.error_handler import setup_error_handlers
from app.core.exceptions import ResourceNotFound, ServiceNotConfigured, VisionServiceError
from app.core.middleware import RequestSizeMiddleware, SecurityHeadersMiddleware

class Item(BaseModel):
    name: str

@pytest_asyncio.fixture
async def test_app():
    """Create test application with logging and error handlers."""
    app = FastAPI()

    @app.get("/test")
    async def test_endpoint():
        return {"message": "success"}

    @app.get("/value-error")
    async def value_error_endpoint():
        raise ValueError("Test error")

    @app.get("/crash")
    async def crash_endpoint():
        raise RuntimeError("Unexpected")

    @app.get("/missing")
    async def missing_endpoint():
        raise ResourceNotFound("Event not found")

    @app.get("/unconfigured")
    async def unconfigured_endpoint():
        raise ServiceNotConfigured("OPENAI_API_KEY not configured")

    @app.get("/upstream")
    async def upstream_endpoint():
        raise VisionServiceError()

    @app.post("/items")
    async def create_item(item: Item):
        return item

    setup_test_logging()
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeMiddleware, max_content_length=64)
    app.add_middleware(RequestLoggingMiddleware)

    setup_error_handlers(app)

    return app

@pytest_asyncio.fixture
async def client(test_app):
    """Create test client."""
    transport = httpx.ASGITransport(app=test_app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

@pytest.mark.asyncio
async def test_request_logging(client, caplog):
    """Test request logging middleware."""
    with caplog.at_level(logging.INFO):
        response = await client.get("/test")
        assert response.status_code == 200

        records = [r for r in caplog.records if r.name == "api.request"]
        assert len(records) >= 2

        record = records[-1]
        assert record.getMessage() == "Request completed"
        assert record.status_code == 200

        formatter = CustomJsonFormatter("%(message)s")
        parsed_output = json.loads(formatter.format(record))
        assert parsed_output["method"] == "GET"
        assert parsed_output["path"] == "/test"

        # Check request ID propagation
        assert response.headers["X-Request-ID"] == record.request_id

@pytest.mark.asyncio
async def test_request_id_is_reused(client):
    response = await client.get("/test", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

@pytest.mark.asyncio
async def test_structured_log_format(client, caplog):
    """Test structured JSON log format."""
    with caplog.at_level(logging.INFO):
        await client.get("/test")

        records = [r for r in caplog.records if r.name == "api.request"]
        assert records, "No api.request log records found"
        record = records[-1]

        formatter = CustomJsonFormatter("%(message)s")
        parsed_output = json.loads(formatter.format(record))

        required_fields = {
            "timestamp",
            "level",
            "name",
            "message",
            "request_id",
            "environment",
            "module",
            "line"
        }

        for field in required_fields:
            assert field in parsed_output, f"Missing field: {field}"

        assert parsed_output["level"] == "INFO"
        assert parsed_output["name"] == "api.request"
        assert isinstance(parsed_output.get("duration"), (int, float))

@pytest.mark.asyncio
async def test_value_error_is_bad_request(client, caplog):
    with caplog.at_level(logging.ERROR):
        response = await client.get("/value-error")
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "detail": "Test error",
            "status_code": 400,
            "type": "value_error"
        }

        error_records = [r for r in caplog.records if r.levelname == "ERROR"]
        assert error_records
        assert error_records[0].error_type == "ValueError"

@pytest.mark.asyncio
async def test_unhandled_error_logging(client, caplog):
    """Test error logging."""
    with caplog.at_level(logging.ERROR):
        response = await client.get("/crash")
        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
        assert response.json()["type"] == "server_error"

        error_records = [r for r in caplog.records if r.levelname == "ERROR"]
        assert any(getattr(r, "error_type", None) == "RuntimeError" for r in error_records)

@pytest.mark.asyncio
@pytest.mark.parametrize("path,status_code,error_type", [
    ("/missing", 404, "http_error"),
    ("/unconfigured", 503, "service_error"),
    ("/upstream", 502, "service_error"),
    ("/nowhere", 404, "http_error"),
])
async def test_error_envelope(client, path, status_code, error_type):
    response = await client.get(path)
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["status_code"] == status_code
    assert body["type"] == error_type

@pytest.mark.asyncio
async def test_validation_error_envelope(client):
    response = await client.post("/items", json={})
    assert response.status_code == 422
    body = response.json()
    assert body["type"] == "validation_error"
    assert body["detail"][0]["loc"] == ["body", "name"]
    assert "input" not in body["detail"][0]

@pytest.mark.asyncio
async def test_security_headers(client):
    response = await client.get("/test")
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "max-age=" in response.headers["Strict-Transport-Security"]

@pytest.mark.asyncio
async def test_request_size_limit(client):
    response = await client.post("/items", json={"name": "x" * 200})
    assert response.status_code == 413
