import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
import asyncio
from typing import AsyncGenerator, Callable, Dict, List
import json
import os
from fastapi import FastAPI
import httpx
from httpx import AsyncClient, ASGITransport
import sys

# Add the app directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Use a separate test database
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

from app.main import app
from app.models.base import Base
from app.db.database import get_db
from app.core.config import settings
from app.services.vision import VisionClient, get_vision_client
from app.models import Event, EventAnalysis  # Import all models

# Create async engine for tests
engine = create_async_engine(
    TEST_DATABASE_URL,
    future=True,
    poolclass=NullPool,  # connections never outlive a test event loop
    connect_args={"check_same_thread": False}
)

# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

# Override the get_db dependency for testing
async def override_get_db():
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()

@pytest_asyncio.fixture(scope="session")
def event_loop_policy():
    """Create and configure event loop policy for tests."""
    return asyncio.DefaultEventLoopPolicy()

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Setup database for each test."""
    # Start with a clean slate for each test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Clean up after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session for tests."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()

def chat_completion(content: str, total_tokens: int = 321) -> Dict:
    """Body of a chat completions response carrying ``content``."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {"total_tokens": total_tokens},
    }

@pytest.fixture
def vision_calls() -> List[httpx.Request]:
    """Requests received by the mocked vision API."""
    return []

@pytest.fixture
def vision_reply() -> Dict:
    """What the mocked vision API answers; tests replace ``content``, ``status_code``, ``api_key`` or the whole ``body``."""
    return {
        "api_key": "test-key",
        "status_code": 200,
        "content": {
            "event_name": "Noche de salsa",
            "date": "2026-02-06",
            "time": "20:00",
            "description": "Clases y baile social",
            "location": "Zona 1",
            "organizer": "@salsagt",
            "confidence": "high",
        },
    }

@pytest.fixture
def vision_client_factory(vision_calls, vision_reply) -> Callable[[], VisionClient]:
    """Build a vision client backed by an in-process mock transport."""
    def handler(request: httpx.Request) -> httpx.Response:
        vision_calls.append(request)
        if vision_reply["status_code"] != 200:
            return httpx.Response(vision_reply["status_code"], json={"error": {"message": "boom"}})
        if "body" in vision_reply:
            return httpx.Response(200, json=vision_reply["body"])
        content = vision_reply["content"]
        if not isinstance(content, str):
            content = json.dumps(content)
        return httpx.Response(200, json=chat_completion(content))

    def factory() -> VisionClient:
        return VisionClient(
            api_key=vision_reply.get("api_key", "test-key"),
            model="gpt-4o-mini",
            base_url="https://vision.test/v1",
            transport=httpx.MockTransport(handler),
        )

    return factory

@pytest_asyncio.fixture
async def test_app(vision_client_factory) -> AsyncGenerator[FastAPI, None]:
    """Configure the FastAPI application for testing."""
    # Set testing mode
    settings.TESTING = True

    # Override database and vision dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_vision_client] = vision_client_factory

    yield app

    app.dependency_overrides.clear()

@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        follow_redirects=True
    ) as ac:
        yield ac

@pytest_asyncio.fixture
async def test_event(client) -> Dict:
    """Create an undated test event and return it."""
    event_data = {
        "title": "Test Event",
        "description": "Test Description",
        "category": "music",
        "location": "Test Location",
    }

    response = await client.post("/api/v1/events/", json=event_data)

    assert response.status_code == 201
    return response.json()["event"]
