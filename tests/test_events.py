import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy import select

from app.models import Event

pytestmark = pytest.mark.asyncio

async def create(client: AsyncClient, **event_data) -> dict:
    response = await client.post("/api/v1/events/", json={"title": "Test Event", **event_data})
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["event"]

async def test_create_event_success(client: AsyncClient):
    """Test successful event creation."""
    response = await client.post(
        "/api/v1/events/",
        json={
            "title": "  Concierto  ",
            "description": "Banda en vivo",
            "category": "music",
            "date": "2099-05-01",
            "time": "20:00",
            "location": "Teatro Nacional",
            "registration_form_url": "https://example.com/registro",
        }
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["success"] is True
    event = data["event"]
    assert event["id"]
    assert event["title"] == "Concierto"
    assert event["registration_url"] == "https://example.com/registro"
    assert event["recurring_dates"] == []
    assert event["expiration_date"] == "2099-05-01"

async def test_create_event_requires_title(client: AsyncClient):
    for payload in ({}, {"title": "   "}):
        response = await client.post("/api/v1/events/", json=payload)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["detail"] == "Title is required"

async def test_create_event_rejects_malformed_date(client: AsyncClient):
    response = await client.post("/api/v1/events/", json={"title": "Fiesta", "date": "01/05/2099"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["type"] == "validation_error"

async def test_paid_user_event_requires_bank_account(client: AsyncClient):
    response = await client.post(
        "/api/v1/events/",
        json={"title": "Taller", "price": 50, "user_id": 7, "bank_name": "Banco Industrial"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Bank account information is required for paid events hosted by users"

async def test_paid_user_event_with_bank_account(client: AsyncClient):
    event = await create(
        client,
        price=50,
        user_id=7,
        bank_account_number="123-456",
        bank_name="Banco Industrial",
    )
    assert event["user_id"] == "7"
    assert event["price"] == 50

async def test_paid_event_without_user_needs_no_bank_account(client: AsyncClient):
    event = await create(client, price=25)
    assert event["price"] == 25

async def test_create_recurring_event(client: AsyncClient):
    """Recurring dates are computed from the pattern, not taken from the client."""
    event = await create(
        client,
        date="2026-02-06",
        is_recurring=True,
        recurring_pattern="Todos los viernes de febrero",
        recurrence={
            "weekday_names": ["viernes"],
            "month_start": "2026-02",
            "month_end": "2026-02",
        },
        recurring_dates=["2026-02-05"],
    )
    assert event["is_recurring"] is True
    assert event["recurring_dates"] == ["2026-02-06", "2026-02-13", "2026-02-20", "2026-02-27"]
    assert event["expiration_date"] == "2026-02-27"

async def test_create_recurring_event_with_precomputed_dates(client: AsyncClient):
    event = await create(
        client,
        date="2099-02-06",
        is_recurring=True,
        recurring_dates=["2099-02-20", "bad", "2099-02-06", "2099-02-20"],
    )
    assert event["recurring_dates"] == ["2099-02-06", "2099-02-20"]
    assert event["expiration_date"] == "2099-02-20"

async def test_create_multi_day_event(client: AsyncClient):
    event = await create(client, date="2026-02-13", specific_days=[14, 13])
    assert event["is_recurring"] is False
    assert event["recurring_dates"] == ["2026-02-13", "2026-02-14"]
    assert event["expiration_date"] == "2026-02-13"

async def test_get_event(client: AsyncClient, test_event):
    """Test retrieving an event."""
    response = await client.get(f"/api/v1/events/{test_event['id']}")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["event"]["id"] == test_event["id"]
    assert data["event"]["category"] == "music"

async def test_get_missing_event(client: AsyncClient):
    response = await client.get("/api/v1/events/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    body = response.json()
    assert body == {
        "success": False,
        "detail": "Event not found",
        "status_code": 404,
        "type": "http_error"
    }

async def test_past_event_is_still_retrievable(client: AsyncClient):
    event = await create(client, date="2000-01-01")
    response = await client.get(f"/api/v1/events/{event['id']}")
    assert response.status_code == status.HTTP_200_OK

async def test_list_events_hides_past_events(client: AsyncClient):
    past = await create(client, title="Pasado", date="2000-01-01")
    future = await create(client, title="Futuro", date="2099-01-01")
    undated = await create(client, title="Sin fecha")
    # recurring event whose first date passed but whose last date has not
    running = await create(
        client,
        title="Temporada",
        date="2000-01-07",
        is_recurring=True,
        recurring_dates=["2000-01-07", "2099-12-31"],
    )

    response = await client.get("/api/v1/events/")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    ids = [event["id"] for event in data["events"]]
    assert past["id"] not in ids
    assert {future["id"], undated["id"], running["id"]} == set(ids)
    assert data["total"] == 3
    assert data["hidden_past"] == 1

async def test_list_events_newest_first(client: AsyncClient):
    first = await create(client, title="Primero")
    second = await create(client, title="Segundo")
    response = await client.get("/api/v1/events/")
    ids = [event["id"] for event in response.json()["events"]]
    assert ids == [second["id"], first["id"]]

@pytest.mark.parametrize("category,expected", [
    ("music", {"Concierto"}),
    ("sports", {"Carrera"}),
    ("all", {"Concierto", "Carrera"}),
    (None, {"Concierto", "Carrera"}),
])
async def test_list_events_by_category(client: AsyncClient, category, expected):
    await create(client, title="Concierto", category="music")
    await create(client, title="Carrera", category="sports")
    params = {"category": category} if category else {}
    response = await client.get("/api/v1/events/", params=params)
    assert {event["title"] for event in response.json()["events"]} == expected

async def test_event_is_persisted_with_dates(client: AsyncClient, db_session):
    event = await create(client, date="2026-02-13", specific_days=[13, 14])
    result = await db_session.execute(select(Event).where(Event.id == event["id"]))
    db_event = result.scalar_one()
    assert db_event.recurring_dates == ["2026-02-13", "2026-02-14"]
    assert db_event.to_dict()["recurring_dates"] == ["2026-02-13", "2026-02-14"]

async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "Event Analyzer"
