from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ResourceNotFound
from app.core.logging import events_logger as logger
from app.crud import event as crud_event
from app.db.database import get_db
from app.schemas.event import (
    EventCreate,
    EventEnvelope,
    EventListResponse,
    EventResponse,
)
from app.utils.dates import local_today_str

router = APIRouter(
    prefix="/events",
    tags=["Events"],
    responses={
        400: {"description": "Invalid event data"},
        404: {"description": "Event not found"},
        500: {"description": "Internal server error"}
    }
)

@router.post(
    "/",
    response_model=EventEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create new event",
    description="""
    Create a new event.

    * Recurring events get their concrete dates computed from the pattern
      in `recurrence` (weekday names, day numbers, month bounds)
    * Multi-day events use `specific_days` within the month of `date`
    * Paid events hosted by a user need bank account information
    """,
    responses={
        201: {
            "description": "Event created successfully",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "event": {
                            "id": 1,
                            "title": "Noche de salsa",
                            "category": "music",
                            "date": "2026-02-06",
                            "time": "20:00",
                            "location": "Zona 1",
                            "is_recurring": True,
                            "recurring_pattern": "Todos los viernes de febrero",
                            "recurring_dates": ["2026-02-06", "2026-02-13", "2026-02-20", "2026-02-27"],
                            "expiration_date": "2026-02-27"
                        }
                    }
                }
            }
        }
    }
)
async def create_event(
    *,
    db: AsyncSession = Depends(get_db),
    event_in: EventCreate
) -> EventEnvelope:
    """
    Create a new event.

    Returns the created event with its computed dates.
    """
    db_event = await crud_event.create_event(db, event_in)
    return EventEnvelope(event=EventResponse.model_validate(db_event))

@router.get(
    "/",
    response_model=EventListResponse,
    summary="List current events",
    description="""
    List events newest first.

    Events whose last date is before today (in the configured events time
    zone) are left out. Undated events are always listed.
    """
)
async def list_events(
    category: Optional[str] = Query(None, description="Category filter, `all` for every category"),
    db: AsyncSession = Depends(get_db)
) -> EventListResponse:
    """List events that have not expired yet."""
    today = local_today_str()
    events, hidden = await crud_event.get_current_events(db, today, category)
    logger.info(
        "Listed events",
        extra={"category": category or "all", "returned": len(events), "hidden": hidden}
    )
    return EventListResponse(
        events=[EventResponse.model_validate(event) for event in events],
        total=len(events),
        hidden_past=hidden
    )

@router.get(
    "/{event_id}",
    response_model=EventEnvelope,
    summary="Get event by ID"
)
async def get_event(
    event_id: int,
    db: AsyncSession = Depends(get_db)
) -> EventEnvelope:
    """Get a single event, expired or not."""
    db_event = await crud_event.get_event(db, event_id)
    if not db_event:
        raise ResourceNotFound("Event not found")
    return EventEnvelope(event=EventResponse.model_validate(db_event))
