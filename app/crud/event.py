from typing import List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.core.logging import events_logger as logger
from app.models.event import Event
from app.recurrence import expand_explicit_days, resolve_recurring_dates
from app.schemas.event import EventCreate

def _clean(value: Optional[str]) -> Optional[str]:
    """Trim a text field, mapping blanks to None"""
    if value is None:
        return None
    value = value.strip()
    return value or None

def resolve_event_dates(event_in: EventCreate) -> List[str]:
    """Concrete dates stored with a new event"""
    if not event_in.is_recurring:
        if event_in.date and len(set(event_in.specific_days)) >= 2:
            return expand_explicit_days(event_in.date, event_in.specific_days)
        return []

    if event_in.recurrence is not None:
        guess = {
            **event_in.recurrence,
            "is_recurring": True,
            "primary_date": event_in.recurrence.get("primary_date") or event_in.date,
        }
        return resolve_recurring_dates(guess)

    return list(event_in.recurring_dates)

async def create_event(db: AsyncSession, event_in: EventCreate) -> Event:
    """Create a new event"""
    title = _clean(event_in.title)
    if not title:
        raise ValidationError("Title is required")

    # Paid events hosted by a user need somewhere to send the money
    if event_in.price and event_in.price > 0 and event_in.user_id:
        if not _clean(event_in.bank_account_number) or not _clean(event_in.bank_name):
            raise ValidationError("Bank account information is required for paid events hosted by users")

    recurring_dates = resolve_event_dates(event_in)

    db_event = Event(
        title=title,
        description=_clean(event_in.description),
        category=event_in.category or "general",
        image=event_in.image or None,
        date=event_in.date,
        time=_clean(event_in.time),
        end_time=_clean(event_in.end_time),
        location=_clean(event_in.location),
        organizer=_clean(event_in.organizer),
        user_id=event_in.user_id,
        price=event_in.price or None,
        registration_url=_clean(event_in.registration_url),
        bank_account_number=_clean(event_in.bank_account_number),
        bank_name=_clean(event_in.bank_name),
        is_recurring=event_in.is_recurring,
        recurring_pattern=_clean(event_in.recurring_pattern),
        recurring_dates=recurring_dates,
    )

    logger.info("Creating event", extra={"title": title, "recurring_dates": len(recurring_dates)})
    db.add(db_event)
    await db.commit()
    await db.refresh(db_event)
    logger.info("Event created", extra={"event_id": db_event.id})

    return db_event

async def get_event(db: AsyncSession, event_id: int) -> Event | None:
    """Get an event by ID"""
    result = await db.execute(select(Event).where(Event.id == event_id))
    return result.scalar_one_or_none()

async def get_events(db: AsyncSession, category: Optional[str] = None) -> List[Event]:
    """All events, newest first, optionally restricted to a category"""
    query = select(Event).order_by(Event.created_at.desc(), Event.id.desc())
    if category and category != "all":
        query = query.where(Event.category == category)
    result = await db.execute(query)
    return list(result.scalars().all())

async def get_current_events(
    db: AsyncSession,
    today: str,
    category: Optional[str] = None
) -> Tuple[List[Event], int]:
    """
    Events still current on ``today`` (YYYY-MM-DD).

    Events without a date are always kept; recurring events are kept until
    their last expanded date has passed. Returns the kept events and the
    number of events hidden as past.
    """
    events = await get_events(db, category)
    current = [event for event in events if event.is_visible_on(today)]
    hidden = len(events) - len(current)
    logger.info("Filtered past events", extra={"hidden": hidden, "today": today})
    return current, hidden
