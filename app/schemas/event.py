from datetime import datetime
from typing import Any, Dict, Optional, List
from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.recurrence.patterns import parse_iso_date
from .base import BaseSchema


# --- Core Event Schemas ---
class EventBase(BaseSchema):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    category: str = Field("general", max_length=50)
    image: Optional[str] = None
    date: Optional[str] = Field(None, description="Primary date, YYYY-MM-DD")
    time: Optional[str] = Field(None, description="Start time, HH:MM (24h)")
    end_time: Optional[str] = Field(None, description="End time, HH:MM (24h)")
    location: Optional[str] = Field(None, max_length=300)
    organizer: Optional[str] = Field(None, max_length=200)
    price: Optional[float] = Field(None, ge=0)
    registration_url: Optional[str] = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("registration_url", "registration_form_url"),
    )
    is_recurring: bool = False
    recurring_pattern: Optional[str] = Field(None, max_length=300)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        parsed = parse_iso_date(v)
        if parsed is None:
            raise ValueError("date must use the YYYY-MM-DD format")
        return parsed.isoformat()

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Any) -> Any:
        return v or "general"


class EventCreate(EventBase):
    user_id: Optional[str] = None
    bank_account_number: Optional[str] = Field(None, max_length=64)
    bank_name: Optional[str] = Field(None, max_length=100)
    specific_days: List[int] = Field(
        default_factory=list,
        description="Day numbers of a non-recurring multi-day event, within the month of `date`",
    )
    recurrence: Optional[Dict[str, Any]] = Field(
        None,
        description="Date pattern guess (weekday_names, specific_days, month_start, month_end) for recurring events",
    )
    recurring_dates: List[str] = Field(default_factory=list)

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Any) -> Optional[str]:
        return None if v is None or v == "" else str(v)

    @field_validator("recurring_dates", mode="before")
    @classmethod
    def clean_recurring_dates(cls, v: Any) -> List[str]:
        if not isinstance(v, (list, tuple)):
            return []
        dates = {parse_iso_date(item) for item in v}
        dates.discard(None)
        return [d.isoformat() for d in sorted(dates)]


class EventResponse(EventBase):
    id: int
    user_id: Optional[str] = None
    recurring_dates: List[str] = []
    expiration_date: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventEnvelope(BaseModel):
    success: bool = True
    event: EventResponse


class EventListResponse(BaseModel):
    success: bool = True
    events: List[EventResponse]
    total: int
    hidden_past: int = 0
