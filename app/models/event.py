from typing import List, Dict, Any, Optional
from sqlalchemy import String, Boolean, JSON, Integer, Numeric, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base
from app.recurrence.expiration import effective_expiration, is_visible

class Event(Base):
    """Event created by hand or from an analyzed flyer"""

    __tablename__ = "events"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # Required fields
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="general", nullable=False)

    # Optional fields
    description: Mapped[str | None] = mapped_column(Text)
    image: Mapped[str | None] = mapped_column(Text)
    date: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD
    time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str | None] = mapped_column(String(5))
    location: Mapped[str | None] = mapped_column(String(300))
    organizer: Mapped[str | None] = mapped_column(String(200))
    user_id: Mapped[str | None] = mapped_column(String(64), index=True)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    registration_url: Mapped[str | None] = mapped_column(String(500))
    bank_account_number: Mapped[str | None] = mapped_column(String(64))
    bank_name: Mapped[str | None] = mapped_column(String(100))

    # Recurrence
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurring_pattern: Mapped[str | None] = mapped_column(String(300))
    recurring_dates: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    __table_args__ = (
        Index('ix_events_category_date', 'category', 'date'),
    )

    def __repr__(self):
        return f"<Event(id={self.id}, title={self.title})>"

    @property
    def expiration_date(self) -> Optional[str]:
        """Last date on which the event is still current (None: never expires)"""
        return effective_expiration(self.date, self.is_recurring, self.recurring_dates or [])

    def is_visible_on(self, today: str) -> bool:
        """Whether the event belongs in a listing on ``today`` (YYYY-MM-DD)"""
        return is_visible(self.date, self.is_recurring, self.recurring_dates or [], today)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to a JSON-ready dictionary."""
        data = self.dict()
        for key in ("created_at", "updated_at"):
            if data.get(key) is not None:
                data[key] = data[key].isoformat()
        data["recurring_dates"] = list(self.recurring_dates or [])
        return data
