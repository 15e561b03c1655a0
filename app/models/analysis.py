from typing import Dict, Any
from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base

class EventAnalysis(Base):
    """Stored result of a flyer analysis"""

    __tablename__ = "event_analyses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    image_url: Mapped[str] = mapped_column(String(2000), nullable=False)  # "base64_data" for inline images
    analysis: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    analysis_metadata: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self):
        return f"<EventAnalysis(id={self.id}, image_url={self.image_url[:40]})>"
