from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

NOT_SPECIFIED = "No especificado"


class ImageAnalysisRequest(BaseModel):
    image: Optional[str] = Field(None, description="Image URL or data:image/... base64 payload")
    title: str = Field("Evento", max_length=200)


class VisionAnalysis(BaseModel):
    """Sanitized flyer analysis; unknown keys from the model are kept as-is."""
    model_config = ConfigDict(extra="allow")

    event_name: str = NOT_SPECIFIED
    date: str = NOT_SPECIFIED
    time: str = NOT_SPECIFIED
    end_time: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    location: str = NOT_SPECIFIED
    organizer: str = NOT_SPECIFIED
    price: str = NOT_SPECIFIED
    registration_url: str = NOT_SPECIFIED
    is_recurring: bool = False
    recurring_pattern: Optional[str] = None
    weekday_names: List[str] = []
    specific_days: List[int] = []
    month_start: Optional[str] = None
    month_end: Optional[str] = None
    recurring_dates: List[str] = []
    date_pattern: str = "none"
    confidence: str = "low"
    extracted_text: str = ""


class AnalysisMetadata(BaseModel):
    model: str
    tokens_used: int = 0
    analyzed_at: datetime


class ImageAnalysisResponse(BaseModel):
    success: bool = True
    analysis: VisionAnalysis
    metadata: AnalysisMetadata
