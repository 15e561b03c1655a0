from .event import (
    EventBase,
    EventCreate,
    EventResponse,
    EventEnvelope,
    EventListResponse,
)
from .analysis import (
    ImageAnalysisRequest,
    VisionAnalysis,
    AnalysisMetadata,
    ImageAnalysisResponse,
)

__all__ = [
    "EventBase",
    "EventCreate",
    "EventResponse",
    "EventEnvelope",
    "EventListResponse",
    "ImageAnalysisRequest",
    "VisionAnalysis",
    "AnalysisMetadata",
    "ImageAnalysisResponse",
]
