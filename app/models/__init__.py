from .base import Base
from .event import Event
from .analysis import EventAnalysis

# For convenience, export all models
__all__ = [
    "Base",
    "Event",
    "EventAnalysis",
]
