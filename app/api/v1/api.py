from fastapi import APIRouter

from app.api.v1.endpoints import analysis, events

api_router = APIRouter()

# Include all route modules
api_router.include_router(analysis.router)
api_router.include_router(events.router)
