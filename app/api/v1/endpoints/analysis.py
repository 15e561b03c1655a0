from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import analysis_logger as logger
from app.crud.analysis import create_analysis
from app.db.database import get_db
from app.schemas.analysis import ImageAnalysisRequest, ImageAnalysisResponse
from app.services.analysis import sanitize_analysis
from app.services.vision import VisionClient, get_vision_client, validate_image_data
from app.utils.dates import local_today

router = APIRouter(
    prefix="/events",
    tags=["Analysis"],
    responses={
        400: {"description": "Missing or malformed image"},
        502: {"description": "Vision model call failed"},
        503: {"description": "Vision model not configured"}
    }
)

@router.post(
    "/analyze-image",
    response_model=ImageAnalysisResponse,
    summary="Analyze an event flyer",
    description="""
    Extract event details from a flyer image (http(s) URL or
    `data:image/...` base64 payload).

    The model only recognizes the date pattern; the concrete
    `recurring_dates` are computed by the server.
    """
)
async def analyze_image(
    request: ImageAnalysisRequest,
    db: AsyncSession = Depends(get_db),
    vision: VisionClient = Depends(get_vision_client)
) -> ImageAnalysisResponse:
    """Analyze a flyer and store the result."""
    validate_image_data(request.image)

    today = local_today()
    result = await vision.analyze_event_image(request.image, request.title, today)
    analysis = sanitize_analysis(result.analysis, today=today)

    # A failed save does not fail the analysis
    try:
        await create_analysis(db, request.image, analysis, result.metadata)
    except Exception as e:
        await db.rollback()
        logger.error(
            "Failed to store analysis",
            extra={"error": str(e), "error_type": e.__class__.__name__}
        )

    return ImageAnalysisResponse(analysis=analysis, metadata=result.metadata)
