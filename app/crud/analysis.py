from sqlalchemy.ext.asyncio import AsyncSession

from app.models.analysis import EventAnalysis
from app.schemas.analysis import AnalysisMetadata, VisionAnalysis

async def create_analysis(
    db: AsyncSession,
    image: str,
    analysis: VisionAnalysis,
    metadata: AnalysisMetadata
) -> EventAnalysis:
    """Store an analysis; inline images are recorded as ``base64_data``"""
    db_analysis = EventAnalysis(
        image_url=image if image.startswith("http") else "base64_data",
        analysis=analysis.model_dump(mode="json"),
        analysis_metadata=metadata.model_dump(mode="json"),
    )
    db.add(db_analysis)
    await db.commit()
    await db.refresh(db_analysis)
    return db_analysis
