"""
CommentScope API — Analysis routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from commentscope.api.dependencies import get_ingestion_service
from commentscope.schemas.schemas import AnalyzeRequest, AnalyzeResponse
from commentscope.services.comments.comment_ingestion_service import CommentIngestionService

router = APIRouter(tags=["Analysis"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_video(
    request: AnalyzeRequest,
    ingestion: CommentIngestionService = Depends(get_ingestion_service),
):
    """
    Fetch, classify, index and summarize every comment of a video.

    A video that was already analyzed returns its stored analysis.
    """
    result = await ingestion.analyze_video(request.url, enrich=request.enrich)
    return AnalyzeResponse.model_validate(result)
