"""
CommentScope API — Video routes.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from commentscope.api.dependencies import get_ingestion_service, get_search_service, get_store
from commentscope.core.exceptions import NotFoundError
from commentscope.models.models import SortKey
from commentscope.schemas.schemas import (
    AnalysisSchema, AnalyzeResponse, SearchResponse, VideoAnalysisResponse, VideoSchema,
)
from commentscope.services.comments.comment_ingestion_service import CommentIngestionService
from commentscope.services.comments.comment_store import CommentStore
from commentscope.services.search.search_service import SearchService

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.get("", response_model=List[VideoSchema])
async def list_videos(store: CommentStore = Depends(get_store)):
    """List analyzed videos, newest first."""
    # A video whose ingestion failed partway has no analysis
    analyzed = [v for v in store.list_videos() if store.get_analysis_by_video_id(v.id) is not None]
    videos = sorted(analyzed, key=lambda v: v.created_at, reverse=True)
    return [VideoSchema.model_validate(v) for v in videos]


@router.get("/{video_id}/analysis", response_model=VideoAnalysisResponse)
async def get_video_analysis(video_id: str, store: CommentStore = Depends(get_store)):
    video = store.get_video(video_id)
    if video is None:
        raise NotFoundError("Video not found", details={"video_id": video_id})
    analysis = store.get_analysis_by_video_id(video_id)
    if analysis is None:
        raise NotFoundError("Analysis not found", details={"video_id": video_id})
    return VideoAnalysisResponse(
        video=VideoSchema.model_validate(video),
        analysis=AnalysisSchema.model_validate(analysis),
    )


@router.get("/{video_id}/questions", response_model=SearchResponse)
async def get_video_questions(
    video_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(SortKey.NEWEST.value, alias="sortBy"),
    search: SearchService = Depends(get_search_service),
):
    """Comments classified as questions, paginated like /search."""
    result = search.questions(video_id, sort_by=sort_by, page=page, limit=limit)
    return SearchResponse.model_validate(result)


@router.post("/{video_id}/reanalyze", response_model=AnalyzeResponse)
async def reanalyze_video(
    video_id: str,
    enrich: Optional[bool] = Query(True),
    ingestion: CommentIngestionService = Depends(get_ingestion_service),
):
    """Re-classify a stored corpus, enriched by default, and rebuild its summary."""
    result = await ingestion.reanalyze_video(video_id, enrich=enrich)
    return AnalyzeResponse.model_validate(result)
