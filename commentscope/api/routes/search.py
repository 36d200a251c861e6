"""
CommentScope API — Search routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from commentscope.api.dependencies import get_search_service
from commentscope.schemas.schemas import SearchRequest, SearchResponse
from commentscope.services.search.search_service import SearchService

router = APIRouter(tags=["Search"])


@router.post("/search", response_model=SearchResponse)
async def search_comments(
    request: SearchRequest,
    search: SearchService = Depends(get_search_service),
):
    """Prefix search + category / sentiment filters + sort + pagination."""
    result = search.search(
        request.video_id,
        query=request.query,
        category=request.category,
        sentiment=request.sentiment,
        sort_by=request.sort_by,
        page=request.page,
        limit=request.limit,
    )
    return SearchResponse.model_validate(result)
