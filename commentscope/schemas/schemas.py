"""
CommentScope API Schemas — Pydantic v2 models for request/response validation.

Wire format is camelCase; Python attributes stay snake_case. Responses are
built from the domain dataclasses with from_attributes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from commentscope.models.models import FILTER_ALL, CommentCategory, Sentiment, SortKey


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ═══════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════

class AnalyzeRequest(CamelModel):
    url: str = Field(..., min_length=1, max_length=2048)
    enrich: Optional[bool] = None

    @field_validator("url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        v = v.strip()
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("url must be an http(s) URL")
        return v


class SearchRequest(CamelModel):
    video_id: str = Field(..., min_length=1)
    query: Optional[str] = Field(None, max_length=256)
    category: str = FILTER_ALL
    sentiment: str = FILTER_ALL
    sort_by: str = SortKey.NEWEST.value
    page: int = Field(1, ge=1)
    limit: Optional[int] = None


# ═══════════════════════════════════════════════════════════════════════
# Entities
# ═══════════════════════════════════════════════════════════════════════

class VideoSchema(CamelModel):
    id: str
    platform_id: str
    url: str
    title: str
    channel_title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    view_count: Optional[int] = None
    like_count: Optional[int] = None
    comment_count: Optional[int] = None
    duration: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: datetime


class CommentSchema(CamelModel):
    id: str
    video_id: str
    author_display_name: str
    author_profile_image_url: Optional[str] = None
    text_display: str
    text_original: str
    like_count: int = 0
    reply_count: int = 0
    published_at: datetime
    updated_at: Optional[datetime] = None
    parent_id: Optional[str] = None
    category: CommentCategory
    sentiment: Optional[Sentiment] = None
    topics: Optional[List[str]] = None
    confidence: Optional[float] = None
    reasoning: Optional[str] = None
    is_ai_analyzed: bool = False


class WordCountSchema(CamelModel):
    word: str
    count: int


class AnalysisSchema(CamelModel):
    id: str
    video_id: str
    total_comments: int
    category_counts: Dict[str, int]
    sentiment_counts: Dict[str, int]
    top_words: List[WordCountSchema]
    top_topics: Optional[List[str]] = None
    ai_summary: Optional[str] = None
    enriched_count: int = 0
    enrichment_percentage: float = 0.0
    is_ai_analyzed: bool = False
    created_at: datetime


class PaginationSchema(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


# ═══════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════

class SearchResponse(CamelModel):
    comments: List[CommentSchema]
    pagination: PaginationSchema


class VideoAnalysisResponse(CamelModel):
    video: VideoSchema
    analysis: AnalysisSchema


class AnalyzeResponse(VideoAnalysisResponse):
    message: str
    cached: bool = False
