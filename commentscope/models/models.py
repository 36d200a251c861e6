"""
CommentScope Domain Models.

Plain dataclasses held by the comment store. A corpus is the set of comments
sharing one video_id; its prefix index lives in the index registry.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════

class CommentCategory(str, enum.Enum):
    QUESTION = "question"
    JOKE = "joke"
    DISCUSSION = "discussion"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    SPAM = "spam"


class Sentiment(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class SortKey(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    LIKES = "likes"
    REPLIES = "replies"
    CONFIDENCE = "confidence"


class IngestionStage(str, enum.Enum):
    FETCHING = "fetching"
    CLASSIFYING = "classifying"
    PERSISTING = "persisting"
    INDEXING = "indexing"
    SUMMARIZING = "summarizing"
    DONE = "done"
    FAILED = "failed"


# Wildcard accepted by category / sentiment filters
FILTER_ALL = "all"


# ═══════════════════════════════════════════════════════════════════════
# Entities
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Video:
    platform_id: str
    url: str
    title: str
    channel_title: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    view_count: Optional[int] = None
    like_count: Optional[int] = None
    comment_count: Optional[int] = None
    duration: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class Comment:
    """One classified comment. parent_id is a back-reference, not ownership."""
    id: str
    video_id: str
    author_display_name: str
    text_display: str
    text_original: str
    published_at: datetime
    category: CommentCategory = CommentCategory.DISCUSSION
    author_profile_image_url: Optional[str] = None
    like_count: int = 0
    reply_count: int = 0
    updated_at: Optional[datetime] = None
    parent_id: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    topics: Optional[List[str]] = None
    confidence: Optional[float] = None   # 0..100
    reasoning: Optional[str] = None
    is_ai_analyzed: bool = False


@dataclass
class WordCount:
    word: str
    count: int


@dataclass
class AnalysisSummary:
    video_id: str
    total_comments: int
    category_counts: Dict[str, int]
    sentiment_counts: Dict[str, int]
    top_words: List[WordCount]
    top_topics: Optional[List[str]] = None
    ai_summary: Optional[str] = None
    enriched_count: int = 0
    enrichment_percentage: float = 0.0
    is_ai_analyzed: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class FetchStats:
    reported_count: int
    fetched_count: int
    pages_fetched: int

    @property
    def missing_count(self) -> int:
        return max(0, self.reported_count - self.fetched_count)

    @property
    def complete(self) -> bool:
        return self.fetched_count >= self.reported_count
