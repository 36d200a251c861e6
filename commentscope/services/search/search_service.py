"""
CommentScope Search Service — filtered and paginated comment listing.

Pipeline:
1. Validate paging, filter and sort arguments (before any lookup)
2. Load the corpus from the comment store
3. Narrow by query: prefix index lookup, or substring scan if no index yet
4. Category filter
5. Sentiment filter
6. Stable sort
7. Paginate
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from commentscope.core.config import get_settings
from commentscope.core.exceptions import NotFoundError, ValidationError
from commentscope.core.metrics import SEARCHES_TOTAL
from commentscope.models.models import (
    FILTER_ALL, Comment, CommentCategory, Sentiment, SortKey,
)
from commentscope.services.comments.comment_store import CommentStore, comment_store
from commentscope.services.search.index_registry import IndexRegistry, index_registry

logger = logging.getLogger(__name__)
settings = get_settings()

CATEGORY_FILTERS = {FILTER_ALL} | {c.value for c in CommentCategory}
SENTIMENT_FILTERS = {FILTER_ALL} | {s.value for s in Sentiment}

_EPOCH = 0.0


def _published(c: Comment) -> float:
    return c.published_at.timestamp() if c.published_at else _EPOCH


# (key, descending)
SORT_KEYS: Dict[SortKey, Tuple[Callable[[Comment], float], bool]] = {
    SortKey.NEWEST: (_published, True),
    SortKey.OLDEST: (_published, False),
    SortKey.LIKES: (lambda c: c.like_count or 0, True),
    SortKey.REPLIES: (lambda c: c.reply_count or 0, True),
    SortKey.CONFIDENCE: (lambda c: c.confidence or 0.0, True),
}


@dataclass
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass
class SearchResult:
    comments: List[Comment]
    pagination: Pagination


def paginate(items: List[Comment], page: int, limit: int) -> Tuple[List[Comment], Pagination]:
    total = len(items)
    start = (page - 1) * limit
    end = start + limit
    return items[start:end], Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
        has_next=end < total,
        has_prev=page > 1,
    )


def sort_comments(comments: List[Comment], sort_by: SortKey) -> List[Comment]:
    """Stable sort: equal keys keep their incoming relative order."""
    key, descending = SORT_KEYS[sort_by]
    return sorted(comments, key=key, reverse=descending)


class SearchService:
    """Query, filter, rank and page one video's comment corpus."""

    def __init__(
        self,
        store: Optional[CommentStore] = None,
        registry: Optional[IndexRegistry] = None,
    ):
        self.store = store if store is not None else comment_store
        self.registry = registry if registry is not None else index_registry

    def search(
        self,
        video_id: str,
        query: Optional[str] = None,
        category: Optional[str] = FILTER_ALL,
        sentiment: Optional[str] = FILTER_ALL,
        sort_by: str = SortKey.NEWEST.value,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SearchResult:
        start = time.time()
        if limit is None:
            limit = settings.search_default_limit
        sort_key = self._validate(category, sentiment, sort_by, page, limit)

        if self.store.get_video(video_id) is None:
            raise NotFoundError("Video not found", details={"video_id": video_id})

        comments = self.store.get_comments_by_video_id(video_id)

        # 1. Query narrowing
        term = (query or "").strip()
        if term:
            index = self.registry.get(video_id)
            if index is not None:
                matching = index.starts_with(term)
                comments = [c for c in comments if c.id in matching]
                SEARCHES_TOTAL.labels(path="trie").inc()
            else:
                logger.info(f"No prefix index for video {video_id}, falling back to scan")
                comments = self.store.search_comments(video_id, query=term)
                SEARCHES_TOTAL.labels(path="scan").inc()
        else:
            SEARCHES_TOTAL.labels(path="none").inc()

        # 2. Filters
        if category and category != FILTER_ALL:
            comments = [c for c in comments if c.category.value == category]
        if sentiment and sentiment != FILTER_ALL:
            comments = [c for c in comments if c.sentiment and c.sentiment.value == sentiment]

        # 3. Rank + page
        comments = sort_comments(comments, sort_key)
        page_items, pagination = paginate(comments, page, limit)

        logger.debug(
            f"Search video={video_id} query={term!r} category={category} "
            f"sentiment={sentiment} sort={sort_key.value} -> {pagination.total} hits "
            f"in {(time.time() - start) * 1000:.1f}ms"
        )
        return SearchResult(comments=page_items, pagination=pagination)

    def questions(
        self,
        video_id: str,
        sort_by: str = SortKey.NEWEST.value,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SearchResult:
        return self.search(
            video_id,
            category=CommentCategory.QUESTION.value,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )

    # ── Validation ───────────────────────────────────────────────────────

    @staticmethod
    def _validate(
        category: Optional[str],
        sentiment: Optional[str],
        sort_by: str,
        page: int,
        limit: int,
    ) -> SortKey:
        if not isinstance(page, int) or page < 1:
            raise ValidationError("page must be an integer >= 1", details={"page": page})
        if not isinstance(limit, int) or not 1 <= limit <= settings.search_max_limit:
            raise ValidationError(
                f"limit must be between 1 and {settings.search_max_limit}",
                details={"limit": limit},
            )
        if category and category not in CATEGORY_FILTERS:
            raise ValidationError(
                f"Unknown category: {category}",
                details={"allowed": sorted(CATEGORY_FILTERS)},
            )
        if sentiment and sentiment not in SENTIMENT_FILTERS:
            raise ValidationError(
                f"Unknown sentiment: {sentiment}",
                details={"allowed": sorted(SENTIMENT_FILTERS)},
            )
        try:
            return SortKey(sort_by)
        except ValueError:
            raise ValidationError(
                f"Unknown sort key: {sort_by}",
                details={"allowed": [k.value for k in SortKey]},
            )


# Module-level singleton
search_service = SearchService()
