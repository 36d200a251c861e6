"""
CommentScope Comment Store

Key-based CRUD over videos, comments and analyses plus a video -> comments
index. MemoryCommentStore keeps everything in process memory; a durable
backend only has to implement CommentStore.

Corpora are replaced whole, never patched: replace_comments() swaps the
video's comment list and id map in one step.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from commentscope.models.models import FILTER_ALL, AnalysisSummary, Comment, Video

logger = logging.getLogger(__name__)


class CommentStore(ABC):

    # ── Videos ───────────────────────────────────────────────────────────

    @abstractmethod
    def get_video(self, video_id: str) -> Optional[Video]: ...

    @abstractmethod
    def get_video_by_url(self, url: str) -> Optional[Video]: ...

    @abstractmethod
    def get_video_by_platform_id(self, platform_id: str) -> Optional[Video]: ...

    @abstractmethod
    def create_video(self, video: Video) -> Video: ...

    @abstractmethod
    def list_videos(self) -> List[Video]: ...

    # ── Comments ─────────────────────────────────────────────────────────

    @abstractmethod
    def get_comment(self, comment_id: str) -> Optional[Comment]: ...

    @abstractmethod
    def get_comments_by_video_id(self, video_id: str) -> List[Comment]: ...

    @abstractmethod
    def create_comments(self, comments: List[Comment]) -> List[Comment]: ...

    @abstractmethod
    def replace_comments(self, video_id: str, comments: List[Comment]) -> List[Comment]: ...

    @abstractmethod
    def search_comments(
        self,
        video_id: str,
        query: Optional[str] = None,
        category: Optional[str] = None,
        sentiment: Optional[str] = None,
    ) -> List[Comment]: ...

    # ── Analyses ─────────────────────────────────────────────────────────

    @abstractmethod
    def get_analysis_by_video_id(self, video_id: str) -> Optional[AnalysisSummary]: ...

    @abstractmethod
    def save_analysis(self, analysis: AnalysisSummary) -> AnalysisSummary: ...


class MemoryCommentStore(CommentStore):
    """Process-memory store. Nothing survives a restart."""

    def __init__(self) -> None:
        self._videos: Dict[str, Video] = {}
        self._videos_by_url: Dict[str, Video] = {}
        self._videos_by_platform_id: Dict[str, Video] = {}
        self._comments: Dict[str, Dict[str, Comment]] = {}   # video_id -> id -> comment
        self._comments_by_video_id: Dict[str, List[Comment]] = {}
        self._analyses: Dict[str, AnalysisSummary] = {}

    # ── Videos ───────────────────────────────────────────────────────────

    def get_video(self, video_id: str) -> Optional[Video]:
        return self._videos.get(video_id)

    def get_video_by_url(self, url: str) -> Optional[Video]:
        return self._videos_by_url.get(url)

    def get_video_by_platform_id(self, platform_id: str) -> Optional[Video]:
        return self._videos_by_platform_id.get(platform_id)

    def create_video(self, video: Video) -> Video:
        self._videos[video.id] = video
        self._videos_by_url[video.url] = video
        self._videos_by_platform_id[video.platform_id] = video
        return video

    def list_videos(self) -> List[Video]:
        return list(self._videos.values())

    # ── Comments ─────────────────────────────────────────────────────────

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        for by_id in self._comments.values():
            comment = by_id.get(comment_id)
            if comment is not None:
                return comment
        return None

    def get_comments_by_video_id(self, video_id: str) -> List[Comment]:
        return list(self._comments_by_video_id.get(video_id, []))

    def create_comments(self, comments: List[Comment]) -> List[Comment]:
        for comment in comments:
            by_id = self._comments.setdefault(comment.video_id, {})
            ordered = self._comments_by_video_id.setdefault(comment.video_id, [])
            if comment.id in by_id:
                # Same upstream id twice in one corpus: keep the latest record
                ordered[ordered.index(by_id[comment.id])] = comment
            else:
                ordered.append(comment)
            by_id[comment.id] = comment
        return comments

    def replace_comments(self, video_id: str, comments: List[Comment]) -> List[Comment]:
        by_id: Dict[str, Comment] = {}
        ordered: List[Comment] = []
        for comment in comments:
            comment.video_id = video_id
            if comment.id in by_id:
                ordered[ordered.index(by_id[comment.id])] = comment
            else:
                ordered.append(comment)
            by_id[comment.id] = comment
        self._comments[video_id] = by_id
        self._comments_by_video_id[video_id] = ordered
        logger.debug(f"Corpus {video_id} replaced with {len(ordered)} comments")
        return list(ordered)

    def search_comments(
        self,
        video_id: str,
        query: Optional[str] = None,
        category: Optional[str] = None,
        sentiment: Optional[str] = None,
    ) -> List[Comment]:
        comments = self.get_comments_by_video_id(video_id)

        if category and category != FILTER_ALL:
            comments = [c for c in comments if c.category.value == category]

        if sentiment and sentiment != FILTER_ALL:
            comments = [c for c in comments if c.sentiment and c.sentiment.value == sentiment]

        if query and query.strip():
            comments = substring_filter(comments, query)

        return comments

    # ── Analyses ─────────────────────────────────────────────────────────

    def get_analysis_by_video_id(self, video_id: str) -> Optional[AnalysisSummary]:
        return self._analyses.get(video_id)

    def save_analysis(self, analysis: AnalysisSummary) -> AnalysisSummary:
        self._analyses[analysis.video_id] = analysis
        return analysis


def substring_filter(comments: List[Comment], query: str) -> List[Comment]:
    """Case-insensitive substring match over display text and author name."""
    term = query.lower().strip()
    return [
        c for c in comments
        if term in c.text_display.lower() or term in c.author_display_name.lower()
    ]


# Module-level singleton
comment_store = MemoryCommentStore()
