"""
CommentScope Comment Ingestion Service

Responsibilities:
  - Validate the video URL before any network call
  - Return the stored analysis when the video was already ingested
  - Fetch video metadata and the full comment corpus (blocking client,
    run in the default executor)
  - Classify (heuristic, optionally LLM-enriched with fallback)
  - Replace the persisted corpus
  - Build the prefix index off-loop and swap it into the registry
  - Aggregate and save the analysis summary
  - Serialize concurrent ingestions of the same video
"""
from __future__ import annotations

import asyncio
import logging
import time
import weakref
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from commentscope.core.exceptions import NotFoundError, UpstreamFetchError, ValidationError
from commentscope.core.metrics import COMMENTS_INGESTED, INGESTION_DURATION, INGESTIONS_TOTAL
from commentscope.models.models import (
    AnalysisSummary, Comment, IngestionStage, Video,
)
from commentscope.services.comments.comment_analysis_service import (
    CommentAnalysisService, comment_analysis_service,
)
from commentscope.services.comments.comment_store import CommentStore, comment_store
from commentscope.services.comments.youtube_client import (
    YouTubeClient, extract_video_id, is_supported_url, youtube_client,
)
from commentscope.services.search.index_registry import IndexRegistry, index_registry
from commentscope.services.search.prefix_index import PrefixIndex

logger = logging.getLogger(__name__)

MESSAGE_CACHED = "Analysis already exists for this video"
MESSAGE_COMPLETED = "Video analyzed successfully"
MESSAGE_REANALYZED = "Video re-analyzed successfully"


@dataclass
class IngestionResult:
    video: Video
    analysis: AnalysisSummary
    message: str
    cached: bool = False


class CommentIngestionService:
    """
    Turns a video URL into a classified, indexed, summarized corpus.

    Collaborators are injectable; the defaults are the module singletons.
    """

    def __init__(
        self,
        store: Optional[CommentStore] = None,
        registry: Optional[IndexRegistry] = None,
        client: Optional[YouTubeClient] = None,
        analysis: Optional[CommentAnalysisService] = None,
    ):
        self.store = store if store is not None else comment_store
        self.registry = registry if registry is not None else index_registry
        self.client = client if client is not None else youtube_client
        self.analysis = analysis if analysis is not None else comment_analysis_service
        # Entries vanish once no ingestion holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    # ── Main Entry Point ─────────────────────────────────────────────────

    async def analyze_video(self, url: str, enrich: Optional[bool] = None) -> IngestionResult:
        url = (url or "").strip()
        if not is_supported_url(url):
            raise ValidationError(
                "Unsupported video URL. Expected a YouTube watch, youtu.be or shorts link.",
                details={"url": url},
            )
        platform_id = extract_video_id(url)

        async with self._lock_for(platform_id):
            cached = self._cached_result(platform_id, url)
            if cached is not None:
                INGESTIONS_TOTAL.labels(outcome="cached").inc()
                logger.info(f"Returning cached analysis for video {cached.video.id}")
                return cached

            start = time.time()
            try:
                result = await self._ingest(platform_id, url, enrich)
            except Exception:
                INGESTIONS_TOTAL.labels(outcome="failed").inc()
                raise
            finally:
                structlog.contextvars.unbind_contextvars("video_id", "stage")

            INGESTIONS_TOTAL.labels(outcome="completed").inc()
            INGESTION_DURATION.observe(time.time() - start)
            return result

    async def reanalyze_video(self, video_id: str, enrich: Optional[bool] = True) -> IngestionResult:
        """
        Re-classify an already persisted corpus and rebuild its summary.

        The comment text does not change, so the prefix index is kept.
        """
        video = self.store.get_video(video_id)
        if video is None:
            raise NotFoundError("Video not found", details={"video_id": video_id})

        async with self._lock_for(video.platform_id):
            try:
                comments = self.store.get_comments_by_video_id(video_id)
                use_llm = self.analysis.should_enrich(enrich)

                self._stage(video_id, IngestionStage.CLASSIFYING)
                await self.analysis.classify_comments(comments, enrich=use_llm)

                self._stage(video_id, IngestionStage.PERSISTING)
                comments = self.store.replace_comments(video_id, comments)

                self._stage(video_id, IngestionStage.SUMMARIZING)
                analysis = await self._summarize(video_id, comments, use_llm)

                self._stage(video_id, IngestionStage.DONE)
            finally:
                structlog.contextvars.unbind_contextvars("video_id", "stage")

        return IngestionResult(video=video, analysis=analysis, message=MESSAGE_REANALYZED)

    # ── Pipeline ─────────────────────────────────────────────────────────

    async def _ingest(self, platform_id: str, url: str, enrich: Optional[bool]) -> IngestionResult:
        existing = self.store.get_video_by_platform_id(platform_id)
        # Keep the corpus id of a video whose earlier ingestion never finished
        video_id = existing.id if existing else None

        self._stage(video_id or platform_id, IngestionStage.FETCHING)
        loop = asyncio.get_running_loop()
        try:
            fetched = await loop.run_in_executor(None, self.client.fetch_video_data, url)
        except UpstreamFetchError as e:
            self._stage(video_id or platform_id, IngestionStage.FAILED)
            logger.error(f"Fetch failed for {platform_id}: {e.message}")
            raise

        video = self._build_video(fetched.video, url, video_id)
        self.store.create_video(video)
        comments = self._build_comments(fetched.comments, video.id)

        use_llm = self.analysis.should_enrich(enrich)
        self._stage(video.id, IngestionStage.CLASSIFYING)
        await self.analysis.classify_comments(comments, enrich=use_llm)

        self._stage(video.id, IngestionStage.PERSISTING)
        comments = self.store.replace_comments(video.id, comments)
        COMMENTS_INGESTED.inc(len(comments))

        self._stage(video.id, IngestionStage.INDEXING)
        index = await loop.run_in_executor(None, PrefixIndex.from_comments, comments)
        self.registry.replace(video.id, index)

        self._stage(video.id, IngestionStage.SUMMARIZING)
        analysis = await self._summarize(video.id, comments, use_llm)

        self._stage(video.id, IngestionStage.DONE)
        logger.info(
            f"Ingestion complete for video {video.id}: {analysis.total_comments} comments, "
            f"{analysis.enrichment_percentage}% enriched"
        )
        return IngestionResult(video=video, analysis=analysis, message=MESSAGE_COMPLETED)

    async def _summarize(
        self, video_id: str, comments: List[Comment], use_llm: bool,
    ) -> AnalysisSummary:
        topics = await self.analysis.summarize_topics(comments) if use_llm else None
        summary = self.analysis.build_summary(video_id, comments, topics=topics)
        return self.store.save_analysis(summary)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _cached_result(self, platform_id: str, url: str) -> Optional[IngestionResult]:
        video = self.store.get_video_by_platform_id(platform_id) or self.store.get_video_by_url(url)
        if video is None:
            return None
        analysis = self.store.get_analysis_by_video_id(video.id)
        if analysis is None:
            return None
        return IngestionResult(video=video, analysis=analysis, message=MESSAGE_CACHED, cached=True)

    def _lock_for(self, platform_id: str) -> asyncio.Lock:
        lock = self._locks.get(platform_id)
        if lock is None:
            lock = self._locks[platform_id] = asyncio.Lock()
        return lock

    @staticmethod
    def _stage(video_id: str, stage: IngestionStage) -> None:
        structlog.contextvars.bind_contextvars(video_id=video_id, stage=stage.value)
        logger.info(f"Video {video_id}: stage -> {stage.value}")

    @staticmethod
    def _build_video(details: Dict[str, Any], url: str, video_id: Optional[str]) -> Video:
        video = Video(
            platform_id=details["platform_id"],
            url=url,
            title=details.get("title") or "",
            channel_title=details.get("channel_title") or "",
            description=details.get("description"),
            thumbnail_url=details.get("thumbnail_url"),
            view_count=details.get("view_count"),
            like_count=details.get("like_count"),
            comment_count=details.get("comment_count"),
            duration=details.get("duration"),
            published_at=details.get("published_at"),
        )
        if video_id:
            video.id = video_id
        return video

    @staticmethod
    def _build_comments(raw_comments: List[Dict[str, Any]], video_id: str) -> List[Comment]:
        now = datetime.now(timezone.utc)
        comments = []
        for raw in raw_comments:
            if not raw.get("id"):
                continue
            comments.append(Comment(
                id=raw["id"],
                video_id=video_id,
                author_display_name=raw.get("author_display_name") or "Unknown",
                author_profile_image_url=raw.get("author_profile_image_url"),
                text_display=raw.get("text_display") or "",
                text_original=raw.get("text_original") or raw.get("text_display") or "",
                like_count=raw.get("like_count") or 0,
                reply_count=raw.get("reply_count") or 0,
                published_at=raw.get("published_at") or now,
                updated_at=raw.get("updated_at"),
                parent_id=raw.get("parent_id"),
            ))
        return comments


# Module-level singleton
comment_ingestion_service = CommentIngestionService()
