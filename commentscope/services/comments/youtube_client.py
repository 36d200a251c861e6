"""
CommentScope YouTube Client

Blocking client for the YouTube Data API v3:
  - Video id extraction from watch / shorts / youtu.be / embed URLs
  - Video metadata (title, channel, counts, duration, thumbnail)
  - Full commentThreads walk until no nextPageToken is returned
  - Transient 429/5xx retried by the session adapter with backoff
  - Polite inter-page delay

The orchestrator runs these calls in the default executor.
"""
from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from commentscope.core.config import Settings, get_settings
from commentscope.core.exceptions import (
    CommentsUnavailableError, UpstreamFetchError, ValidationError, VideoNotFoundError,
)
from commentscope.models.models import FetchStats

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?(?:\S*&)?v=|youtu\.be/|youtube\.com/shorts/)([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/v/([a-zA-Z0-9_-]{11})"),
]

# Shapes accepted for ingestion requests
SUPPORTED_URL_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?|youtu\.be/|youtube\.com/shorts/)", re.I,
)


def extract_video_id(url: str) -> Optional[str]:
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    return None


def is_supported_url(url: str) -> bool:
    return bool(SUPPORTED_URL_PATTERN.search(url or "")) and extract_video_id(url) is not None


def parse_timestamp(ts) -> Optional[datetime]:
    if ts is None:
        return None
    if isinstance(ts, (int, float)):
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    if isinstance(ts, str):
        try:
            return datetime.fromisoformat(ts.replace("Z", "+00:00"))
        except (ValueError, TypeError):
            return None
    return None


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass
class FetchResult:
    video: Dict[str, Any]
    comments: List[Dict[str, Any]]
    stats: FetchStats


class YouTubeClient:
    """Thin YouTube Data API v3 client returning normalized dicts."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or get_settings()
        self.session = session or self._build_session()

    def _build_session(self) -> requests.Session:
        retry = Retry(
            total=self.settings.youtube_retry_total,
            backoff_factor=self.settings.youtube_retry_backoff,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        session = requests.Session()
        session.mount("https://", HTTPAdapter(max_retries=retry))
        session.mount("http://", HTTPAdapter(max_retries=retry))
        return session

    # ── Entry Point ──────────────────────────────────────────────────────

    def fetch_video_data(self, url: str) -> FetchResult:
        """Video metadata plus the full comment walk for one URL."""
        platform_id = extract_video_id(url)
        if not platform_id:
            raise ValidationError("Invalid YouTube URL", details={"url": url})

        details = self.get_video_details(platform_id)
        comments, pages = self.get_video_comments(platform_id)
        stats = self.fetch_stats(details, comments, pages)
        return FetchResult(video=details, comments=comments, stats=stats)

    # ── Video ────────────────────────────────────────────────────────────

    def get_video_details(self, platform_id: str) -> Dict[str, Any]:
        data = self._get("videos", {
            "part": "snippet,contentDetails,statistics",
            "id": platform_id,
        })
        items = data.get("items") or []
        if not items:
            raise VideoNotFoundError("Video not found", details={"platform_id": platform_id})

        video = items[0]
        snippet = video.get("snippet", {})
        stats = video.get("statistics", {})
        thumbs = snippet.get("thumbnails", {})
        thumbnail = next(
            (thumbs[k]["url"] for k in ("high", "medium", "default") if thumbs.get(k)),
            None,
        )
        return {
            "platform_id": platform_id,
            "title": snippet.get("title", ""),
            "channel_title": snippet.get("channelTitle", ""),
            "description": snippet.get("description"),
            "thumbnail_url": thumbnail,
            "view_count": _to_int(stats.get("viewCount")),
            "like_count": _to_int(stats.get("likeCount")),
            "comment_count": _to_int(stats.get("commentCount")),
            "duration": video.get("contentDetails", {}).get("duration"),
            "published_at": parse_timestamp(snippet.get("publishedAt")),
        }

    # ── Comments ─────────────────────────────────────────────────────────

    def get_video_comments(self, platform_id: str) -> Tuple[List[Dict[str, Any]], int]:
        """
        Walk every commentThreads page for a video.

        Returns (comments, pages_fetched). Top-level comments are followed by
        their inline replies. A 403 is fatal at any page; any other failure
        is fatal on the first page and ends the walk early afterwards.
        """
        comments: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        pages = 0
        max_pages = self.settings.youtube_max_pages

        logger.info(f"Fetching comments for video {platform_id}")

        while True:
            if max_pages and pages >= max_pages:
                logger.info(f"Page cap reached for {platform_id} after {pages} pages")
                break

            params = {
                "part": "snippet,replies",
                "videoId": platform_id,
                "maxResults": self.settings.youtube_page_size,
                "order": "time",
            }
            if page_token:
                params["pageToken"] = page_token

            try:
                data = self._get("commentThreads", params)
            except CommentsUnavailableError:
                raise
            except UpstreamFetchError as e:
                if pages == 0:
                    raise
                logger.warning(
                    f"Comment page {pages + 1} failed for {platform_id}, "
                    f"keeping {len(comments)} comments fetched so far: {e.message}"
                )
                break

            pages += 1
            items = data.get("items") or []
            if not items:
                logger.info(f"Page {pages}: no more comments for {platform_id}")
                break

            for item in items:
                comments.extend(self._normalize_thread(item))

            logger.debug(f"Page {pages}: total {len(comments)} comments for {platform_id}")

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            time.sleep(self.settings.youtube_page_delay)

        logger.info(f"Fetched {len(comments)} comments for {platform_id} from {pages} pages")
        return comments, pages

    def _normalize_thread(self, item: Dict[str, Any]) -> List[Dict[str, Any]]:
        snippet = item.get("snippet", {})
        top = snippet.get("topLevelComment", {})
        top_id = top.get("id")
        out = [self._normalize_comment(
            top, reply_count=_to_int(snippet.get("totalReplyCount")), parent_id=None,
        )]
        for reply in (item.get("replies") or {}).get("comments", []):
            out.append(self._normalize_comment(reply, reply_count=0, parent_id=top_id))
        return out

    @staticmethod
    def _normalize_comment(
        raw: Dict[str, Any], reply_count: int, parent_id: Optional[str],
    ) -> Dict[str, Any]:
        s = raw.get("snippet", {})
        return {
            "id": raw.get("id"),
            "author_display_name": s.get("authorDisplayName", "Unknown"),
            "author_profile_image_url": s.get("authorProfileImageUrl"),
            "text_display": s.get("textDisplay", ""),
            "text_original": s.get("textOriginal", s.get("textDisplay", "")),
            "like_count": max(0, _to_int(s.get("likeCount"))),
            "reply_count": max(0, reply_count),
            "published_at": parse_timestamp(s.get("publishedAt")),
            "updated_at": parse_timestamp(s.get("updatedAt")),
            "parent_id": parent_id or s.get("parentId"),
        }

    # ── Stats ────────────────────────────────────────────────────────────

    @staticmethod
    def fetch_stats(details: Dict[str, Any], comments: List[Dict], pages: int) -> FetchStats:
        """Compare fetched vs reported counts. A shortfall is logged, not raised."""
        stats = FetchStats(
            reported_count=details.get("comment_count") or 0,
            fetched_count=len(comments),
            pages_fetched=pages,
        )
        if stats.complete:
            logger.info(
                f"All available comments fetched for {details.get('platform_id')}: "
                f"{stats.fetched_count}/{stats.reported_count}"
            )
        else:
            pct = stats.missing_count / max(stats.reported_count, 1) * 100
            logger.warning(
                f"Partial comment fetch for {details.get('platform_id')}: "
                f"fetched={stats.fetched_count} reported={stats.reported_count} "
                f"missing={stats.missing_count} ({pct:.1f}%). Private, deleted or "
                f"held comments are not returned by the API."
            )
        return stats

    # ── HTTP ─────────────────────────────────────────────────────────────

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.settings.youtube_api_key:
            raise UpstreamFetchError(
                "YouTube API key is not configured. Set YOUTUBE_API_KEY or GOOGLE_API_KEY."
            )

        url = f"{self.settings.youtube_base_url.rstrip('/')}/{endpoint}"
        try:
            response = self.session.get(
                url,
                params={**params, "key": self.settings.youtube_api_key},
                timeout=self.settings.youtube_request_timeout,
            )
        except requests.exceptions.RequestException as e:
            # Omit the URL: it carries the API key
            raise UpstreamFetchError(
                f"YouTube API request failed: {type(e).__name__}",
                details={"endpoint": endpoint},
            ) from e

        status = response.status_code
        if status == 403 and endpoint == "commentThreads":
            raise CommentsUnavailableError(
                "Comments are disabled for this video or API quota exceeded",
                details={"endpoint": endpoint},
            )
        if status == 404:
            raise VideoNotFoundError("Video not found", details={"endpoint": endpoint})
        if status >= 400:
            raise UpstreamFetchError(
                f"YouTube API error: {status} {response.reason}",
                details={"endpoint": endpoint, "status": status},
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFetchError(
                "YouTube API returned a non-JSON body", details={"endpoint": endpoint},
            ) from e


# Module-level singleton
youtube_client = YouTubeClient()
