"""
Shared fixtures: comment factories and fresh, isolated service graphs.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import MagicMock

import pytest

from commentscope.core.config import Settings
from commentscope.models.models import Comment, CommentCategory, Sentiment, Video
from commentscope.services.comments.comment_store import MemoryCommentStore
from commentscope.services.comments.youtube_client import YouTubeClient
from commentscope.services.search.index_registry import IndexRegistry

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_comment(
    comment_id: str,
    text: str = "",
    video_id: str = "vid",
    author: str = "Someone",
    minutes: int = 0,
    likes: int = 0,
    replies: int = 0,
    category: CommentCategory = CommentCategory.DISCUSSION,
    sentiment: Optional[Sentiment] = Sentiment.NEUTRAL,
    confidence: Optional[float] = 30.0,
) -> Comment:
    return Comment(
        id=comment_id,
        video_id=video_id,
        author_display_name=author,
        text_display=text,
        text_original=text,
        published_at=BASE_TIME + timedelta(minutes=minutes),
        like_count=likes,
        reply_count=replies,
        category=category,
        sentiment=sentiment,
        confidence=confidence,
    )


def make_video(video_id: str = "vid", platform_id: str = "dQw4w9WgXcQ") -> Video:
    return Video(
        id=video_id,
        platform_id=platform_id,
        url=f"https://www.youtube.com/watch?v={platform_id}",
        title="Test video",
        channel_title="Test channel",
        comment_count=0,
    )


@pytest.fixture
def settings():
    return Settings(
        youtube_api_key="test-key",
        openrouter_api_key="",
        youtube_page_delay=0.0,
        enrichment_call_delay=0.0,
        enrichment_batch_pause=0.0,
        enrichment_backoff_base=0.0,
    )


@pytest.fixture
def store():
    return MemoryCommentStore()


@pytest.fixture
def registry():
    return IndexRegistry()


def raw_comment(comment_id, text, author="Viewer", parent_id=None):
    """A comment dict as normalized by YouTubeClient."""
    return {
        "id": comment_id,
        "author_display_name": author,
        "author_profile_image_url": None,
        "text_display": text,
        "text_original": text,
        "like_count": 1,
        "reply_count": 0,
        "published_at": BASE_TIME,
        "updated_at": None,
        "parent_id": parent_id,
    }


class FakeClient(YouTubeClient):
    """YouTubeClient with canned API results; records calls."""

    def __init__(self, comments=None, error=None):
        super().__init__(settings=Settings(youtube_api_key="test-key"), session=MagicMock())
        self.comments = comments if comments is not None else [
            raw_comment("c1", "How do I install this??"),
            raw_comment("c2", "LOLOL this is hilarious bro", author="John Smith"),
            raw_comment("c3", "I love this so much, thank you!"),
            raw_comment("c3.r1", "helpful reply", parent_id="c3"),
        ]
        self.error = error
        self.detail_calls = 0
        self.comment_calls = 0

    def get_video_details(self, platform_id):
        self.detail_calls += 1
        return {
            "platform_id": platform_id,
            "title": "Never Gonna Give You Up",
            "channel_title": "Rick Astley",
            "comment_count": len(self.comments),
        }

    def get_video_comments(self, platform_id):
        self.comment_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.comments), 1
