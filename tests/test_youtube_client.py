"""
Unit tests for the YouTube Data API client (HTTP session mocked).
"""
from unittest.mock import MagicMock

import pytest
import requests

from commentscope.core.exceptions import (
    CommentsUnavailableError, UpstreamFetchError, ValidationError, VideoNotFoundError,
)
from commentscope.services.comments.youtube_client import (
    YouTubeClient, extract_video_id, is_supported_url, parse_timestamp,
)


def _response(status=200, payload=None, reason="OK"):
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.json.return_value = payload if payload is not None else {}
    return response


def _thread(comment_id, text, replies=()):
    item = {
        "snippet": {
            "totalReplyCount": len(replies),
            "topLevelComment": {
                "id": comment_id,
                "snippet": {
                    "authorDisplayName": f"author-{comment_id}",
                    "textDisplay": text,
                    "textOriginal": text,
                    "likeCount": 2,
                    "publishedAt": "2024-01-01T10:00:00Z",
                },
            },
        },
    }
    if replies:
        item["replies"] = {"comments": [
            {"id": rid, "snippet": {"authorDisplayName": "r", "textDisplay": rtext,
                                    "publishedAt": "2024-01-02T10:00:00Z"}}
            for rid, rtext in replies
        ]}
    return item


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(settings, session):
    return YouTubeClient(settings=settings, session=session)


class TestUrlHelpers:

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
    ])
    def test_supported(self, url):
        assert is_supported_url(url)
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize("url", [
        "https://vimeo.com/12345",
        "https://www.youtube.com/channel/abc",
        "https://www.youtube.com/watch?v=short",
        "",
    ])
    def test_unsupported(self, url):
        assert not is_supported_url(url)

    def test_embed_id_extracted_but_not_accepted_for_ingestion(self):
        url = "https://www.youtube.com/embed/dQw4w9WgXcQ"
        assert extract_video_id(url) == "dQw4w9WgXcQ"
        assert not is_supported_url(url)

    def test_parse_timestamp(self):
        ts = parse_timestamp("2024-01-01T10:00:00Z")
        assert ts.year == 2024 and ts.utcoffset().total_seconds() == 0
        assert parse_timestamp("not a date") is None
        assert parse_timestamp(None) is None


class TestVideoDetails:

    def test_normalized(self, client, session):
        session.get.return_value = _response(payload={"items": [{
            "snippet": {
                "title": "T", "channelTitle": "C", "publishedAt": "2024-01-01T00:00:00Z",
                "thumbnails": {"medium": {"url": "m.jpg"}, "default": {"url": "d.jpg"}},
            },
            "statistics": {"viewCount": "10", "likeCount": "3", "commentCount": "7"},
            "contentDetails": {"duration": "PT3M"},
        }]})
        details = client.get_video_details("dQw4w9WgXcQ")
        assert details["title"] == "T"
        assert details["channel_title"] == "C"
        assert details["thumbnail_url"] == "m.jpg"
        assert details["comment_count"] == 7
        assert details["duration"] == "PT3M"

    def test_api_key_sent(self, client, session, settings):
        session.get.return_value = _response(payload={"items": [{"snippet": {}}]})
        client.get_video_details("dQw4w9WgXcQ")
        params = session.get.call_args.kwargs["params"]
        assert params["key"] == settings.youtube_api_key
        assert params["id"] == "dQw4w9WgXcQ"

    def test_no_items(self, client, session):
        session.get.return_value = _response(payload={"items": []})
        with pytest.raises(VideoNotFoundError):
            client.get_video_details("dQw4w9WgXcQ")

    def test_missing_api_key(self, settings, session):
        settings.youtube_api_key = ""
        with pytest.raises(UpstreamFetchError):
            YouTubeClient(settings=settings, session=session).get_video_details("x")
        session.get.assert_not_called()


class TestComments:

    def test_walks_all_pages(self, client, session):
        session.get.side_effect = [
            _response(payload={"items": [_thread("a", "one", replies=[("a.r1", "reply")])],
                               "nextPageToken": "p2"}),
            _response(payload={"items": [_thread("b", "two")], "nextPageToken": "p3"}),
            _response(payload={"items": [_thread("c", "three")]}),
        ]
        comments, pages = client.get_video_comments("vid")
        assert pages == 3
        assert [c["id"] for c in comments] == ["a", "a.r1", "b", "c"]
        assert comments[0]["reply_count"] == 1
        assert comments[1]["parent_id"] == "a"
        assert session.get.call_args_list[1].kwargs["params"]["pageToken"] == "p2"

    def test_page_cap(self, client, session, settings):
        settings.youtube_max_pages = 1
        session.get.return_value = _response(
            payload={"items": [_thread("a", "one")], "nextPageToken": "more"},
        )
        comments, pages = client.get_video_comments("vid")
        assert pages == 1
        assert len(comments) == 1

    def test_comments_disabled(self, client, session):
        session.get.return_value = _response(status=403, reason="Forbidden")
        with pytest.raises(CommentsUnavailableError):
            client.get_video_comments("vid")

    def test_403_fatal_on_later_page(self, client, session):
        session.get.side_effect = [
            _response(payload={"items": [_thread("a", "one")], "nextPageToken": "p2"}),
            _response(status=403, reason="Forbidden"),
        ]
        with pytest.raises(CommentsUnavailableError):
            client.get_video_comments("vid")

    def test_first_page_failure_is_fatal(self, client, session):
        session.get.return_value = _response(status=500, reason="Server Error")
        with pytest.raises(UpstreamFetchError):
            client.get_video_comments("vid")

    def test_later_page_failure_keeps_partial(self, client, session):
        session.get.side_effect = [
            _response(payload={"items": [_thread("a", "one")], "nextPageToken": "p2"}),
            requests.exceptions.ConnectionError("boom"),
        ]
        comments, pages = client.get_video_comments("vid")
        assert [c["id"] for c in comments] == ["a"]
        assert pages == 1

    def test_network_error_message_hides_key(self, client, session, settings):
        session.get.side_effect = requests.exceptions.Timeout(
            f"timeout for url ...key={settings.youtube_api_key}"
        )
        with pytest.raises(UpstreamFetchError) as exc_info:
            client.get_video_comments("vid")
        assert settings.youtube_api_key not in exc_info.value.message


class TestFetchStats:

    def test_complete(self):
        stats = YouTubeClient.fetch_stats({"comment_count": 2}, [{}, {}], 1)
        assert stats.complete
        assert stats.missing_count == 0

    def test_partial(self):
        stats = YouTubeClient.fetch_stats({"comment_count": 10}, [{}] * 7, 1)
        assert not stats.complete
        assert stats.missing_count == 3


class TestFetchVideoData:

    def test_combines_details_comments_and_stats(self, client, session):
        session.get.side_effect = [
            _response(payload={"items": [{
                "snippet": {"title": "T", "channelTitle": "C"},
                "statistics": {"commentCount": "3"},
            }]}),
            _response(payload={"items": [_thread("a", "one", replies=[("a.r1", "r")])]}),
        ]
        result = client.fetch_video_data("https://youtu.be/dQw4w9WgXcQ")
        assert result.video["platform_id"] == "dQw4w9WgXcQ"
        assert [c["id"] for c in result.comments] == ["a", "a.r1"]
        assert result.stats.reported_count == 3
        assert result.stats.missing_count == 1
        assert result.stats.pages_fetched == 1

    def test_invalid_url(self, client, session):
        with pytest.raises(ValidationError):
            client.fetch_video_data("https://vimeo.com/1")
        session.get.assert_not_called()
