"""
API tests through FastAPI's TestClient with isolated services.
"""
import pytest
from fastapi.testclient import TestClient

from commentscope.api.dependencies import get_ingestion_service, get_search_service, get_store
from commentscope.main import app
from commentscope.ml.nlp.enrichment_service import EnrichmentService
from commentscope.services.comments.comment_analysis_service import CommentAnalysisService
from commentscope.services.comments.comment_ingestion_service import CommentIngestionService
from commentscope.services.search.search_service import SearchService
from tests.conftest import FakeClient, make_video

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture
def api(settings, store, registry):
    ingestion = CommentIngestionService(
        store=store,
        registry=registry,
        client=FakeClient(),
        analysis=CommentAnalysisService(enrichment=EnrichmentService(settings=settings)),
    )
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_search_service] = lambda: SearchService(store=store, registry=registry)
    app.dependency_overrides[get_ingestion_service] = lambda: ingestion
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _analyze(api):
    response = api.post("/api/analyze", json={"url": URL})
    assert response.status_code == 200
    return response.json()


class TestMeta:

    def test_root(self, api):
        body = api.get("/").json()
        assert body["name"] == "CommentScope"
        assert "question" in body["categories"]

    def test_health(self, api):
        assert api.get("/health").json()["status"] == "healthy"

    def test_metrics(self, api):
        response = api.get("/metrics/")
        assert response.status_code == 200
        assert "commentscope_searches_total" in response.text


class TestAnalyze:

    def test_camel_case_payload(self, api):
        body = _analyze(api)
        assert body["message"] == "Video analyzed successfully"
        assert body["video"]["platformId"] == "dQw4w9WgXcQ"
        assert body["video"]["channelTitle"] == "Rick Astley"
        assert body["analysis"]["totalComments"] == 4
        assert body["analysis"]["categoryCounts"]["question"] == 1
        assert "topWords" in body["analysis"]

    def test_cached(self, api):
        _analyze(api)
        body = _analyze(api)
        assert body["message"] == "Analysis already exists for this video"
        assert body["cached"] is True

    def test_unsupported_url(self, api):
        response = api.post("/api/analyze", json={"url": "https://vimeo.com/1"})
        assert response.status_code == 400
        assert response.json()["message"].startswith("Unsupported video URL")

    def test_malformed_url(self, api):
        assert api.post("/api/analyze", json={"url": "ftp://x"}).status_code == 422
        assert api.post("/api/analyze", json={}).status_code == 422


class TestSearch:

    def test_prefix_search(self, api):
        video_id = _analyze(api)["video"]["id"]
        response = api.post("/api/search", json={"videoId": video_id, "query": "inst"})
        assert response.status_code == 200
        body = response.json()
        assert [c["id"] for c in body["comments"]] == ["c1"]
        assert body["comments"][0]["category"] == "question"
        assert body["pagination"] == {
            "page": 1, "limit": 10, "total": 1, "totalPages": 1,
            "hasNext": False, "hasPrev": False,
        }

    def test_filters(self, api):
        video_id = _analyze(api)["video"]["id"]
        body = api.post("/api/search", json={
            "videoId": video_id, "category": "joke", "sortBy": "likes",
        }).json()
        assert [c["id"] for c in body["comments"]] == ["c2"]
        assert body["comments"][0]["authorDisplayName"] == "John Smith"

    def test_unknown_video(self, api):
        response = api.post("/api/search", json={"videoId": "missing"})
        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"

    def test_invalid_category(self, api):
        video_id = _analyze(api)["video"]["id"]
        response = api.post("/api/search", json={"videoId": video_id, "category": "memes"})
        assert response.status_code == 400
        assert "allowed" in response.json()["details"]

    def test_limit_out_of_range(self, api):
        response = api.post("/api/search", json={"videoId": "v", "limit": 500})
        assert response.status_code == 400
        assert response.json()["details"] == {"limit": 500}


class TestVideos:

    def test_list(self, api):
        assert api.get("/api/videos").json() == []
        _analyze(api)
        videos = api.get("/api/videos").json()
        assert [v["platformId"] for v in videos] == ["dQw4w9WgXcQ"]

    def test_list_skips_videos_without_analysis(self, api, store):
        store.create_video(make_video())
        assert api.get("/api/videos").json() == []
        _analyze(api)
        assert [v["platformId"] for v in api.get("/api/videos").json()] == ["dQw4w9WgXcQ"]

    def test_analysis(self, api):
        video_id = _analyze(api)["video"]["id"]
        body = api.get(f"/api/videos/{video_id}/analysis").json()
        assert body["video"]["id"] == video_id
        assert body["analysis"]["videoId"] == video_id

    def test_analysis_not_found(self, api):
        assert api.get("/api/videos/missing/analysis").status_code == 404

    def test_questions(self, api):
        video_id = _analyze(api)["video"]["id"]
        body = api.get(f"/api/videos/{video_id}/questions", params={"limit": 5}).json()
        assert [c["id"] for c in body["comments"]] == ["c1"]
        assert body["pagination"]["limit"] == 5

    def test_questions_limit_uses_search_bounds(self, api):
        video_id = _analyze(api)["video"]["id"]
        response = api.get(f"/api/videos/{video_id}/questions", params={"limit": 500})
        assert response.status_code == 400
        body = api.get(f"/api/videos/{video_id}/questions").json()
        assert body["pagination"]["limit"] == 10

    def test_reanalyze(self, api):
        video_id = _analyze(api)["video"]["id"]
        response = api.post(f"/api/videos/{video_id}/reanalyze", params={"enrich": "false"})
        assert response.status_code == 200
        assert response.json()["message"] == "Video re-analyzed successfully"

    def test_reanalyze_not_found(self, api):
        assert api.post("/api/videos/missing/reanalyze").status_code == 404
