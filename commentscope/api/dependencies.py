"""
FastAPI dependency providers.

Routes resolve services through these so tests can swap them with
app.dependency_overrides.
"""
from __future__ import annotations

from commentscope.services.comments.comment_ingestion_service import (
    CommentIngestionService, comment_ingestion_service,
)
from commentscope.services.comments.comment_store import CommentStore, comment_store
from commentscope.services.search.search_service import SearchService, search_service


def get_store() -> CommentStore:
    return comment_store


def get_search_service() -> SearchService:
    return search_service


def get_ingestion_service() -> CommentIngestionService:
    return comment_ingestion_service
