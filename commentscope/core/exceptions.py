"""
CommentScope exception types.

Every error the service surfaces to a caller derives from CommentScopeError and
carries the HTTP status it maps to. Index misses are empty results, not errors.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class CommentScopeError(Exception):
    """Base exception carrying an HTTP status and structured details."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class ValidationError(CommentScopeError):
    """Malformed input rejected before any lookup or I/O."""

    status_code = 400


class NotFoundError(CommentScopeError):
    """A video, corpus or record that does not exist."""

    status_code = 404


class UpstreamFetchError(CommentScopeError):
    """The video platform could not be reached or returned an error."""

    status_code = 502


class VideoNotFoundError(UpstreamFetchError):
    status_code = 404


class CommentsUnavailableError(UpstreamFetchError):
    """HTTP 403 from the comment endpoint: comments disabled or quota exceeded."""

    status_code = 403


class EnrichmentError(CommentScopeError):
    """LLM enrichment failed or returned an unusable payload. Always recovered."""

    status_code = 502
