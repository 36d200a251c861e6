"""
CommentScope Comment Analysis Service

Classifies a corpus and aggregates it:
  1. Heuristic classification of every comment (always available)
  2. Optional LLM enrichment, paced, with per-comment heuristic fallback
  3. Write category / sentiment / confidence / reasoning / topics back
  4. Build the AnalysisSummary: counts per category and sentiment,
     top keywords, enrichment share, optional AI topics + summary
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from commentscope.core.config import get_settings
from commentscope.ml.nlp.comment_classifier import Classification, classify
from commentscope.ml.nlp.enrichment_service import (
    EnrichmentService, TopicSummary, enrichment_service,
)
from commentscope.ml.nlp.keywords import extract_top_words
from commentscope.models.models import (
    AnalysisSummary, Comment, CommentCategory, Sentiment,
)

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class ClassificationReport:
    total: int = 0
    enriched: int = 0
    fallback: int = 0

    @property
    def enrichment_percentage(self) -> float:
        return round(self.enriched / self.total * 100, 1) if self.total else 0.0


class CommentAnalysisService:
    """Classification and aggregation over one corpus."""

    def __init__(self, enrichment: Optional[EnrichmentService] = None):
        self.enrichment = enrichment if enrichment is not None else enrichment_service

    def should_enrich(self, enrich: Optional[bool]) -> bool:
        wanted = settings.enrichment_enabled if enrich is None else enrich
        return wanted and self.enrichment.available

    # ── Classification ───────────────────────────────────────────────────

    async def classify_comments(
        self, comments: List[Comment], enrich: bool = False,
    ) -> ClassificationReport:
        """Assign a classification to every comment in place."""
        report = ClassificationReport(total=len(comments))
        if not comments:
            return report

        if enrich:
            batch = await self.enrichment.analyze_batch(
                [(c.id, c.text_display) for c in comments]
            )
            for comment in comments:
                result = batch.results.get(comment.id) or classify(comment.text_display)
                self._apply(comment, result)
            report.enriched = batch.enriched
            report.fallback = report.total - batch.enriched
        else:
            for comment in comments:
                self._apply(comment, classify(comment.text_display))
            report.fallback = report.total

        logger.info(
            f"Classified {report.total} comments "
            f"(enriched={report.enriched}, heuristic={report.fallback})"
        )
        return report

    @staticmethod
    def _apply(comment: Comment, result: Classification) -> None:
        comment.category = result.category
        comment.sentiment = result.sentiment
        comment.confidence = result.confidence
        comment.reasoning = result.reasoning
        comment.topics = list(result.topics) or None
        comment.is_ai_analyzed = result.is_ai_analyzed

    async def summarize_topics(self, comments: List[Comment]) -> Optional[TopicSummary]:
        if not comments:
            return None
        return await self.enrichment.generate_topic_summary(
            [c.text_display for c in comments]
        )

    # ── Aggregation ──────────────────────────────────────────────────────

    def build_summary(
        self,
        video_id: str,
        comments: List[Comment],
        topics: Optional[TopicSummary] = None,
        top_words_limit: Optional[int] = None,
    ) -> AnalysisSummary:
        """
        Aggregate a classified corpus.

        Counts come from the same list as total_comments, so the category
        counts always sum to the total.
        """
        category_counts = {c.value: 0 for c in CommentCategory}
        sentiment_counts = {s.value: 0 for s in Sentiment}
        enriched = 0

        for comment in comments:
            category_counts[comment.category.value] += 1
            sentiment = comment.sentiment or Sentiment.NEUTRAL
            sentiment_counts[sentiment.value] += 1
            if comment.is_ai_analyzed:
                enriched += 1

        total = len(comments)
        limit = top_words_limit if top_words_limit is not None else settings.top_words_limit

        return AnalysisSummary(
            video_id=video_id,
            total_comments=total,
            category_counts=category_counts,
            sentiment_counts=sentiment_counts,
            top_words=extract_top_words(comments, limit),
            top_topics=topics.topics if topics else None,
            ai_summary=topics.summary if topics else None,
            enriched_count=enriched,
            enrichment_percentage=round(enriched / total * 100, 1) if total else 0.0,
            is_ai_analyzed=enriched > 0,
        )


# Module-level singleton
comment_analysis_service = CommentAnalysisService()
