"""
CommentScope LLM Enrichment Service

Optional richer classification through an OpenAI-compatible chat endpoint
(OpenRouter by default):
  1. Per-comment category / sentiment / topics / confidence / reasoning
  2. Corpus-level topic list + free-text summary

Replies are untrusted: they are parsed and validated against a strict schema.
Any failure for a comment (network, rate limit after backoff, malformed JSON,
missing fields) falls back to the heuristic classifier for that comment, so
enrichment can never abort an ingestion.
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from commentscope.core.config import Settings, get_settings
from commentscope.core.exceptions import EnrichmentError
from commentscope.core.metrics import ENRICHMENT_RESULTS
from commentscope.core.retry import retry_async
from commentscope.ml.nlp.comment_classifier import Classification, classify
from commentscope.models.models import CommentCategory, Sentiment

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
)

JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.S)

FALLBACK_TOPICS = ["general discussion"]
FALLBACK_SUMMARY = "Unable to generate detailed summary"

CLASSIFY_PROMPT = """Analyze this YouTube comment and provide a JSON response with the following structure:
{{
  "category": "question|joke|discussion|positive|negative|neutral|spam",
  "sentiment": "positive|negative|neutral",
  "topics": ["topic1", "topic2"],
  "confidence": 0.85,
  "reasoning": "Brief explanation of the classification"
}}

Categories:
- question: Asking for information, help, or clarification
- joke: Humorous content, memes, sarcasm
- discussion: Thoughtful commentary or analysis
- positive: Praise, appreciation, positive feedback
- negative: Criticism, complaints, negative feedback
- neutral: Factual statements, neutral observations
- spam: Promotional content, irrelevant messages, or repetitive content

Comment to analyze: {comment}

Respond only with valid JSON:"""

SUMMARY_PROMPT = """Analyze these YouTube comments and provide a JSON response with:
{{
  "topics": ["topic1", "topic2", "topic3"],
  "summary": "Brief summary of the main discussion themes"
}}

Comments:
{comments}

Respond only with valid JSON:"""


# ── Reply schemas ────────────────────────────────────────────────────────

class EnrichmentPayload(BaseModel):
    category: CommentCategory
    sentiment: Sentiment
    topics: List[str]
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str

    @field_validator("category", mode="before")
    @classmethod
    def _map_neutral(cls, v):
        # The model may answer "neutral"; it has no category of its own here
        if isinstance(v, str) and v.strip().lower() == "neutral":
            return CommentCategory.DISCUSSION.value
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("sentiment", mode="before")
    @classmethod
    def _lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    def to_classification(self) -> Classification:
        return Classification(
            category=self.category,
            sentiment=self.sentiment,
            confidence=round(self.confidence * 100, 1),
            reasoning=self.reasoning,
            topics=[t for t in self.topics if t],
            is_ai_analyzed=True,
        )


class SummaryPayload(BaseModel):
    topics: List[str]
    summary: str


@dataclass
class TopicSummary:
    topics: List[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class BatchReport:
    results: Dict[str, Classification]
    enriched: int = 0
    fallback: int = 0


# ── Service ──────────────────────────────────────────────────────────────

class EnrichmentService:
    """Paced, validated LLM classification with heuristic fallback."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self.settings.openrouter_api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.openrouter_api_key:
                raise EnrichmentError("OpenRouter API key is not configured")
            self._client = AsyncOpenAI(
                api_key=self.settings.openrouter_api_key,
                base_url=self.settings.openrouter_base_url,
                timeout=self.settings.enrichment_timeout,
                max_retries=0,  # retried below with our own pacing
                default_headers={
                    "HTTP-Referer": self.settings.enrichment_referer,
                    "X-Title": self.settings.app_name,
                },
            )
        return self._client

    # ── Single comment ───────────────────────────────────────────────────

    async def analyze_comment(self, text: str) -> Classification:
        """Classify one comment via the LLM. Raises EnrichmentError on any failure."""
        prompt = CLASSIFY_PROMPT.format(comment=json.dumps(text or ""))
        content = await self._complete(prompt, self.settings.enrichment_max_tokens)
        try:
            payload = EnrichmentPayload.model_validate(self._parse_json(content))
        except PydanticValidationError as e:
            raise EnrichmentError(
                "Invalid response structure from enrichment model",
                details={"errors": e.errors(include_url=False)},
            ) from e
        return payload.to_classification()

    # ── Batch ────────────────────────────────────────────────────────────

    async def analyze_batch(self, items: Sequence[Tuple[str, str]]) -> BatchReport:
        """
        Classify (comment_id, text) pairs sequentially with pacing.

        The first call doubles as a probe: if it fails, the service is
        assumed unreachable and every comment takes the heuristic result.
        Never raises.
        """
        report = BatchReport(results={})
        if not items:
            return report

        logger.info(f"Starting enrichment for {len(items)} comments")
        probe_ok = True

        for i, (comment_id, text) in enumerate(items):
            if not probe_ok:
                report.results[comment_id] = classify(text)
                report.fallback += 1
                continue

            try:
                report.results[comment_id] = await self.analyze_comment(text)
                report.enriched += 1
            except Exception as e:
                logger.warning(f"Enrichment failed for comment {comment_id}: {e}")
                report.results[comment_id] = classify(text)
                report.fallback += 1
                if i == 0:
                    logger.warning("Enrichment probe failed, using heuristic for all comments")
                    probe_ok = False
                    continue

            if i + 1 < len(items):
                await self._pace(i + 1)

        ENRICHMENT_RESULTS.labels(outcome="enriched").inc(report.enriched)
        ENRICHMENT_RESULTS.labels(outcome="fallback").inc(report.fallback)
        logger.info(
            f"Enrichment completed: {report.enriched}/{len(items)} enriched, "
            f"{report.fallback} fallback"
        )
        return report

    async def _pace(self, calls_made: int) -> None:
        if calls_made % self.settings.enrichment_batch_size == 0:
            await asyncio.sleep(self.settings.enrichment_batch_pause)
        else:
            await asyncio.sleep(self.settings.enrichment_call_delay)

    # ── Corpus summary ───────────────────────────────────────────────────

    async def generate_topic_summary(self, texts: Sequence[str]) -> TopicSummary:
        if not texts:
            return TopicSummary(topics=[], summary="No comments to analyze")

        sample = "\n---\n".join(texts[: self.settings.enrichment_summary_sample_size])
        try:
            content = await self._complete(
                SUMMARY_PROMPT.format(comments=sample),
                self.settings.enrichment_summary_max_tokens,
            )
            payload = SummaryPayload.model_validate(self._parse_json(content))
        except Exception as e:
            logger.warning(f"Topic summary failed: {e}")
            return TopicSummary(topics=list(FALLBACK_TOPICS), summary=FALLBACK_SUMMARY)
        return TopicSummary(topics=payload.topics, summary=payload.summary)

    # ── Transport ────────────────────────────────────────────────────────

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = await retry_async(
                self.client.chat.completions.create,
                model=self.settings.enrichment_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=self.settings.enrichment_temperature,
                max_attempts=self.settings.enrichment_max_attempts,
                base_delay=self.settings.enrichment_backoff_base,
                retry_exceptions=RETRYABLE_ERRORS,
            )
        except openai.OpenAIError as e:
            raise EnrichmentError(f"Enrichment request failed: {type(e).__name__}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise EnrichmentError("Malformed completion response") from e
        if not content:
            raise EnrichmentError("No response content from enrichment model")
        return content

    @staticmethod
    def _parse_json(content: str) -> dict:
        match = JSON_OBJECT_PATTERN.search(content)
        if not match:
            raise EnrichmentError("Enrichment reply contained no JSON object")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise EnrichmentError("Enrichment reply was not valid JSON") from e
        if not isinstance(data, dict):
            raise EnrichmentError("Enrichment reply was not a JSON object")
        return data


# Module-level singleton
enrichment_service = EnrichmentService()
