"""
Prometheus instruments, exposed through the /metrics ASGI mount in main.py.
"""
from __future__ import annotations

from prometheus_client import Counter, Histogram

INGESTIONS_TOTAL = Counter(
    "commentscope_ingestions_total",
    "Video ingestion requests by outcome",
    ["outcome"],  # completed | cached | failed
)

INGESTION_DURATION = Histogram(
    "commentscope_ingestion_duration_seconds",
    "Wall time of a full (non-cached) ingestion",
    buckets=(0.5, 1, 2.5, 5, 10, 30, 60, 120, 300),
)

COMMENTS_INGESTED = Counter(
    "commentscope_comments_ingested_total",
    "Comments classified and persisted",
)

ENRICHMENT_RESULTS = Counter(
    "commentscope_enrichment_results_total",
    "Per-comment enrichment outcomes",
    ["outcome"],  # enriched | fallback
)

SEARCHES_TOTAL = Counter(
    "commentscope_searches_total",
    "Search requests by lookup path",
    ["path"],  # trie | scan | none
)
