"""
Top keyword extraction over a comment corpus.
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from commentscope.ml.nlp.tokenizer import MIN_INDEX_LENGTH, tokenize
from commentscope.models.models import Comment, WordCount

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "this", "that", "these", "those", "i", "you", "he", "she",
    "it", "we", "they", "me", "him", "her", "us", "them", "my", "your", "his",
    "its", "our", "their", "am", "is", "are", "was", "were", "be", "been",
    "being", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "can", "may", "might", "must", "shall", "not", "no",
    "yes", "all", "any", "some", "more", "most", "other", "such", "only",
    "own", "same", "so", "than", "too", "very", "just", "now", "here",
    "there", "when", "where", "why", "how", "what",
})


def is_keyword(token: str) -> bool:
    return len(token) >= MIN_INDEX_LENGTH and token not in STOP_WORDS


def extract_top_words(comments: Iterable[Comment], limit: int = 20) -> List[WordCount]:
    """
    Most frequent non-stop-word tokens across the display text of comments.

    Sorted by descending count; equal counts keep first-seen order.
    """
    if limit <= 0:
        return []

    counts: Counter = Counter()
    for comment in comments:
        counts.update(tok for tok in tokenize(comment.text_display) if is_keyword(tok))

    # Counter preserves first insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [WordCount(word=word, count=count) for word, count in ranked[:limit]]
