"""
Comment tokenizer shared by the classifier, keyword extractor and prefix index.
"""
from __future__ import annotations

import re
from typing import List, Optional

URL_PATTERN = re.compile(r"https?://\S+")
MENTION_PATTERN = re.compile(r"@\w+")
HASHTAG_PATTERN = re.compile(r"#\w+")
NON_WORD_PATTERN = re.compile(r"[^\w\s]")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Tokens at or below this length are never indexed or counted as keywords
MIN_INDEX_LENGTH = 3


def tokenize(text: Optional[str]) -> List[str]:
    """
    Split raw comment text into lowercase word tokens.

    URLs, @mentions and #hashtags are removed outright; any other
    non-word character becomes a separator. Never raises.
    """
    if not text:
        return []
    clean = URL_PATTERN.sub("", text)
    clean = MENTION_PATTERN.sub("", clean)
    clean = HASHTAG_PATTERN.sub("", clean)
    clean = NON_WORD_PATTERN.sub(" ", clean)
    clean = WHITESPACE_PATTERN.sub(" ", clean).strip().lower()
    return [tok for tok in clean.split(" ") if tok]


def index_tokens(text: Optional[str], min_length: int = MIN_INDEX_LENGTH) -> List[str]:
    return [tok for tok in tokenize(text) if len(tok) >= min_length]
