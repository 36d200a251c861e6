"""
CommentScope Heuristic Comment Classifier

Maps comment text to a category and a sentiment with an ordered decision list:

    spam > question > joke > positive > negative > discussion

The first rule whose predicate matches decides the category. Sentiment is
derived independently from the same positive / negative keyword sets, with
the same precedence. No model is involved, so every result carries the same
nominal confidence.
"""
from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional, Tuple

from commentscope.ml.nlp.tokenizer import tokenize
from commentscope.models.models import CommentCategory, Sentiment

HEURISTIC_CONFIDENCE = 30.0
HEURISTIC_REASONING = "Rule-based keyword classification"

# ── Lexicons ─────────────────────────────────────────────────────────────

SPAM_PHRASES: Tuple[str, ...] = (
    "subscribe to my", "sub to my", "check out my", "check my channel",
    "visit my channel", "follow me", "promo code", "free giveaway",
    "giveaway", "free gift", "free v-bucks", "free robux", "click the link",
    "click here", "link in bio", "dm me", "whatsapp", "telegram",
    "earn money", "make money fast", "crypto signals",
)

REPEATED_CHAR_PATTERN = re.compile(r"(\S)\1{4,}")

INTERROGATIVE_WORDS: FrozenSet[str] = frozenset({
    "how", "what", "why", "when", "where", "who", "which", "can", "could",
    "would", "should", "will", "do", "does", "did", "is", "are", "was",
    "were", "explain", "help",
})

QUESTION_PHRASES: Tuple[str, ...] = (
    "can someone", "does anyone", "anyone know", "could you", "would you",
    "how do", "what is", "why is", "where is", "when is", "who is",
    "which is", "help me", "please help",
)

HUMOR_SLANG: Tuple[str, ...] = (
    "lol", "lmao", "lmfao", "haha", "hehe", "rofl", "funny", "hilarious",
    "joke", "meme", "savage", "rekt", "cringe", "sigma", "amogus",
    "poggers", "kek", "xd", "bruh", "omg", "epic",
)

HUMOR_PHRASES: Tuple[str, ...] = ("no cap", "i'm dead", "im dead")

POSITIVE_WORDS: FrozenSet[str] = frozenset({
    "love", "loved", "loving", "great", "awesome", "amazing", "excellent",
    "best", "thanks", "thank", "beautiful", "perfect", "helpful",
    "wonderful", "fantastic", "brilliant", "incredible", "appreciate",
    "enjoyed", "nice", "good", "cool", "masterpiece", "legend",
})

NEGATIVE_WORDS: FrozenSet[str] = frozenset({
    "hate", "hated", "bad", "terrible", "awful", "worst", "boring", "trash",
    "garbage", "disappointed", "disappointing", "horrible", "useless",
    "stupid", "waste", "annoying", "dislike", "sucks", "clickbait",
    "overrated", "misleading",
})


@dataclass
class Classification:
    category: CommentCategory
    sentiment: Sentiment
    confidence: float = HEURISTIC_CONFIDENCE     # 0..100
    reasoning: str = HEURISTIC_REASONING
    topics: List[str] = field(default_factory=list)
    is_ai_analyzed: bool = False


@dataclass(frozen=True)
class _CommentText:
    lower: str
    tokens: Tuple[str, ...]

    @classmethod
    def of(cls, text: Optional[str]) -> "_CommentText":
        text = text or ""
        return cls(lower=text.lower().strip(), tokens=tuple(tokenize(text)))


# ── Predicates ───────────────────────────────────────────────────────────

def _is_spam(c: _CommentText) -> bool:
    if any(phrase in c.lower for phrase in SPAM_PHRASES):
        return True
    return REPEATED_CHAR_PATTERN.search(c.lower) is not None


def _is_question(c: _CommentText) -> bool:
    if c.lower.endswith("?"):
        return True
    words = c.lower.split()
    if words and words[0].strip(string.punctuation) in INTERROGATIVE_WORDS:
        return True
    return any(phrase in c.lower for phrase in QUESTION_PHRASES)


def _is_joke(c: _CommentText) -> bool:
    if any(slang in tok for tok in c.tokens for slang in HUMOR_SLANG):
        return True
    return any(phrase in c.lower for phrase in HUMOR_PHRASES)


def _has_positive(c: _CommentText) -> bool:
    return any(tok in POSITIVE_WORDS for tok in c.tokens)


def _has_negative(c: _CommentText) -> bool:
    return any(tok in NEGATIVE_WORDS for tok in c.tokens)


# Order is precedence. Do not sort.
CATEGORY_RULES: List[Tuple[Callable[[_CommentText], bool], CommentCategory]] = [
    (_is_spam, CommentCategory.SPAM),
    (_is_question, CommentCategory.QUESTION),
    (_is_joke, CommentCategory.JOKE),
    (_has_positive, CommentCategory.POSITIVE),
    (_has_negative, CommentCategory.NEGATIVE),
]


def categorize(text: Optional[str]) -> CommentCategory:
    return _categorize(_CommentText.of(text))


def detect_sentiment(text: Optional[str]) -> Sentiment:
    return _sentiment(_CommentText.of(text))


def classify(text: Optional[str]) -> Classification:
    """Classify one comment. Pure: equal text always yields an equal result."""
    c = _CommentText.of(text)
    return Classification(category=_categorize(c), sentiment=_sentiment(c))


def _categorize(c: _CommentText) -> CommentCategory:
    for predicate, category in CATEGORY_RULES:
        if predicate(c):
            return category
    return CommentCategory.DISCUSSION


def _sentiment(c: _CommentText) -> Sentiment:
    if _has_positive(c):
        return Sentiment.POSITIVE
    if _has_negative(c):
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
