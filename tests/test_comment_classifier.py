"""
Unit tests for the heuristic decision-list classifier.
"""
import pytest

from commentscope.ml.nlp.comment_classifier import (
    HEURISTIC_CONFIDENCE, categorize, classify, detect_sentiment,
)
from commentscope.models.models import CommentCategory, Sentiment


class TestCategorize:
    """Category precedence: spam > question > joke > positive > negative > discussion"""

    @pytest.mark.parametrize("text, expected", [
        ("How do I install this??", CommentCategory.QUESTION),
        ("LOLOL this is hilarious bro", CommentCategory.JOKE),
        ("I love this so much, thank you!", CommentCategory.POSITIVE),
        ("SUBSCRIBE to my channel for free giveaway!!!", CommentCategory.SPAM),
        ("aaaaaaaaa", CommentCategory.SPAM),
        ("This was a boring waste of time", CommentCategory.NEGATIVE),
        ("The second half covers the history of the region", CommentCategory.DISCUSSION),
    ])
    def test_scenarios(self, text, expected):
        assert categorize(text) == expected

    def test_spam_beats_question(self):
        assert categorize("Want a free giveaway? check out my channel?") == CommentCategory.SPAM

    def test_question_beats_joke(self):
        assert categorize("lol why did he do that?") == CommentCategory.QUESTION

    def test_joke_beats_positive(self):
        assert categorize("haha love it") == CommentCategory.JOKE

    def test_positive_beats_negative(self):
        assert categorize("great video but the audio is bad") == CommentCategory.POSITIVE

    def test_leading_interrogative_without_question_mark(self):
        assert categorize("Where can I find the source code") == CommentCategory.QUESTION

    def test_interrogative_word_not_leading(self):
        assert categorize("I know how this ends") == CommentCategory.DISCUSSION

    def test_empty_text(self):
        assert categorize("") == CommentCategory.DISCUSSION
        assert categorize(None) == CommentCategory.DISCUSSION


class TestSentiment:
    """Sentiment precedence: positive > negative > neutral"""

    def test_positive(self):
        assert detect_sentiment("Thanks, this was helpful") == Sentiment.POSITIVE

    def test_negative(self):
        assert detect_sentiment("worst tutorial ever") == Sentiment.NEGATIVE

    def test_mixed_is_positive(self):
        assert detect_sentiment("good idea, terrible execution") == Sentiment.POSITIVE

    def test_neutral(self):
        assert detect_sentiment("uploaded on a tuesday") == Sentiment.NEUTRAL

    def test_question_can_carry_sentiment(self):
        result = classify("Why is this so good?")
        assert result.category == CommentCategory.QUESTION
        assert result.sentiment == Sentiment.POSITIVE


class TestClassify:
    """Result shape and purity"""

    def test_heuristic_metadata(self):
        result = classify("nice")
        assert result.confidence == HEURISTIC_CONFIDENCE
        assert result.is_ai_analyzed is False
        assert result.topics == []

    @pytest.mark.parametrize("text", [
        "How do I install this??", "lmao", "meh", "", "click here for free robux",
    ])
    def test_pure(self, text):
        assert classify(text) == classify(text)
