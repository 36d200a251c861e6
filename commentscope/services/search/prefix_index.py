"""
CommentScope Prefix Index

Character trie mapping token prefixes to the comments that contain them.

Every node on a word's path records the comment id, not only the terminal
node. A prefix lookup is therefore a single walk of len(prefix) steps that
ends on a node already holding the full answer, independent of corpus size.
The price is memory: one id reference per character of every indexed token.

Terminal nodes additionally keep the ids whose token ends exactly there,
which is what exact-word search returns.

An index is built once per corpus (from_comments) and never mutated after it
is published to the registry. Rebuilds produce a new instance.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, Optional, Set

from commentscope.ml.nlp.tokenizer import index_tokens
from commentscope.models.models import Comment

logger = logging.getLogger(__name__)

_EMPTY: FrozenSet[str] = frozenset()


class TrieNode:
    __slots__ = ("children", "is_end_of_word", "comment_ids", "terminal_ids")

    def __init__(self) -> None:
        self.children: Dict[str, TrieNode] = {}
        self.is_end_of_word = False
        self.comment_ids: Set[str] = set()    # every id whose token passes through
        self.terminal_ids: Set[str] = set()   # ids whose token ends here


class PrefixIndex:
    """Case-insensitive token prefix index over one comment corpus."""

    def __init__(self) -> None:
        self._root = TrieNode()
        self._node_count = 0
        self._word_count = 0

    # ── Build ────────────────────────────────────────────────────────────

    def insert(self, word: str, comment_id: str) -> None:
        normalized = word.lower().strip()
        if not normalized:
            return

        node = self._root
        for ch in normalized:
            child = node.children.get(ch)
            if child is None:
                child = TrieNode()
                node.children[ch] = child
                self._node_count += 1
            node = child
            node.comment_ids.add(comment_id)

        if not node.is_end_of_word:
            node.is_end_of_word = True
            self._word_count += 1
        node.terminal_ids.add(comment_id)

    @classmethod
    def from_comments(cls, comments: Iterable[Comment]) -> "PrefixIndex":
        """
        Build a fresh index from comment text and author names.

        Author tokens are indexed against the comment, so searching an
        author's name surfaces their comments even when the body never
        mentions it.
        """
        index = cls()
        indexed = 0
        for comment in comments:
            for token in index_tokens(comment.text_display):
                index.insert(token, comment.id)
            for token in index_tokens(comment.author_display_name):
                index.insert(token, comment.id)
            indexed += 1
        logger.debug(
            f"Prefix index built: comments={indexed} words={index.word_count} "
            f"nodes={index.node_count}"
        )
        return index

    # ── Lookup ───────────────────────────────────────────────────────────

    def starts_with(self, prefix: str) -> FrozenSet[str]:
        """Ids of comments with at least one token starting with prefix."""
        node = self._walk(prefix)
        if node is None:
            return _EMPTY
        return frozenset(node.comment_ids)

    def search(self, word: str) -> FrozenSet[str]:
        """Ids of comments containing exactly this token."""
        node = self._walk(word)
        if node is None or not node.is_end_of_word:
            return _EMPTY
        return frozenset(node.terminal_ids)

    def _walk(self, text: str) -> Optional[TrieNode]:
        normalized = (text or "").lower().strip()
        if not normalized:
            return None
        node = self._root
        for ch in normalized:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    # ── Stats ────────────────────────────────────────────────────────────

    @property
    def word_count(self) -> int:
        return self._word_count

    @property
    def node_count(self) -> int:
        return self._node_count
