"""
Registry binding each corpus (video id) to its current prefix index.

Indexes are built elsewhere, in full, and only then handed to replace(). The
swap is a single guarded dict assignment, so a concurrent reader gets either
the previous index or the new one, never a partially built trie.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from commentscope.services.search.prefix_index import PrefixIndex

logger = logging.getLogger(__name__)


class IndexRegistry:
    def __init__(self) -> None:
        self._indexes: Dict[str, PrefixIndex] = {}
        self._lock = threading.Lock()

    def get(self, video_id: str) -> Optional[PrefixIndex]:
        with self._lock:
            return self._indexes.get(video_id)

    def replace(self, video_id: str, index: PrefixIndex) -> Optional[PrefixIndex]:
        """Bind a fully built index to video_id. Returns the one it replaced."""
        with self._lock:
            previous = self._indexes.get(video_id)
            self._indexes[video_id] = index
        logger.info(
            f"Prefix index swapped for video {video_id}: "
            f"words={index.word_count} nodes={index.node_count} "
            f"replaced={'yes' if previous else 'no'}"
        )
        return previous

    def discard(self, video_id: str) -> None:
        with self._lock:
            self._indexes.pop(video_id, None)

    def __contains__(self, video_id: str) -> bool:
        with self._lock:
            return video_id in self._indexes

    def __len__(self) -> int:
        with self._lock:
            return len(self._indexes)


# Module-level singleton
index_registry = IndexRegistry()
