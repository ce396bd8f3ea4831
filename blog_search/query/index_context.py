"""
index_context.py
----------------
Holds the current IndexSet and rebuilds it lazily from the post collaborator.
Rebuilds build a complete new IndexSet before swapping the reference, so
readers observe either the old or the new bundle, never a partial one.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from blog_search.indexer.indexer import IndexSet, build_indexes
from blog_search.shared.errors import DatabaseError, ErrorCode
from blog_search.shared.models import PostRecord

logger = logging.getLogger(__name__)

PostFetcher = Callable[[], Iterable[PostRecord]]


@dataclass(frozen=True)
class IndexSnapshot:
    """An IndexSet together with the generation it was built as."""
    generation: int
    indexes: IndexSet
    built_at: datetime


class IndexContext:
    """Owns index generations for one engine instance."""

    def __init__(self, fetch_posts: PostFetcher) -> None:
        self._fetch_posts = fetch_posts
        self._snapshot: Optional[IndexSnapshot] = None
        self._stale = True
        self._generation = 0
        self._rebuild_lock = threading.Lock()

    @property
    def generation(self) -> int:
        """Number of successful rebuilds so far (0 before the first build)."""
        return self._generation

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def last_index_update(self) -> Optional[datetime]:
        snapshot = self._snapshot
        return snapshot.built_at if snapshot else None

    def mark_stale(self) -> None:
        """Force the next current() call to rebuild from the latest snapshot."""
        self._stale = True

    def current(self) -> IndexSnapshot:
        """Return the up-to-date snapshot, rebuilding first if it is stale."""
        snapshot = self._snapshot
        if snapshot is not None and not self._stale:
            return snapshot

        with self._rebuild_lock:
            # Another caller may have rebuilt while we waited
            if self._snapshot is not None and not self._stale:
                return self._snapshot
            return self._rebuild()

    def _rebuild(self) -> IndexSnapshot:
        time0 = time.perf_counter()
        # Cleared before reading so invalidations during the read keep us stale
        self._stale = False
        try:
            posts = list(self._fetch_posts())
        except Exception as e:
            self._stale = True
            logger.exception("Failed to read post snapshot; keeping generation %d", self._generation)
            raise DatabaseError(ErrorCode.SNAPSHOT_ERROR, "Failed to read post snapshot", cause=e) from e

        try:
            indexes = build_indexes(posts)
        except Exception:
            self._stale = True
            raise

        snapshot = IndexSnapshot(self._generation + 1, indexes, datetime.now())
        self._snapshot = snapshot
        self._generation = snapshot.generation

        logger.info(
            "Rebuilt indexes (generation %d, %d posts) in %.1f ms",
            snapshot.generation, len(indexes.by_id), (time.perf_counter() - time0) * 1000,
        )
        return snapshot
