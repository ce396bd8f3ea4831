"""
Invalidation and metrics entry point for the post-service collaborator.
Any create, update or delete must reach invalidate so stale results are never served.
"""

import logging
from typing import Optional

from blog_search.query.metrics import PerformanceMetrics
from blog_search.query.query import PostSearchEngine
from blog_search.shared.models import PostRecord

logger = logging.getLogger(__name__)


class SearchFacade:
    def __init__(self, engine: PostSearchEngine) -> None:
        self.engine = engine

    def on_post_created(self, post: PostRecord) -> None:
        logger.debug("Post %d created", post.id)
        self.engine.invalidate_cache()

    def on_post_updated(self, post: PostRecord) -> None:
        logger.debug("Post %d updated", post.id)
        self.engine.invalidate_cache()

    def on_post_deleted(self, post_id: int) -> None:
        logger.debug("Post %d deleted", post_id)
        self.engine.invalidate_cache()

    def on_post_changed(self, event: str, post: Optional[PostRecord], post_id: int) -> None:
        """Listener signature used by InMemoryPostStore."""
        if event == "created" and post is not None:
            self.on_post_created(post)
        elif event == "updated" and post is not None:
            self.on_post_updated(post)
        else:
            self.on_post_deleted(post_id)

    def cleanup_expired(self) -> int:
        removed = self.engine.cleanup_expired()
        if removed:
            logger.debug("Swept %d expired cache entries", removed)
        return removed

    def metrics(self) -> PerformanceMetrics:
        return self.engine.get_performance_metrics()

    def describe(self) -> str:
        """One-line summary for logs and the CLI."""
        m = self.metrics()
        return (f"Generation: {m.index_generation} | Searches: {m.total_searches} | "
                f"Hit rate: {m.cache_hit_rate:.2%} | Cached keyword/author/tag: "
                f"{m.keyword_cache_size}/{m.author_cache_size}/{m.tag_cache_size}")
