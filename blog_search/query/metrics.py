"""
Performance metrics record returned by the query engine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Union

from blog_search.cache.bounded_cache import CacheStats

MetricValue = Union[int, float, str, None]


@dataclass(frozen=True)
class PerformanceMetrics:
    cache_hit_rate: float
    keyword_cache_size: int
    author_cache_size: int
    tag_cache_size: int
    total_searches: int
    average_search_time_ms: float
    index_generation: int
    last_index_update: Optional[datetime]
    keyword_cache_stats: CacheStats
    author_cache_stats: CacheStats
    tag_cache_stats: CacheStats

    @property
    def combined_stats(self) -> CacheStats:
        return self.keyword_cache_stats + self.author_cache_stats + self.tag_cache_stats

    def as_dict(self) -> Dict[str, MetricValue]:
        """Flat mapping using the metric names callers already depend on."""
        return {
            "cacheHitRate": self.cache_hit_rate,
            "keywordCacheSize": self.keyword_cache_size,
            "authorCacheSize": self.author_cache_size,
            "tagCacheSize": self.tag_cache_size,
            "totalSearches": self.total_searches,
            "averageSearchTimeMs": self.average_search_time_ms,
            "indexGeneration": self.index_generation,
            "lastIndexUpdate": self.last_index_update.isoformat() if self.last_index_update else None,
        }
