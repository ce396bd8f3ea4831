"""
Query processor for blog posts.
Resolves keyword, author, tag, title and hybrid queries through the indexes,
memoizing id lists per query type in bounded caches.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple
import logging
import threading
import time

from blog_search.cache.bounded_cache import BoundedCache
from blog_search.indexer.indexer import IndexSet
from blog_search.query.index_context import IndexContext, IndexSnapshot, PostFetcher
from blog_search.query.metrics import PerformanceMetrics
from blog_search.query.sorter import parse_direction, parse_sort_key, sort_posts
from blog_search.shared.config import CacheConfig, PRELOAD_KEYWORDS
from blog_search.shared.errors import (
    DatabaseError,
    ErrorCode,
    ValidationError,
    ValidationResult,
    invalid,
    require_text,
    valid,
)
from blog_search.shared.models import PostRecord, SearchOptions, SearchResult, SearchType
from blog_search.shared.utils import normalize_key, normalize_keyword

logger = logging.getLogger(__name__)

IdResolver = Callable[[IndexSet, str], Tuple[int, ...]]


@dataclass(frozen=True)
class CachedIds:
    """Cached result ids, tagged with the index generation they were resolved under."""
    generation: int
    ids: Tuple[int, ...]

# ---------------------------------------------------------
#   Index resolvers
# ---------------------------------------------------------

def resolve_keyword(indexes: IndexSet, signature: str) -> Tuple[int, ...]:
    """Posts containing every token of the keyword signature (AND semantics)."""
    tokens = signature.split()
    if not tokens: return ()

    # Intersect starting from the rarest token
    id_sets = sorted((indexes.keyword_ids(token) for token in tokens), key=len)
    ids = set(id_sets[0])
    for other in id_sets[1:]:
        ids &= other
        if not ids: break
    return tuple(sorted(ids))

def resolve_author(indexes: IndexSet, author: str) -> Tuple[int, ...]:
    return tuple(sorted(indexes.author_ids(author)))

def resolve_tag(indexes: IndexSet, tag: str) -> Tuple[int, ...]:
    return tuple(sorted(indexes.tag_ids(tag)))

def linear_search(posts: Iterable[PostRecord], query: str) -> List[PostRecord]:
    """Full scan over titles and content; the baseline the indexes are measured against."""
    needle = query.strip().lower()
    return [
        post for post in posts
        if needle in post.title.lower() or needle in (post.content or "").lower()
    ]

# ---------------------------------------------------------
#   Input validation
# ---------------------------------------------------------

def validate_keyword(keyword: Optional[str]) -> ValidationResult[str]:
    return require_text(keyword, ErrorCode.KEYWORD_REQUIRED, "keyword", "Keyword")

def validate_author(author: Optional[str]) -> ValidationResult[str]:
    return require_text(author, ErrorCode.AUTHOR_REQUIRED, "author", "Author name")

def validate_tag(tag: Optional[str]) -> ValidationResult[str]:
    return require_text(tag, ErrorCode.TAG_REQUIRED, "tagName", "Tag name")

def validate_query(query: Optional[str]) -> ValidationResult[str]:
    return require_text(query, ErrorCode.QUERY_REQUIRED, "query", "Search query")

def validate_title(title: Optional[str]) -> ValidationResult[str]:
    return require_text(title, ErrorCode.TITLE_REQUIRED, "title", "Title")

def validate_options(options: SearchOptions) -> ValidationResult[SearchOptions]:
    try:
        SearchType(options.search_type)
    except ValueError:
        return invalid(ErrorCode.INVALID_SEARCH_TYPE, "searchType", f"Unsupported search type: {options.search_type!r}")
    if options.page < 1:
        return invalid(ErrorCode.INVALID_PAGE, "page", f"Page must be at least 1, got {options.page}")
    if options.page_size < 1:
        return invalid(ErrorCode.INVALID_PAGE, "pageSize", f"Page size must be at least 1, got {options.page_size}")
    try:
        if options.sort_by is not None:
            parse_sort_key(options.sort_by)
            parse_direction(options.sort_order)
    except ValidationError as e:
        return invalid(e.code, e.field, e.message)
    return valid(options)

# ---------------------------------------------------------
#   Search engine
# ---------------------------------------------------------

class PostSearchEngine:
    """
    Index-backed post search with one bounded cache per query type.
    The engine is owned by its caller; configuration is fixed at construction.
    """

    def __init__(
        self,
        fetch_posts: PostFetcher,
        cache_config: CacheConfig = CacheConfig(),
        clock: Callable[[], float] = time.monotonic,
        preload_keywords: Iterable[str] = PRELOAD_KEYWORDS,
    ) -> None:
        self.context = IndexContext(fetch_posts)
        self.keyword_cache: BoundedCache[str, CachedIds] = BoundedCache(cache_config.capacity, cache_config.ttl_seconds, clock)
        self.author_cache: BoundedCache[str, CachedIds] = BoundedCache(cache_config.capacity, cache_config.ttl_seconds, clock)
        self.tag_cache: BoundedCache[str, CachedIds] = BoundedCache(cache_config.capacity, cache_config.ttl_seconds, clock)
        self.preload_keywords = tuple(preload_keywords)

        self._metrics_lock = threading.Lock()
        self._search_count = 0
        self._total_search_time = 0.0

    @property
    def index_generation(self) -> int:
        return self.context.generation

    def caches(self) -> Tuple[BoundedCache[str, CachedIds], ...]:
        return (self.keyword_cache, self.author_cache, self.tag_cache)

    # ------------------- Single-index queries -------------------

    def search_by_keyword(self, keyword: Optional[str]) -> List[PostRecord]:
        """Posts whose title or content contains every token of keyword, id ascending."""
        keyword = validate_keyword(keyword).unwrap()
        return self._cached_search(self.keyword_cache, normalize_keyword(keyword), resolve_keyword, keyword)

    def search_by_author(self, author: Optional[str]) -> List[PostRecord]:
        author = validate_author(author).unwrap()
        return self._cached_search(self.author_cache, normalize_key(author), resolve_author, author)

    def search_by_tag(self, tag: Optional[str]) -> List[PostRecord]:
        tag = validate_tag(tag).unwrap()
        return self._cached_search(self.tag_cache, normalize_key(tag), resolve_tag, tag)

    def search_by_title_prefix(self, prefix: Optional[str]) -> List[PostRecord]:
        """Binary search over the sorted title index; results in title order."""
        prefix = validate_title(prefix).unwrap()
        time0 = time.perf_counter()
        snapshot = self._snapshot(prefix)
        ids = snapshot.indexes.titles.prefix(prefix.strip())
        self._record_search(time.perf_counter() - time0)
        return [snapshot.indexes.by_id[post_id] for post_id in ids]

    def search_titles_in_range(self, low: Optional[str], high: Optional[str]) -> List[PostRecord]:
        """Posts whose lowercase title lies in [low, high], in title order."""
        low = validate_title(low).unwrap()
        high = validate_title(high).unwrap()
        time0 = time.perf_counter()
        snapshot = self._snapshot(f"{low}..{high}")
        ids = snapshot.indexes.titles.range(low.strip(), high.strip())
        self._record_search(time.perf_counter() - time0)
        return [snapshot.indexes.by_id[post_id] for post_id in ids]

    def find_by_id(self, post_id: int) -> Optional[PostRecord]:
        return self._snapshot(str(post_id)).indexes.by_id.get(post_id)

    # ------------------- Hybrid query -------------------

    def search_all(self, query: Optional[str]) -> List[PostRecord]:
        """
        Unranked union of keyword, author and tag hits plus titles containing
        the query as a substring. Deduplicated, id ascending.
        """
        query = validate_query(query).unwrap()
        time0 = time.perf_counter()
        snapshot = self._snapshot(query)

        ids = set(self._cached_ids(self.keyword_cache, normalize_keyword(query), resolve_keyword, snapshot))
        ids.update(self._cached_ids(self.author_cache, normalize_key(query), resolve_author, snapshot))
        ids.update(self._cached_ids(self.tag_cache, normalize_key(query), resolve_tag, snapshot))
        ids.update(snapshot.indexes.titles.containing(query.strip()))

        posts = snapshot.indexes.posts_for(ids)
        self._record_search(time.perf_counter() - time0)
        return posts

    # ------------------- Advanced search -------------------

    def search(self, query: Optional[str], options: SearchOptions = SearchOptions()) -> SearchResult:
        """Dispatch by search type, then sort and paginate."""
        options = validate_options(options).unwrap()
        time0 = time.perf_counter()

        search_type = SearchType(options.search_type)
        if search_type is SearchType.BINARY:
            results = self.search_by_title_prefix(query)
        elif search_type is SearchType.HYBRID:
            results = self.search_all(query)
        elif search_type is SearchType.AUTHOR:
            results = self.search_by_author(query)
        elif search_type is SearchType.TAG:
            results = self.search_by_tag(query)
        else:
            results = self.search_by_keyword(query)

        if options.sort_by is not None:
            sort_posts(results, options.sort_by, options.sort_order)

        start = (options.page - 1) * options.page_size
        page = results[start:start + options.page_size]
        return SearchResult(
            posts=page,
            total_results=len(results),
            search_type=search_type,
            elapsed_seconds=time.perf_counter() - time0,
            options=options,
        )

    # ------------------- Cache management -------------------

    def invalidate_cache(self) -> None:
        """Clear every partition; the next query rebuilds the indexes."""
        for cache in self.caches():
            cache.clear()
        self.context.mark_stale()
        logger.debug("Invalidated all query caches (generation %d now stale)", self.context.generation)

    def invalidate_keyword_cache(self, keyword: Optional[str]) -> bool:
        if keyword is None: return False
        return self.keyword_cache.remove(normalize_keyword(keyword))

    def invalidate_author_cache(self, author: Optional[str]) -> bool:
        if author is None: return False
        return self.author_cache.remove(normalize_key(author))

    def invalidate_tag_cache(self, tag: Optional[str]) -> bool:
        if tag is None: return False
        return self.tag_cache.remove(normalize_key(tag))

    def preload_cache(self) -> int:
        """
        Warm the partitions before first use:
        - configured common keywords that have at least one hit
        - every indexed author and tag
        Returns the number of entries written.
        """
        snapshot = self._snapshot("<preload>")
        indexes, generation = snapshot.indexes, snapshot.generation
        written = 0

        for keyword in self.preload_keywords:
            signature = normalize_keyword(keyword)
            ids = resolve_keyword(indexes, signature)
            if ids:
                self.keyword_cache.put(signature, CachedIds(generation, ids))
                written += 1

        for author, id_set in indexes.authors.items():
            self.author_cache.put(author, CachedIds(generation, tuple(sorted(id_set))))
            written += 1

        for tag, id_set in indexes.tags.items():
            self.tag_cache.put(tag, CachedIds(generation, tuple(sorted(id_set))))
            written += 1

        logger.info("Preloaded %d cache entries (generation %d)", written, generation)
        return written

    def cleanup_expired(self) -> int:
        return sum(cache.cleanup_expired() for cache in self.caches())

    def reset_stats(self) -> None:
        for cache in self.caches():
            cache.reset_stats()
        with self._metrics_lock:
            self._search_count = 0
            self._total_search_time = 0.0

    # ------------------- Metrics -------------------

    def get_performance_metrics(self) -> PerformanceMetrics:
        keyword_stats = self.keyword_cache.get_stats()
        author_stats = self.author_cache.get_stats()
        tag_stats = self.tag_cache.get_stats()
        combined = keyword_stats + author_stats + tag_stats

        with self._metrics_lock:
            search_count = self._search_count
            total_time = self._total_search_time

        return PerformanceMetrics(
            cache_hit_rate=combined.hit_rate,
            keyword_cache_size=self.keyword_cache.size(),
            author_cache_size=self.author_cache.size(),
            tag_cache_size=self.tag_cache.size(),
            total_searches=search_count,
            average_search_time_ms=total_time / search_count * 1000 if search_count else 0.0,
            index_generation=self.context.generation,
            last_index_update=self.context.last_index_update,
            keyword_cache_stats=keyword_stats,
            author_cache_stats=author_stats,
            tag_cache_stats=tag_stats,
        )

    # ------------------- Internals -------------------

    def _snapshot(self, query: str) -> IndexSnapshot:
        try:
            return self.context.current()
        except DatabaseError as e:
            e.context.setdefault("query", query)
            raise

    def _cached_ids(
        self,
        cache: BoundedCache[str, CachedIds],
        key: str,
        resolver: IdResolver,
        snapshot: IndexSnapshot,
    ) -> Tuple[int, ...]:
        """Look up key in cache, resolving through the index on a miss or a stale generation."""
        cached = cache.get(key, is_valid=lambda entry: entry.generation == snapshot.generation)
        if cached is not None:
            return cached.ids

        ids = resolver(snapshot.indexes, key)
        cache.put(key, CachedIds(snapshot.generation, ids))
        return ids

    def _cached_search(
        self,
        cache: BoundedCache[str, CachedIds],
        key: str,
        resolver: IdResolver,
        query: str,
    ) -> List[PostRecord]:
        time0 = time.perf_counter()
        snapshot = self._snapshot(query)
        ids = self._cached_ids(cache, key, resolver, snapshot)
        posts = snapshot.indexes.posts_for(ids)
        self._record_search(time.perf_counter() - time0)
        return posts

    def _record_search(self, elapsed: float) -> None:
        with self._metrics_lock:
            self._search_count += 1
            self._total_search_time += elapsed
        logger.debug("Search took %.3f ms", elapsed * 1000)
