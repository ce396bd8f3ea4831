"""
Data records shared by the indexer, query engine and sorter.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

from blog_search.shared.config import DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class PostRecord:
    """Immutable snapshot of a post, owned by the post collaborator."""
    id: int
    title: str
    content: str = ""
    author_name: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    created_at: datetime = field(default_factory=datetime.now)
    views: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id <= 0:
            raise ValueError(f"Post id must be a positive integer, got {self.id!r}")
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValueError(f"Post {self.id} must have a non-empty title")
        if self.views < 0:
            raise ValueError(f"Post {self.id} has negative views: {self.views}")
        # Accept any iterable of tags but store a frozenset
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))


class SortKey(str, Enum):
    TITLE = "title"
    VIEWS = "views"
    CREATED = "created"
    AUTHOR = "author"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SearchType(str, Enum):
    HASH = "hash"       # keyword index
    BINARY = "binary"   # title prefix over the sorted title index
    HYBRID = "hybrid"   # union of every index
    AUTHOR = "author"
    TAG = "tag"


@dataclass(frozen=True)
class SearchOptions:
    search_type: SearchType = SearchType.HASH
    sort_by: Optional[SortKey] = SortKey.CREATED
    sort_order: SortDirection = SortDirection.DESC
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class SearchResult:
    posts: List[PostRecord]
    total_results: int
    search_type: SearchType
    elapsed_seconds: float
    options: SearchOptions

    @property
    def total_pages(self) -> int:
        if self.total_results == 0: return 0
        return -(-self.total_results // self.options.page_size)


def post_ids(posts: Iterable[PostRecord]) -> List[int]:
    """Return the ids of posts in iteration order."""
    return [post.id for post in posts]
