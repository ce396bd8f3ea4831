"""
Indexer for blog posts.
Builds the direct, inverted keyword, author, tag and sorted title indexes
from a snapshot of post records.
"""

import logging
import time
from bisect import bisect_left, bisect_right
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Set, Tuple

from blog_search.shared.models import PostRecord
from blog_search.shared.utils import normalize_key, tokenize

logger = logging.getLogger(__name__)

EMPTY_IDS: FrozenSet[int] = frozenset()

# ---------------------------------------------------------
#   Sorted title index
# ---------------------------------------------------------

class SortedTitleIndex:
    """
    Ordered (lowercase title, post id) entries.
    Duplicate titles are ordered by id; range and prefix lookups use binary search.
    """

    def __init__(self, entries: Iterable[Tuple[str, int]]) -> None:
        ordered = sorted(entries)
        self._titles: Tuple[str, ...] = tuple(title for title, _ in ordered)
        self._ids: Tuple[int, ...] = tuple(post_id for _, post_id in ordered)

    def __len__(self) -> int:
        return len(self._ids)

    def items(self) -> List[Tuple[str, int]]:
        """Every (title, id) pair in order."""
        return list(zip(self._titles, self._ids))

    def ids(self) -> List[int]:
        return list(self._ids)

    def range(self, low: str, high: str) -> List[int]:
        """Ids whose lowercase title lies in [low, high], in title order."""
        low, high = low.lower(), high.lower()
        if low > high: return []
        start = bisect_left(self._titles, low)
        end = bisect_right(self._titles, high)
        return list(self._ids[start:end])

    def prefix(self, prefix: str) -> List[int]:
        """Ids whose lowercase title starts with prefix, in title order."""
        prefix = prefix.lower()
        start = bisect_left(self._titles, prefix)
        matched: List[int] = []
        for i in range(start, len(self._titles)):
            if not self._titles[i].startswith(prefix):
                break
            matched.append(self._ids[i])
        return matched

    def containing(self, substring: str) -> List[int]:
        """Ids whose lowercase title contains substring (ordered scan)."""
        substring = substring.lower()
        return [post_id for title, post_id in zip(self._titles, self._ids) if substring in title]

# ---------------------------------------------------------
#   Index bundle
# ---------------------------------------------------------

@dataclass(frozen=True)
class IndexSet:
    """Immutable bundle of every index built from one snapshot."""
    by_id: Mapping[int, PostRecord]
    keywords: Mapping[str, FrozenSet[int]]
    authors: Mapping[str, FrozenSet[int]]
    tags: Mapping[str, FrozenSet[int]]
    titles: SortedTitleIndex

    def keyword_ids(self, token: str) -> FrozenSet[int]:
        return self.keywords.get(token, EMPTY_IDS)

    def author_ids(self, author: str) -> FrozenSet[int]:
        return self.authors.get(normalize_key(author), EMPTY_IDS)

    def tag_ids(self, tag: str) -> FrozenSet[int]:
        return self.tags.get(normalize_key(tag), EMPTY_IDS)

    def posts_for(self, ids: Iterable[int]) -> List[PostRecord]:
        """Resolve ids to records in id-ascending order, skipping unknown ids."""
        return [self.by_id[post_id] for post_id in sorted(ids) if post_id in self.by_id]

    def indexed_ids(self) -> Set[int]:
        """Union of ids referenced by any secondary index."""
        ids: Set[int] = set(self.titles.ids())
        for index in (self.keywords, self.authors, self.tags):
            for id_set in index.values():
                ids |= id_set
        return ids

    def stats(self) -> Dict[str, int]:
        return {
            "posts": len(self.by_id),
            "keywords": len(self.keywords),
            "authors": len(self.authors),
            "tags": len(self.tags),
            "titles": len(self.titles),
        }

# ---------------------------------------------------------
#   Builder
# ---------------------------------------------------------

def build_indexes(posts: Iterable[PostRecord]) -> IndexSet:
    """
    Build every index from a post snapshot.
    - Keyword tokens come from title + content (lowercase alphanumeric)
    - Authors and tags are trimmed and lowercased; blank values are not indexed
    - Duplicate post ids are rejected
    Pure function of its input, so rebuilding the same snapshot yields equal indexes.
    """
    time0 = time.perf_counter()

    by_id: Dict[int, PostRecord] = {}
    keywords: Dict[str, Set[int]] = defaultdict(set)
    authors: Dict[str, Set[int]] = defaultdict(set)
    tags: Dict[str, Set[int]] = defaultdict(set)
    title_entries: List[Tuple[str, int]] = []

    for post in posts:
        if post.id in by_id:
            raise ValueError(f"Duplicate post id in snapshot: {post.id}")
        by_id[post.id] = post

        # One entry per distinct token
        for token in set(tokenize(post.title)) | set(tokenize(post.content)):
            keywords[token].add(post.id)

        author = normalize_key(post.author_name)
        if author:
            authors[author].add(post.id)

        for tag in post.tags:
            tag = normalize_key(tag)
            if tag:
                tags[tag].add(post.id)

        title_entries.append((post.title.lower(), post.id))

    index_set = IndexSet(
        by_id=dict(by_id),
        keywords=freeze(keywords),
        authors=freeze(authors),
        tags=freeze(tags),
        titles=SortedTitleIndex(title_entries),
    )

    logger.debug("Built indexes %s in %.4f s", index_set.stats(), time.perf_counter() - time0)
    return index_set

def freeze(index: Dict[str, Set[int]]) -> Dict[str, FrozenSet[int]]:
    """Convert a mutable key -> id set mapping into frozen id sets."""
    return {key: frozenset(ids) for key, ids in index.items()}
