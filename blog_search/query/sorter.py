"""
sorter.py
---------
In-place quicksort over post lists.
Primary key comparison is inverted for descending order; ties always fall back
to post id ascending, which makes the ordering total and reproducible.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from blog_search.shared.errors import ErrorCode, ValidationError
from blog_search.shared.models import PostRecord, SortDirection, SortKey

# Below this size partitions are finished with insertion sort
INSERTION_SORT_THRESHOLD = 8

KEY_FUNCTIONS: Dict[SortKey, Callable[[PostRecord], Any]] = {
    SortKey.TITLE: lambda post: post.title.lower(),
    SortKey.VIEWS: lambda post: post.views,
    SortKey.CREATED: lambda post: post.created_at,
    SortKey.AUTHOR: lambda post: (post.author_name or "").lower(),
}


def parse_sort_key(key: Union[SortKey, str]) -> SortKey:
    try:
        return SortKey(key.lower() if isinstance(key, str) else key)
    except ValueError:
        raise ValidationError(ErrorCode.INVALID_SORT_KEY, "sortBy", f"Unsupported sort key: {key!r}") from None


def parse_direction(direction: Union[SortDirection, str]) -> SortDirection:
    try:
        return SortDirection(direction.lower() if isinstance(direction, str) else direction)
    except ValueError:
        raise ValidationError(ErrorCode.INVALID_SORT_ORDER, "sortOrder", f"Unsupported sort order: {direction!r}") from None


def sort_posts(
    posts: Optional[List[PostRecord]],
    key: Union[SortKey, str] = SortKey.CREATED,
    direction: Union[SortDirection, str] = SortDirection.ASC,
) -> None:
    """Sort posts in place by key and direction. None or empty lists are left alone."""
    sort_key = parse_sort_key(key)
    descending = parse_direction(direction) is SortDirection.DESC
    if not posts: return

    key_fn = KEY_FUNCTIONS[sort_key]
    # Precompute keys once; the list of (primary, id, post) is sorted alongside posts
    keyed: List[Tuple[Any, int, PostRecord]] = [(key_fn(p), p.id, p) for p in posts]

    def less(a: Tuple[Any, int, PostRecord], b: Tuple[Any, int, PostRecord]) -> bool:
        if a[0] != b[0]:
            return a[0] > b[0] if descending else a[0] < b[0]
        return a[1] < b[1]

    quicksort(keyed, less)
    posts[:] = [entry[2] for entry in keyed]


def sorted_posts(
    posts: Optional[List[PostRecord]],
    key: Union[SortKey, str] = SortKey.CREATED,
    direction: Union[SortDirection, str] = SortDirection.ASC,
) -> List[PostRecord]:
    """Return a sorted copy, leaving the input untouched."""
    result = list(posts or [])
    sort_posts(result, key, direction)
    return result

# ---------------------------------------------------------
#   Quicksort
# ---------------------------------------------------------

def quicksort(items: List[Any], less: Callable[[Any, Any], bool]) -> None:
    """
    Median-of-three quicksort. Recurses into the smaller partition and loops
    over the larger one, keeping stack depth logarithmic.
    """
    low, high = 0, len(items) - 1
    _quicksort(items, low, high, less)


def _quicksort(items: List[Any], low: int, high: int, less: Callable[[Any, Any], bool]) -> None:
    while high - low + 1 > INSERTION_SORT_THRESHOLD:
        pivot_idx = partition(items, low, high, less)
        if pivot_idx - low < high - pivot_idx:
            _quicksort(items, low, pivot_idx - 1, less)
            low = pivot_idx + 1
        else:
            _quicksort(items, pivot_idx + 1, high, less)
            high = pivot_idx - 1
    insertion_sort(items, low, high, less)


def median_of_three(items: List[Any], low: int, high: int, less: Callable[[Any, Any], bool]) -> int:
    mid = (low + high) // 2
    a, b, c = items[low], items[mid], items[high]
    if less(a, b):
        if less(b, c): return mid
        return high if less(a, c) else low
    if less(a, c): return low
    return high if less(b, c) else mid


def partition(items: List[Any], low: int, high: int, less: Callable[[Any, Any], bool]) -> int:
    """Lomuto partition around the median-of-three pivot, moved to items[high]."""
    pivot_idx = median_of_three(items, low, high, less)
    items[pivot_idx], items[high] = items[high], items[pivot_idx]
    pivot = items[high]

    i = low - 1
    for j in range(low, high):
        if not less(pivot, items[j]):
            i += 1
            items[i], items[j] = items[j], items[i]
    items[i + 1], items[high] = items[high], items[i + 1]
    return i + 1


def insertion_sort(items: List[Any], low: int, high: int, less: Callable[[Any, Any], bool]) -> None:
    for i in range(low + 1, high + 1):
        current = items[i]
        j = i - 1
        while j >= low and less(current, items[j]):
            items[j + 1] = items[j]
            j -= 1
        items[j + 1] = current
