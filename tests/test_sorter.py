"""
Unit tests for the quicksort post sorter.
"""

import random
from datetime import datetime

import pytest

from blog_search.query.sorter import sort_posts, sorted_posts
from blog_search.shared.errors import ErrorCode, ValidationError
from blog_search.shared.models import SortDirection, SortKey, post_ids
from conftest import make_post


def test_views_descending_scenario():
    posts = [make_post(1, "Intro to Rust", views=10), make_post(2, "Intro to Go", views=20)]
    sort_posts(posts, SortKey.VIEWS, SortDirection.DESC)
    assert post_ids(posts) == [2, 1]


def test_none_and_empty_are_noops():
    sort_posts(None, "views", "asc")
    empty = []
    sort_posts(empty, "views", "asc")
    assert empty == []


def test_string_keys_are_case_insensitive():
    posts = [make_post(1, "b"), make_post(2, "A"), make_post(3, "c")]
    sort_posts(posts, "TITLE", "Asc")
    assert post_ids(posts) == [2, 1, 3]


@pytest.mark.parametrize("key, direction, code", [
    ("popularity", "asc", ErrorCode.INVALID_SORT_KEY),
    ("views", "sideways", ErrorCode.INVALID_SORT_ORDER),
])
def test_unknown_key_or_direction(key, direction, code):
    with pytest.raises(ValidationError) as exc:
        sort_posts([make_post(1, "x")], key, direction)
    assert exc.value.code is code


def test_ties_break_by_id_in_both_directions():
    posts = [make_post(i, f"Post {i}", views=i % 3) for i in (9, 4, 7, 1, 3, 6)]

    ascending = sorted_posts(posts, SortKey.VIEWS, SortDirection.ASC)
    descending = sorted_posts(posts, SortKey.VIEWS, SortDirection.DESC)

    # views: 9->0, 3->0, 6->0, 4->1, 7->1, 1->1
    assert post_ids(ascending) == [3, 6, 9, 1, 4, 7]
    assert post_ids(descending) == [1, 4, 7, 3, 6, 9]


def test_title_and_author_ignore_case():
    posts = [
        make_post(1, "beta", author="zed"),
        make_post(2, "Alpha", author="Amy"),
        make_post(3, "alpha", author="bob"),
    ]
    assert post_ids(sorted_posts(posts, SortKey.TITLE)) == [2, 3, 1]
    assert post_ids(sorted_posts(posts, SortKey.AUTHOR)) == [2, 3, 1]


def test_created_is_chronological():
    posts = [
        make_post(1, "a", created_at=datetime(2024, 5, 1)),
        make_post(2, "b", created_at=datetime(2023, 1, 1)),
        make_post(3, "c", created_at=datetime(2024, 1, 1)),
    ]
    assert post_ids(sorted_posts(posts, SortKey.CREATED, SortDirection.DESC)) == [1, 3, 2]


def test_sorted_copy_leaves_input_alone():
    posts = [make_post(2, "b"), make_post(1, "a")]
    sorted_posts(posts, SortKey.TITLE)
    assert post_ids(posts) == [2, 1]


@pytest.mark.parametrize("key", list(SortKey))
@pytest.mark.parametrize("direction", list(SortDirection))
def test_matches_builtin_sort_and_is_idempotent(key, direction):
    rng = random.Random(42)
    posts = [
        make_post(i, rng.choice(["Alpha", "beta", "Gamma", "delta"]),
                  author=rng.choice(["ann", "Ben", "cy"]),
                  views=rng.randint(0, 5),
                  created_at=datetime(2024, 1, rng.randint(1, 5)))
        for i in range(1, 200)
    ]
    rng.shuffle(posts)

    key_fns = {
        SortKey.TITLE: lambda p: p.title.lower(),
        SortKey.VIEWS: lambda p: p.views,
        SortKey.CREATED: lambda p: p.created_at,
        SortKey.AUTHOR: lambda p: p.author_name.lower(),
    }
    # Two stable passes: id ascending, then primary key in the requested direction
    expected = sorted(posts, key=lambda p: p.id)
    expected.sort(key=key_fns[key], reverse=direction is SortDirection.DESC)

    sort_posts(posts, key, direction)
    assert post_ids(posts) == post_ids(expected)

    again = list(posts)
    sort_posts(again, key, direction)
    assert again == posts


def test_already_sorted_large_input():
    posts = [make_post(i, f"title {i:05d}", views=i) for i in range(1, 5001)]
    sort_posts(posts, SortKey.VIEWS, SortDirection.ASC)
    assert post_ids(posts) == list(range(1, 5001))
    sort_posts(posts, SortKey.VIEWS, SortDirection.DESC)
    assert post_ids(posts) == list(range(5000, 0, -1))
