"""
Unit tests for index building.
"""

import pytest

from blog_search.indexer.indexer import SortedTitleIndex, build_indexes
from blog_search.shared.utils import normalize_keyword, tokenize
from conftest import make_post


def test_tokenize_lowercases_and_splits_on_punctuation():
    assert tokenize("Hello, World! C3PO's-day") == ["hello", "world", "c3po", "s", "day"]
    assert tokenize("   ") == []
    assert tokenize(None) == []
    assert normalize_keyword("  Intro,  TO ") == "intro to"


def test_keyword_index_covers_title_and_content(posts):
    indexes = build_indexes(posts)

    assert indexes.keyword_ids("intro") == {1, 2}
    assert indexes.keyword_ids("goroutines") == {2}
    assert indexes.keyword_ids("java") == {3}
    assert indexes.keyword_ids("missing") == frozenset()


def test_author_and_tag_normalization(posts):
    indexes = build_indexes(posts)

    assert set(indexes.authors) == {"ann", "ben okafor", "chloe"}
    assert indexes.author_ids("  ANN ") == {1, 2}
    assert indexes.author_ids("Ben Okafor") == {3}
    assert indexes.tag_ids("PROGRAMMING") == {1, 2}
    assert indexes.tag_ids("rust") == {1}


def test_blank_author_and_tags_are_not_indexed():
    indexes = build_indexes([make_post(1, "Untitled draft", author="   ", tags={"", "  "})])

    assert indexes.authors == {}
    assert indexes.tags == {}
    assert indexes.indexed_ids() == {1}


def test_every_indexed_id_has_a_direct_entry(posts):
    indexes = build_indexes(posts)
    assert indexes.indexed_ids() == set(indexes.by_id)


def test_rebuild_is_idempotent(posts):
    first = build_indexes(posts)
    second = build_indexes(list(reversed(posts)))

    assert first.keywords == second.keywords
    assert first.authors == second.authors
    assert first.tags == second.tags
    assert first.titles.items() == second.titles.items()


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        build_indexes([make_post(1, "A"), make_post(1, "B")])


def test_sorted_title_index_orders_duplicates_by_id():
    index = SortedTitleIndex([("beta", 5), ("alpha", 9), ("beta", 2), ("gamma", 1)])

    assert index.items() == [("alpha", 9), ("beta", 2), ("beta", 5), ("gamma", 1)]
    assert index.prefix("BE") == [2, 5]
    assert index.prefix("zeta") == []
    assert index.range("alpha", "beta") == [9, 2, 5]
    assert index.range("gamma", "alpha") == []
    assert index.containing("amm") == [1]


def test_empty_snapshot():
    indexes = build_indexes([])
    assert indexes.stats() == {"posts": 0, "keywords": 0, "authors": 0, "tags": 0, "titles": 0}
