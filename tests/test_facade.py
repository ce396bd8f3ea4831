"""
Unit tests for the invalidation facade and its wiring to the post store.
"""

from blog_search.query.facade import SearchFacade
from blog_search.shared.models import post_ids
from conftest import make_post


def test_store_mutations_invalidate_through_facade(store, engine):
    facade = SearchFacade(engine)
    store.add_listener(facade.on_post_changed)

    assert post_ids(engine.search_by_author("ann")) == [1, 2]
    store.create(make_post(5, "Ann on Zig", tags={"zig"}))
    assert post_ids(engine.search_by_author("ann")) == [1, 2, 5]

    store.update(5, title="Zig Comptime", author_name="Chloe")
    assert post_ids(engine.search_by_author("ann")) == [1, 2]
    assert post_ids(engine.search_by_author("chloe")) == [4, 5]

    assert store.delete(4) is True
    assert post_ids(engine.search_by_author("chloe")) == [5]
    assert store.delete(4) is False


def test_each_change_bumps_generation(store, engine):
    facade = SearchFacade(engine)
    engine.search_by_tag("go")
    assert engine.index_generation == 1

    facade.on_post_created(make_post(9, "New"))
    engine.search_by_tag("go")
    facade.on_post_deleted(9)
    engine.search_by_tag("go")

    assert engine.index_generation == 3
    assert engine.tag_cache.get_stats().hits == 0


def test_cleanup_and_describe(engine, clock):
    facade = SearchFacade(engine)
    engine.search_by_keyword("java")
    engine.search_by_author("ben okafor")
    clock.advance(61)

    assert facade.cleanup_expired() == 2
    summary = facade.describe()
    assert "Generation: 1" in summary
    assert "Searches: 2" in summary
    assert facade.metrics().keyword_cache_size == 0
