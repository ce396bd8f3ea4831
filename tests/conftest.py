"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from typing import List

import pytest

from blog_search.parser.post_store import InMemoryPostStore
from blog_search.query.query import PostSearchEngine
from blog_search.shared.config import CacheConfig
from blog_search.shared.models import PostRecord


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_post(post_id: int, title: str, author: str = "Ann", views: int = 0, **kwargs) -> PostRecord:
    kwargs.setdefault("created_at", datetime(2024, 1, post_id % 28 + 1))
    return PostRecord(id=post_id, title=title, author_name=author, views=views, **kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def posts() -> List[PostRecord]:
    return [
        make_post(1, "Intro to Rust", views=10, content="Ownership and borrowing.", tags={"Rust", "programming"}),
        make_post(2, "Intro to Go", views=20, content="Goroutines and channels!", tags={"go", " Programming "}),
        make_post(3, "Java Streams", author="  Ben Okafor ", views=150, content="Collectors and streams in Java."),
        make_post(4, "Why I Blog", author="Chloe", views=42, content="A blog post every week.", tags={"blog"}),
    ]


@pytest.fixture
def store(posts) -> InMemoryPostStore:
    return InMemoryPostStore(posts)


@pytest.fixture
def engine(store, clock) -> PostSearchEngine:
    return PostSearchEngine(store.find_all, CacheConfig(capacity=100, ttl_seconds=60), clock=clock)
