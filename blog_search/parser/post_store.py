"""
In-memory post store standing in for the post-service collaborator.
Mutations notify listeners so the search facade can invalidate its caches.
"""

import threading
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional

from blog_search.shared.models import PostRecord

# (event, post or None, post_id)
ChangeListener = Callable[[str, Optional[PostRecord], int], None]


class InMemoryPostStore:
    def __init__(self, posts: Iterable[PostRecord] = ()) -> None:
        self._posts: Dict[int, PostRecord] = {}
        self._listeners: List[ChangeListener] = []
        self._lock = threading.Lock()
        for post in posts:
            if post.id in self._posts:
                raise ValueError(f"Duplicate post id: {post.id}")
            self._posts[post.id] = post

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def find_all(self) -> List[PostRecord]:
        """Snapshot of every post, id ascending."""
        with self._lock:
            return [self._posts[post_id] for post_id in sorted(self._posts)]

    def find_by_id(self, post_id: int) -> Optional[PostRecord]:
        with self._lock:
            return self._posts.get(post_id)

    def create(self, post: PostRecord) -> PostRecord:
        with self._lock:
            if post.id in self._posts:
                raise ValueError(f"Post {post.id} already exists")
            self._posts[post.id] = post
        self._notify("created", post, post.id)
        return post

    def update(self, post_id: int, **changes) -> PostRecord:
        if changes.get("id", post_id) != post_id:
            raise ValueError("Post id cannot be changed")
        with self._lock:
            if post_id not in self._posts:
                raise KeyError(post_id)
            post = replace(self._posts[post_id], **changes)
            self._posts[post_id] = post
        self._notify("updated", post, post_id)
        return post

    def delete(self, post_id: int) -> bool:
        with self._lock:
            removed = self._posts.pop(post_id, None)
        if removed is None:
            return False
        self._notify("deleted", None, post_id)
        return True

    def _notify(self, event: str, post: Optional[PostRecord], post_id: int) -> None:
        for listener in self._listeners:
            listener(event, post, post_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._posts)
