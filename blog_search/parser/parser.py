"""
Parser for post snapshots.
Reads a JSON Lines file (one post object per line) into PostRecord instances.
"""

from datetime import datetime
from json import JSONDecodeError, loads
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from blog_search.shared.models import PostRecord

def load_posts(dataset_path: str, max_posts: Optional[int] = None, progress: bool = True) -> List[PostRecord]:
    """
    Load posts from a .jsonl file.
    - Blank lines are skipped
    - max_posts: optional limit for testing (stop after N posts)
    Malformed lines raise ValueError naming the line number.
    """
    # Count total number of lines in the data set (for progress bar)
    with open(dataset_path, "r", encoding="utf-8") as dataset_file:
        total_lines: int = max_posts or sum(1 for _ in dataset_file)

    posts: List[PostRecord] = []
    with open(dataset_path, "r", encoding="utf-8") as dataset_file:
        with tqdm(total=total_lines, desc="Loading posts", unit="post", disable=not progress) as bar:
            for line_no, line in enumerate(dataset_file, start=1):
                # Skip empty or whitespace-only lines
                if not line.strip(): continue

                try:
                    posts.append(parse_post(loads(line)))
                except (JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    raise ValueError(f"{dataset_path}:{line_no}: invalid post record: {e}") from e

                bar.update(1)
                if max_posts and len(posts) >= max_posts: break

    return posts

def parse_post(obj: Dict[str, Any]) -> PostRecord:
    """
    Convert one decoded JSON object into a PostRecord.
    Accepts both snake_case and the camelCase names used by the blogging app.
    """
    created = obj.get("created_at", obj.get("createdAt"))
    return PostRecord(
        id=int(obj["id"]),
        title=obj["title"],
        content=obj.get("content") or "",
        author_name=obj.get("author_name", obj.get("authorName")) or "",
        tags=frozenset(obj.get("tags") or ()),
        created_at=parse_created(created) if created else datetime.now(),
        views=int(obj.get("views") or 0),
    )

def parse_created(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.
    Offsets are converted to local time so parsed and defaulted values stay comparable.
    """
    created = datetime.fromisoformat(value)
    if created.tzinfo is not None:
        created = created.astimezone().replace(tzinfo=None)
    return created
