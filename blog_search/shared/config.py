import logging
from dataclasses import dataclass
from typing import Tuple

# Cache configs
DEFAULT_CACHE_CAPACITY: int = 1000      # entries per query-type partition
DEFAULT_CACHE_TTL_SECONDS: float = 300  # 5 minutes, 0 = never expires

# Query processor configs
DEFAULT_PAGE_SIZE: int = 10
PRELOAD_KEYWORDS: Tuple[str, ...] = ("java", "programming", "tutorial", "blog", "post")

# Benchmark configs
BENCHMARK_QUERIES: Tuple[str, ...] = (
    "java", "programming", "tutorial", "blog", "post",
    "development", "code", "algorithm", "data", "structure",
)
BENCHMARK_REPEATS: int = 100

# Top level data directory
DATA_DIR: str = "data"

# Post snapshot used by the scripts (one JSON object per line)
POSTS_PATH: str = f"{DATA_DIR}/sample_posts.jsonl"

# Logging
LOG_LEVEL: str = "INFO"
LOG_FORMAT: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


@dataclass(frozen=True)
class CacheConfig:
    """Construction-time settings for each query-type cache partition."""
    capacity: int = DEFAULT_CACHE_CAPACITY
    ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for the command-line scripts."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
