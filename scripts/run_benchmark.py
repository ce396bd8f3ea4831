"""
Search performance benchmark.
Compares a linear scan, a cold index lookup (cache invalidated before every
query) and a warm cache after preloading.
"""

import argparse
import time
from typing import Callable, Dict, Iterable

from tqdm import tqdm

from blog_search.parser.parser import load_posts
from blog_search.query.query import PostSearchEngine, linear_search
from blog_search.shared.config import BENCHMARK_QUERIES, BENCHMARK_REPEATS, POSTS_PATH, configure_logging


def time_queries(label: str, queries: Iterable[str], repeats: int, run: Callable[[str], object]) -> Dict[str, float]:
    """Average wall time in microseconds per query."""
    queries = list(queries)
    times: Dict[str, float] = {}
    for query in tqdm(queries, desc=label, unit="query"):
        time0 = time.perf_counter()
        for _ in range(repeats):
            run(query)
        times[query] = (time.perf_counter() - time0) / repeats * 1e6
    return times


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark indexed and cached search.")
    parser.add_argument("--posts", default=POSTS_PATH)
    parser.add_argument("--repeats", type=int, default=BENCHMARK_REPEATS)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    configure_logging(args.log_level)
    posts = load_posts(args.posts)
    engine = PostSearchEngine(lambda: posts)

    def cold(query: str) -> None:
        engine.invalidate_cache()
        engine.search_by_keyword(query)

    linear = time_queries("Linear scan", BENCHMARK_QUERIES, args.repeats, lambda q: linear_search(posts, q))
    uncached = time_queries("Index, cold", BENCHMARK_QUERIES, args.repeats, cold)

    time0 = time.perf_counter()
    engine.preload_cache()
    preload_ms = (time.perf_counter() - time0) * 1000
    cached = time_queries("Index, warm", BENCHMARK_QUERIES, args.repeats, engine.search_by_keyword)

    print(f"\n{'Query':<14}{'Linear (us)':>14}{'Cold (us)':>14}{'Warm (us)':>14}")
    for query in BENCHMARK_QUERIES:
        print(f"{query:<14}{linear[query]:>14.1f}{uncached[query]:>14.1f}{cached[query]:>14.1f}")

    avg_linear = sum(linear.values()) / len(linear)
    avg_cached = sum(cached.values()) / len(cached)
    print(f"\nCache preload: {preload_ms:.2f} ms")
    print(f"Speed-up (linear / warm): {avg_linear / avg_cached:.1f}x" if avg_cached else "Speed-up: n/a")
    print(engine.get_performance_metrics().as_dict())


if __name__ == "__main__":
    main()
