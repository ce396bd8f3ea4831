import argparse

from blog_search.indexer.indexer import build_indexes
from blog_search.parser.parser import load_posts
from blog_search.shared.config import POSTS_PATH, LOG_LEVEL, configure_logging

def main() -> None:
    parser = argparse.ArgumentParser(description="Build indexes from a posts file and print their sizes.")
    parser.add_argument("--posts", default=POSTS_PATH)
    parser.add_argument("--max-posts", type=int, default=None)
    parser.add_argument("--log-level", default=LOG_LEVEL)
    args = parser.parse_args()

    configure_logging(args.log_level)
    indexes = build_indexes(load_posts(args.posts, args.max_posts))
    for name, size in indexes.stats().items():
        print(f"{name:>9}: {size}")

if __name__ == "__main__":
    main()
