import argparse
from typing import List

from blog_search.parser.parser import load_posts
from blog_search.parser.post_store import InMemoryPostStore
from blog_search.query.facade import SearchFacade
from blog_search.query.query import PostSearchEngine
from blog_search.shared.config import POSTS_PATH, LOG_LEVEL, configure_logging
from blog_search.shared.errors import BlogSearchError
from blog_search.shared.models import PostRecord, SearchOptions, SearchType


def main() -> None:
    parser = argparse.ArgumentParser(description="Interactive blog post search.")
    parser.add_argument("--posts", default=POSTS_PATH, help="Path to posts .jsonl file.")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    args = parser.parse_args()

    configure_logging(args.log_level)
    store = InMemoryPostStore(load_posts(args.posts))
    engine = PostSearchEngine(store.find_all)
    facade = SearchFacade(engine)
    store.add_listener(facade.on_post_changed)

    print("Type your query below, or '+exit' to quit.\n")

    while True:
        query: str = input("Enter query: ").strip()
        if query.lower() in {"+exit"}:
            print("\nExiting search engine.")
            break

        search_type = input("Search type [hash/binary/hybrid/author/tag]: ").strip().lower() or "hash"
        if search_type not in {t.value for t in SearchType}:
            print("Invalid choice. Please type hash, binary, hybrid, author or tag.\n")
            continue
        sort_by = input("Sort by [title/views/created/author] (default created): ").strip().lower() or "created"
        sort_order = input("Order [asc/desc] (default desc): ").strip().lower() or "desc"

        try:
            options = SearchOptions(search_type=SearchType(search_type), sort_by=sort_by, sort_order=sort_order)
            result = engine.search(query, options)
            posts: List[PostRecord] = result.posts

            if not posts:
                print("\nNo results found.\n")
                continue

            print(f"\nResults ({result.total_results} total, {result.elapsed_seconds * 1000:.2f} ms):")
            for i, post in enumerate(posts, start=1):
                print(f"{i}) [{post.id}] {post.title}  by {post.author_name}  views={post.views}")

            print(f"\n{facade.describe()}\n")

        except BlogSearchError as e:
            print(f"\nAn error occurred: {e}\n")


if __name__ == "__main__":
    main()
