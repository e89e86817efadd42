#!/usr/bin/env python3
"""Crawl a JavaScript-heavy site, then explore it interactively.

Crawls the given URL (clicking through tabs, accordions and other controls),
saves the knowledge base, and drops into a prompt where each line is answered
from the crawled content. Prefix a line with "?" to only list search results.

Usage:
    python examples/crawl_spa_interactive.py https://example.com --depth 1

    # Reuse a saved knowledge base instead of crawling again:
    python examples/crawl_spa_interactive.py --kb knowledge_base.json
"""

import argparse
import asyncio
import sys

from dynamic_site_rag import ResponseGenerator, ServerConfig, answer_query, configure_logging
from dynamic_site_rag.rag import DynamicSiteIndex, RAGConfig


async def interactive_session(index: DynamicSiteIndex, generator: ResponseGenerator):
    """Answer questions until EOF or 'quit'."""
    print("\n" + "=" * 70)
    print(f" {len(index)} documents loaded. Ask a question, '?query' to search, 'quit' to exit.")
    print("=" * 70)

    while True:
        try:
            user_input = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not user_input:
            continue
        if user_input.lower() in ("quit", "exit"):
            break

        if user_input.startswith("?"):
            for result in await index.search(user_input[1:].strip(), top_k=5):
                print(f"[{result['rank']}] {result['title']} <{result['url']}> ({result['source']})")
            continue

        answer = await answer_query(index, generator, user_input)
        print(f"\n{answer.answer}")
        for source in answer.sources:
            print(f"  - {source['url']}")


async def main_async(args) -> int:
    server_config = ServerConfig.from_env()
    configure_logging(server_config, "DEBUG" if args.verbose else "WARNING")

    index = DynamicSiteIndex(RAGConfig(max_interactions=args.max_interactions))

    if args.kb:
        if not index.import_knowledge_base(args.kb):
            print(f"Could not load {args.kb}", file=sys.stderr)
            return 1
    else:
        stats = await index.crawl(args.url, args.depth)
        print(
            f"Crawled {stats.pages_crawled} pages, {stats.interactions_yielding} interactions revealed new content"
        )
        index.export_knowledge_base(args.output)
        print(f"Saved knowledge base to {args.output}")

    await interactive_session(index, ResponseGenerator(server_config))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Crawl a dynamic site and query it interactively")
    parser.add_argument("url", nargs="?", help="Site to crawl")
    parser.add_argument("--kb", help="Existing knowledge-base file to load instead of crawling")
    parser.add_argument("--depth", type=int, default=1, help="Same-domain link depth (default: 1)")
    parser.add_argument("--max-interactions", type=int, default=5, help="Elements clicked per page (default: 5)")
    parser.add_argument("--output", default="knowledge_base.json", help="Where to save the crawl")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if not args.url and not args.kb:
        parser.error("either a URL or --kb is required")

    return asyncio.run(main_async(args))


if __name__ == "__main__":
    sys.exit(main())
