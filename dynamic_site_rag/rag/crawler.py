"""Dynamic-site crawler for JavaScript-rendered pages and SPAs.

For each URL the crawler:
1. Loads the page in an isolated browsing context and lets it settle
2. Captures the rendered content (chunk -> embed -> store)
3. Clicks through tabs, accordions, buttons, ... re-capturing whatever they reveal
4. Follows a few same-domain links, depth first
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from tqdm import tqdm

from .chunker import TokenChunker
from .config import COUNT_NOOP_INTERACTIONS, RAGConfig
from .documents import Document, DocumentStore
from .embeddings import EmbeddingClient
from .explorer import DEFAULT_INTERACTIVE_SELECTORS, InteractiveElement, explore_interactive_elements
from .extract import extract_title, html_to_structured_text

logger = logging.getLogger(__name__)

INITIAL_SOURCE = "initial"

__all__ = [
    "COUNT_NOOP_INTERACTIONS",
    "INITIAL_SOURCE",
    "CrawlStats",
    "DynamicCrawler",
    "interaction_source",
    "select_followable_links",
]


def interaction_source(category: str, element_text: str) -> str:
    """Source tag for content revealed by clicking an element."""
    return f"interaction:{category}:{element_text}"


def select_followable_links(
    base_url: str,
    hrefs: list[str | None],
    visited: set[str],
    limit: int = 5,
    origin_url: str | None = None,
) -> list[str]:
    """Pick the same-domain links worth following from a page.

    Args:
        base_url: URL the hrefs are relative to
        hrefs: Raw href attribute values
        visited: URLs already crawled in this crawl tree
        limit: Maximum number of links returned
        origin_url: URL whose hostname links must share (defaults to base_url)

    Returns:
        Absolute URLs in page order, without duplicates
    """
    hostname = urlparse(origin_url or base_url).hostname
    links: list[str] = []

    for href in hrefs:
        if len(links) >= limit:
            break
        if not href:
            continue

        href = href.strip()
        if not href or href.startswith("#") or href.lower().startswith("javascript:"):
            continue

        try:
            absolute = urljoin(base_url, href)
            parsed = urlparse(absolute)
        except ValueError:
            logger.debug(f"[CRAWLER] Skipping malformed link: {href}")
            continue

        if parsed.scheme not in ("http", "https") or parsed.hostname != hostname:
            continue
        if absolute in visited or absolute in links:
            continue

        links.append(absolute)

    return links


@dataclass
class CrawlStats:
    """Counters for one top-level crawl."""

    pages_crawled: int = 0
    pages_failed: int = 0
    documents_added: int = 0
    embedding_failures: int = 0
    interactions_attempted: int = 0
    interactions_yielding: int = 0
    interactions_unchanged: int = 0
    interactions_failed: int = 0
    spa_navigations: int = 0


class DynamicCrawler:
    """Browser-driven crawler feeding a DocumentStore."""

    def __init__(
        self,
        session,
        store: DocumentStore,
        embedding_client: EmbeddingClient,
        config: RAGConfig | None = None,
        chunker: TokenChunker | None = None,
    ):
        """Initialize the crawler.

        Args:
            session: Started BrowserSession (anything providing ``open_page()``)
            store: Store receiving documents and embeddings
            embedding_client: Client used to embed each chunk
            config: RAG configuration (defaults to RAGConfig())
            chunker: Token chunker (defaults to one using config.token_encoding)
        """
        self.session = session
        self.store = store
        self.embedding_client = embedding_client
        self.config = config or RAGConfig()
        self.chunker = chunker or TokenChunker(self.config.token_encoding)
        self.selectors = self.config.interactive_selectors or DEFAULT_INTERACTIVE_SELECTORS

        # url -> elements discovered there, kept for debugging
        self.interactive_elements: dict[str, list[InteractiveElement]] = {}
        self.stats = CrawlStats()

    async def crawl_site(self, url: str, depth: int = 0) -> CrawlStats:
        """Crawl ``url`` and its same-domain neighbourhood within the configured time budget.

        On timeout the crawl is cancelled; content stored so far is kept.

        Returns:
            Statistics for this crawl
        """
        self.stats = CrawlStats()
        visited_urls: set[str] = set()
        timeout = self.config.crawl_timeout_seconds

        logger.info(f"[CRAWLER] Starting crawl from {url} (depth: {depth})")
        try:
            await asyncio.wait_for(self.crawl(url, depth, visited_urls), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[CRAWLER] Crawl budget of {timeout}s exhausted, keeping partial results")

        logger.info(
            f"[CRAWLER] Crawl finished: {self.stats.pages_crawled} pages, "
            f"{self.stats.documents_added} documents, {self.stats.pages_failed} failed pages"
        )
        return self.stats

    async def crawl(self, url: str, depth: int = 0, visited_urls: set[str] | None = None):
        """Crawl one URL, then recurse into same-domain links while depth remains.

        A failure anywhere in this URL's handling is logged and ends this
        branch only; the browsing context is always closed.
        """
        if visited_urls is None:
            visited_urls = set()

        if url in visited_urls or depth < 0:
            return

        logger.info(f"[CRAWLER] Crawling: {url} (depth: {depth})")
        visited_urls.add(url)

        try:
            async with self.session.open_page() as page:
                await self._crawl_page(page, url, depth, visited_urls)
        except Exception as e:
            self.stats.pages_failed += 1
            logger.error(f"[CRAWLER] Error crawling {url}: {e}")

    async def _crawl_page(self, page, url: str, depth: int, visited_urls: set[str]):
        await page.navigate(url)
        html = await self._settle(page)

        text = html_to_structured_text(html)
        title = extract_title(html) or url
        self.stats.pages_crawled += 1
        await self._store_content(text, url, title, INITIAL_SOURCE)

        elements = await explore_interactive_elements(page, self.selectors)
        self.interactive_elements[url] = elements
        logger.info(f"[CRAWLER] {len(elements)} interactive elements on {url}")

        await self._interaction_loop(page, url, depth, visited_urls, elements, text)

        if depth > 0:
            hrefs = await page.enumerate_links()
            links = select_followable_links(
                page.current_url(), hrefs, visited_urls, self.config.max_links_per_page, origin_url=url
            )
            logger.info(f"[CRAWLER] Following {len(links)} links from {url}")

            for link in tqdm(
                links,
                desc=f"Following links (depth {depth})",
                unit="page",
                disable=not self.config.show_progress,
                file=sys.stderr,
                leave=False,
            ):
                await self.crawl(link, depth - 1, visited_urls)

    async def _settle(self, page) -> str:
        """Wait for the page to quiet down, then snapshot it.

        Slow pages are captured as-is once the timeout expires.
        """
        try:
            if not await page.wait_for_quiescence(self.config.settle_timeout_ms):
                logger.warning(
                    f"[CRAWLER] Network not idle after {self.config.settle_timeout_ms}ms, "
                    "proceeding with current content"
                )
            await page.pause(self.config.post_settle_delay_ms)
        except Exception as e:
            logger.warning(f"[CRAWLER] Warning while waiting for page load: {e}. Proceeding with current content.")

        return await page.snapshot_html()

    async def _interaction_loop(
        self,
        page,
        url: str,
        depth: int,
        visited_urls: set[str],
        elements: list[InteractiveElement],
        previous_text: str,
    ):
        """Click through discovered elements, storing whatever new content appears."""
        budget_used = 0

        for element in tqdm(
            elements,
            desc="Interacting",
            unit="element",
            disable=not self.config.show_progress,
            file=sys.stderr,
            leave=False,
        ):
            if budget_used >= self.config.max_interactions:
                break

            self.stats.interactions_attempted += 1
            try:
                previous_text, changed = await self._interact(page, url, depth, visited_urls, element, previous_text)
            except Exception as e:
                self.stats.interactions_failed += 1
                logger.warning(f"[CRAWLER] Error interacting with element ({element.text}): {e}")
                changed = False

            if changed or self.config.count_noop_interactions:
                budget_used += 1

    async def _interact(
        self,
        page,
        url: str,
        depth: int,
        visited_urls: set[str],
        element: InteractiveElement,
        previous_text: str,
    ) -> tuple[str, bool]:
        """Click one element and capture the result.

        Returns:
            (latest captured text, whether it differed from previous_text)
        """
        await page.scroll_into_view(element.handle)
        await page.pause(self.config.scroll_settle_ms)
        await page.click(element.handle)
        await page.pause(self.config.interaction_delay_ms)

        new_url = page.current_url()
        navigated = new_url != url

        new_html = await self._settle(page)
        new_text = html_to_structured_text(new_html)
        if new_text == previous_text:
            self.stats.interactions_unchanged += 1
            logger.debug(f"[CRAWLER] No new content after clicking {element.category} '{element.text}'")
            return previous_text, False

        title = extract_title(new_html) or new_url
        await self._store_content(new_text, new_url, title, interaction_source(element.category, element.text))
        self.stats.interactions_yielding += 1

        if navigated and depth > 0:
            # SPA route change: remember it and return to the original page state
            self.stats.spa_navigations += 1
            visited_urls.add(new_url)
            logger.info(f"[CRAWLER] SPA navigation {url} -> {new_url}, going back")
            await page.go_back()
            await self._settle(page)

        return new_text, True

    async def _store_content(self, text: str, url: str, title: str, source: str) -> int:
        """Chunk, embed and store ``text``. Chunks that fail to embed are skipped."""
        added = 0
        for index, chunk in enumerate(self.chunker.chunk(text, self.config.max_tokens)):
            embedding = await self.embedding_client.embed(chunk)
            if embedding is None:
                self.stats.embedding_failures += 1
                logger.warning(f"[CRAWLER] Skipping chunk {index} of {url}: no embedding")
                continue

            self.store.append(
                Document(url=url, title=title, content=chunk, chunk_index=index, source=source),
                embedding,
            )
            added += 1

        self.stats.documents_added += added
        logger.debug(f"[CRAWLER] Stored {added} chunks from {url} ({source})")
        return added
