"""Knowledge-base index for dynamic websites.

Main class tying together:
- Browser-driven crawling of JavaScript-rendered pages and SPAs
- Token chunking and embedding into an aligned document/vector store
- BM25, semantic and hybrid retrieval
- JSON knowledge-base export and import
"""

import logging
from pathlib import Path
from typing import Any, Iterable

from langchain_core.embeddings import Embeddings

from .bm25 import LexicalSearcher
from .browser import BrowserSession
from .chunker import TokenChunker
from .config import RAGConfig
from .crawler import CrawlStats, DynamicCrawler
from .documents import Document, DocumentStore, export_knowledge_base, import_knowledge_base
from .embeddings import EmbeddingClient, create_default_embeddings
from .external import ExternalCrawlRecord, ingest_crawl_records
from .hybrid import HybridSearcher
from .vector_store import SemanticSearcher

logger = logging.getLogger(__name__)


class DynamicSiteIndex:
    """Crawl dynamic sites into a knowledge base and search it."""

    def __init__(self, config: RAGConfig | None = None, embeddings: Embeddings | None = None, session=None):
        """Initialize the index.

        Args:
            config: RAG configuration (defaults to RAGConfig())
            embeddings: LangChain embeddings; the configured HuggingFace model
                is loaded on first use if omitted
            session: Optional started BrowserSession to crawl with. Without one,
                each crawl() launches and closes its own browser.
        """
        self.config = config or RAGConfig()
        self.session = session
        self.store = DocumentStore()
        self.chunker = TokenChunker(self.config.token_encoding)
        self.lexical_searcher = LexicalSearcher(
            self.store, self.config.field_weights, k1=self.config.bm25_k1, b=self.config.bm25_b
        )
        self.last_crawl_stats: CrawlStats | None = None

        # Components (lazy-loaded)
        self._embeddings = embeddings
        self._embedding_client: EmbeddingClient | None = None
        self._hybrid_searcher: HybridSearcher | None = None

    @property
    def embedding_client(self) -> EmbeddingClient:
        if self._embedding_client is None:
            if self._embeddings is None:
                self._embeddings = create_default_embeddings(self.config.embedding_model)
            self._embedding_client = EmbeddingClient(self._embeddings, timeout=self.config.embedding_timeout_seconds)
        return self._embedding_client

    @property
    def hybrid_searcher(self) -> HybridSearcher:
        if self._hybrid_searcher is None:
            semantic = SemanticSearcher(self.store, self.embedding_client)
            self._hybrid_searcher = HybridSearcher(semantic, self.lexical_searcher, self.config.candidate_multiplier)
        return self._hybrid_searcher

    def __len__(self) -> int:
        return len(self.store)

    async def crawl(self, url: str, depth: int = 0) -> CrawlStats:
        """Crawl ``url`` (and same-domain links up to ``depth``) into the store."""
        if self.session is not None:
            return await self._crawl_with(self.session, url, depth)

        async with BrowserSession.from_config(self.config) as session:
            return await self._crawl_with(session, url, depth)

    async def _crawl_with(self, session, url: str, depth: int) -> CrawlStats:
        crawler = DynamicCrawler(session, self.store, self.embedding_client, self.config, self.chunker)
        self.last_crawl_stats = await crawler.crawl_site(url, depth)
        logger.info(f"[RAG] Knowledge base now holds {len(self.store)} documents")
        return self.last_crawl_stats

    async def ingest_external(self, records: Iterable[ExternalCrawlRecord]) -> int:
        """Add pages produced by an external crawl-and-convert tool."""
        return await ingest_crawl_records(
            records,
            self.store,
            self.embedding_client,
            self.chunker,
            self.config.max_tokens,
            show_progress=self.config.show_progress,
        )

    async def semantic_search(self, query: str, top_k: int | None = None) -> list[Document]:
        return await self.hybrid_searcher.semantic_searcher.search(query, top_k or self.config.search_top_k)

    def lexical_search(self, query: str, top_k: int | None = None) -> list[Document]:
        return self.lexical_searcher.search(query, top_k or self.config.search_top_k)

    async def hybrid_search(self, query: str, top_k: int | None = None) -> list[Document]:
        if top_k is None:
            top_k = self.config.search_top_k

        if not len(self.store):
            logger.warning("[RAG] Knowledge base is empty, crawl or import first")
            return []

        logger.debug(f"[RAG] Searching for: {query}")
        return await self.hybrid_searcher.search(query, top_k)

    async def search(self, query: str, top_k: int | None = None) -> list[dict[str, Any]]:
        """Hybrid search returning plain result dicts."""
        results = []
        for rank, doc in enumerate(await self.hybrid_search(query, top_k), 1):
            results.append(
                {
                    "rank": rank,
                    "text": doc.content,
                    "url": doc.url,
                    "title": doc.title,
                    "source": doc.source,
                }
            )
        return results

    def export_knowledge_base(self, file_path: str | Path):
        export_knowledge_base(self.store, file_path)

    def import_knowledge_base(self, file_path: str | Path) -> bool:
        return import_knowledge_base(self.store, file_path)

    def reset(self):
        """Drop every document and embedding."""
        self.store.clear()
        logger.info("[RAG] Knowledge base cleared")
