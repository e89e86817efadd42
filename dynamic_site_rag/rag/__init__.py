"""Dynamic-site crawling and hybrid retrieval.

Requires the browser and embedding dependencies (playwright, tiktoken,
rank-bm25, langchain-huggingface).
"""

from .bm25 import BM25Ranker, LexicalSearcher, tokenize
from .browser import BrowserSession, PageDriver
from .chunker import TokenChunker, chunk_text
from .config import COUNT_NOOP_INTERACTIONS, RAGConfig
from .crawler import CrawlStats, DynamicCrawler, select_followable_links
from .documents import Document, DocumentStore, VectorEntry, export_knowledge_base, import_knowledge_base
from .embeddings import EmbeddingClient, create_default_embeddings
from .explorer import DEFAULT_INTERACTIVE_SELECTORS, InteractiveElement, explore_interactive_elements
from .external import ExternalCrawlRecord, ingest_crawl_records, load_crawl_records
from .extract import extract_title, html_to_structured_text
from .hybrid import HybridSearcher, fuse_results
from .indexer import DynamicSiteIndex
from .vector_store import SemanticSearcher, cosine_similarity

__all__ = [
    "COUNT_NOOP_INTERACTIONS",
    "DEFAULT_INTERACTIVE_SELECTORS",
    "BM25Ranker",
    "BrowserSession",
    "CrawlStats",
    "Document",
    "DocumentStore",
    "DynamicCrawler",
    "DynamicSiteIndex",
    "EmbeddingClient",
    "ExternalCrawlRecord",
    "HybridSearcher",
    "InteractiveElement",
    "LexicalSearcher",
    "PageDriver",
    "RAGConfig",
    "SemanticSearcher",
    "TokenChunker",
    "VectorEntry",
    "chunk_text",
    "cosine_similarity",
    "create_default_embeddings",
    "explore_interactive_elements",
    "export_knowledge_base",
    "extract_title",
    "fuse_results",
    "html_to_structured_text",
    "import_knowledge_base",
    "ingest_crawl_records",
    "load_crawl_records",
    "select_followable_links",
    "tokenize",
]
