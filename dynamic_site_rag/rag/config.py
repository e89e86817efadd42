"""RAG configuration dataclass."""

from dataclasses import dataclass, field

# Realistic desktop user agent so SPAs serve their full client bundle
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# Interactions that reveal no new content (or fail) still use up the per-page budget
COUNT_NOOP_INTERACTIONS = True


@dataclass
class RAGConfig:
    """Configuration for dynamic-site crawling, chunking and hybrid search.

    Attributes:
        # Crawling settings
        max_interactions: Maximum interactive elements tried per page (default: 5)
        interaction_delay_ms: Wait after each click before re-capturing (default: 1000)
        scroll_settle_ms: Wait after scrolling an element into view (default: 300)
        settle_timeout_ms: Upper bound for the network-idle wait (default: 5000).
            On timeout the crawler proceeds with whatever is rendered.
        post_settle_delay_ms: Extra delay after settling for trailing JS (default: 1000)
        navigation_timeout_ms: Default Playwright timeout per page (default: 30000)
        max_links_per_page: Same-domain links followed per page (default: 5)
        count_noop_interactions: If True, interactions that reveal nothing new
            (or fail) still consume the max_interactions budget.
        crawl_timeout_seconds: Wall-clock budget for one top-level crawl (None = unbounded)
        headless: Run Chromium headless (default: True)
        user_agent: User agent for each isolated browsing context
        viewport_width / viewport_height: Fixed viewport size
        interactive_selectors: Optional override of category -> selectors

        # Chunking settings
        max_tokens: Maximum tokens per chunk (default: 8000)
        token_encoding: tiktoken encoding used for counting (default: cl100k_base)

        # Search settings
        field_weights: BM25 field weights (default: title=2, content=1)
        bm25_k1 / bm25_b: BM25 saturation and length normalization
        search_top_k: Default number of results to return (default: 5)
        candidate_multiplier: Each retriever fetches search_top_k * this candidates (default: 2)

        # Embedding settings
        embedding_model: HuggingFace embedding model name
        embedding_timeout_seconds: Timeout for a single embedding call (default: 30)
    """

    # Crawling settings
    max_interactions: int = 5
    interaction_delay_ms: int = 1000
    scroll_settle_ms: int = 300
    settle_timeout_ms: int = 5000
    post_settle_delay_ms: int = 1000
    navigation_timeout_ms: int = 30000
    max_links_per_page: int = 5
    count_noop_interactions: bool = COUNT_NOOP_INTERACTIONS
    crawl_timeout_seconds: float | None = None
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1280
    viewport_height: int = 800
    interactive_selectors: dict[str, list[str]] | None = None

    # Chunking settings
    max_tokens: int = 8000
    token_encoding: str = "cl100k_base"

    # Search settings
    field_weights: dict[str, float] = field(default_factory=lambda: {"title": 2.0, "content": 1.0})
    bm25_k1: float = 1.5
    bm25_b: float = 0.75
    search_top_k: int = 5
    candidate_multiplier: int = 2

    # Embedding settings
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_timeout_seconds: float = 30.0

    show_progress: bool = True

    def __post_init__(self):
        """Validate numeric settings."""
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be at least 1, got {self.max_tokens}")
        if self.max_interactions < 0:
            raise ValueError(f"max_interactions cannot be negative, got {self.max_interactions}")
        if self.max_links_per_page < 0:
            raise ValueError(f"max_links_per_page cannot be negative, got {self.max_links_per_page}")
        if self.candidate_multiplier < 1:
            raise ValueError(f"candidate_multiplier must be at least 1, got {self.candidate_multiplier}")
        if self.embedding_timeout_seconds <= 0:
            raise ValueError(f"embedding_timeout_seconds must be positive, got {self.embedding_timeout_seconds}")
        if not self.field_weights:
            raise ValueError("field_weights must name at least one document field")

        unknown_fields = set(self.field_weights) - {"title", "content", "url", "source"}
        if unknown_fields:
            raise ValueError(f"Unknown BM25 fields: {', '.join(sorted(unknown_fields))}")
