"""LangChain tool exposing knowledge-base search to tool-calling LLMs."""

import asyncio
from typing import TYPE_CHECKING

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .rag.indexer import DynamicSiteIndex


class SiteSearchInput(BaseModel):
    """Input schema for site search tool."""

    query: str = Field(description="What to look for in the crawled site content (e.g., 'pricing tiers', 'OAuth login')")
    top_k: int | None = Field(default=None, description="Maximum number of results to return. Defaults to the tool's configured value.")


def format_results(results: list[dict]) -> str:
    """Render search results as numbered text blocks."""
    if not results:
        return "No relevant content found in the crawled sites."

    blocks = []
    for result in results:
        blocks.append(f"[{result['rank']}] {result['title']} ({result['url']})\n{result['text']}")
    return "\n\n".join(blocks)


def create_site_search_tool(index: "DynamicSiteIndex", top_k: int = 5) -> StructuredTool:
    """Create a search tool over an index's knowledge base.

    The sync entry point (``invoke``) runs the search with ``asyncio.run`` and
    therefore only works when no event loop is running in the calling thread.
    Inside a running loop use ``ainvoke``.

    Args:
        index: DynamicSiteIndex holding crawled documents
        top_k: Number of results when the caller does not pass one

    Returns:
        LangChain StructuredTool for hybrid knowledge-base search

    Example:
        >>> index = DynamicSiteIndex(RAGConfig())
        >>> index.import_knowledge_base("knowledge_base.json")
        >>> site_search = create_site_search_tool(index)
        >>> site_search.invoke({"query": "OAuth login", "top_k": 3})
    """
    default_top_k = top_k

    def _site_search(query: str, top_k: int | None = None) -> str:
        return format_results(asyncio.run(index.search(query, top_k or default_top_k)))

    async def _asite_search(query: str, top_k: int | None = None) -> str:
        return format_results(await index.search(query, top_k or default_top_k))

    return StructuredTool.from_function(
        func=_site_search,
        coroutine=_asite_search,
        name="site_search",
        description="Search content crawled from dynamic websites (including text revealed by tabs, accordions and SPA navigation). Returns numbered passages with their source URLs.",
        args_schema=SiteSearchInput,
    )
