"""Dynamic Site RAG - answer questions from JavaScript-rendered websites."""

from .config import ServerConfig
from .logging_setup import configure_logging
from .responder import INSUFFICIENT_INFORMATION_ANSWER, Answer, ResponseGenerator, answer_query
from .tools import create_site_search_tool

# The crawler and retrieval core live in the rag subpackage:
# - from dynamic_site_rag.rag import DynamicSiteIndex, RAGConfig

__version__ = "0.1.0"
__all__ = [
    "INSUFFICIENT_INFORMATION_ANSWER",
    "Answer",
    "ResponseGenerator",
    "ServerConfig",
    "answer_query",
    "configure_logging",
    "create_site_search_tool",
]
