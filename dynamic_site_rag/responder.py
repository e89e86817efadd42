"""Answer generation from retrieved documents."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Sequence

import requests

from .backends import call_backend
from .config import ServerConfig
from .rag.documents import Document

logger = logging.getLogger(__name__)

INSUFFICIENT_INFORMATION_ANSWER = "I don't have enough information to answer this question accurately."
ERROR_ANSWER = "I encountered an error while processing your question."

PROMPT_TEMPLATE = """You are a helpful AI assistant with access to information about websites. Answer the following question based ONLY on the provided context. If the context doesn't contain enough information to answer fully, acknowledge that and explain what additional information would help.

Context:
{context}

Question: {query}

Provide a concise, accurate answer. If you reference specific information, indicate which numbered source ([1], [2], etc.) it came from."""


@dataclass
class Answer:
    """Generated answer and the documents it was based on."""

    answer: str
    sources: list[dict[str, str]] = field(default_factory=list)


def build_context(documents: Sequence[Document]) -> str:
    """Numbered context blocks, one per document."""
    return "\n\n".join(f"[{i}] From {doc.url}:\n{doc.content}" for i, doc in enumerate(documents, 1))


class ResponseGenerator:
    """Turn a query and ranked documents into an answer with sources."""

    def __init__(self, config: ServerConfig | None = None):
        self.config = config or ServerConfig()

    def generate(self, query: str, documents: Sequence[Document]) -> Answer:
        """Answer ``query`` from ``documents`` only.

        With no documents the backend is not called and an explicit
        "insufficient information" answer is returned.
        """
        if not documents:
            logger.info("[RESPONDER] No relevant documents, declining to answer")
            return Answer(answer=INSUFFICIENT_INFORMATION_ANSWER, sources=[])

        prompt = PROMPT_TEMPLATE.format(context=build_context(documents), query=query)
        messages = [{"role": "user", "content": prompt}]

        try:
            content = self._call_with_retry(messages)
        except Exception as e:
            logger.error(f"[RESPONDER] Error generating response: {e}")
            return Answer(answer=ERROR_ANSWER, sources=[])

        return Answer(answer=content, sources=[{"url": doc.url, "title": doc.title} for doc in documents])

    def _call_with_retry(self, messages: list[dict]) -> str:
        """Call the backend, retrying connection errors with exponential backoff."""
        delay = self.config.BACKEND_RETRY_INITIAL_DELAY
        attempts = max(1, self.config.BACKEND_RETRY_ATTEMPTS)

        attempt = 1
        while True:
            try:
                return call_backend(
                    messages,
                    self.config,
                    temperature=self.config.DEFAULT_TEMPERATURE,
                    max_tokens=self.config.MAX_RESPONSE_TOKENS,
                )
            except requests.ConnectionError as e:
                if attempt >= attempts:
                    raise
                logger.warning(f"[RESPONDER] Backend connection failed (attempt {attempt}/{attempts}): {e}")
                time.sleep(delay)
                delay *= 2
                attempt += 1

    async def agenerate(self, query: str, documents: Sequence[Document]) -> Answer:
        """Non-blocking variant of ``generate`` for use inside the event loop."""
        return await asyncio.to_thread(self.generate, query, documents)


async def answer_query(index, generator: ResponseGenerator, query: str, top_k: int = 3) -> Answer:
    """Retrieve with hybrid search, then generate an answer."""
    documents = await index.hybrid_search(query, top_k)
    return await generator.agenerate(query, documents)
