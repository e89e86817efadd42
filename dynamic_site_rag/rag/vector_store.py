"""Cosine-similarity search over the embeddings held in a DocumentStore."""

import logging
from typing import Sequence

import numpy as np

from .documents import Document, DocumentStore
from .embeddings import EmbeddingClient

logger = logging.getLogger(__name__)


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors have different dimensions
    """
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Cannot compare vectors of dimension {a.shape} and {b.shape}")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def rank_by_similarity(query_vector: Sequence[float], vectors: Sequence[Sequence[float]], top_k: int) -> list[int]:
    """Indices of the ``top_k`` most similar vectors, best first (ties keep store order)."""
    similarities = [cosine_similarity(query_vector, vector) for vector in vectors]
    ranked = sorted(range(len(similarities)), key=lambda idx: similarities[idx], reverse=True)
    return ranked[:top_k]


class SemanticSearcher:
    """Rank stored documents by embedding similarity to a query."""

    def __init__(self, store: DocumentStore, embedding_client: EmbeddingClient):
        self.store = store
        self.embedding_client = embedding_client

    async def search(self, query: str, top_k: int = 5) -> list[Document]:
        """Return the ``top_k`` most similar documents.

        An unavailable query embedding means no semantic signal: the result is
        empty instead of an error.
        """
        query_vector = await self.embedding_client.embed(query)
        if query_vector is None:
            logger.warning("[RAG] No query embedding available, semantic search returns nothing")
            return []

        documents = self.store.documents
        vectors = self.store.vectors[: len(documents)]

        try:
            ranked = rank_by_similarity(query_vector, [entry.embedding for entry in vectors], top_k)
        except ValueError as e:
            logger.error(f"[RAG] Semantic search failed: {e}")
            return []

        return [documents[idx] for idx in ranked]
