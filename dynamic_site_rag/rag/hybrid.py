"""Hybrid retrieval: fuse semantic and BM25 result sets."""

import logging
from dataclasses import dataclass
from typing import Sequence

from .bm25 import LexicalSearcher
from .documents import Document
from .vector_store import SemanticSearcher

logger = logging.getLogger(__name__)

SEMANTIC_BASE_SCORE = 1.0
LEXICAL_ONLY_SCORE = 0.5
LEXICAL_AGREEMENT_BONUS = 1.0


@dataclass
class _Candidate:
    document: Document
    score: float
    in_both: bool = False


def fuse_results(semantic: Sequence[Document], lexical: Sequence[Document], top_k: int) -> list[Document]:
    """Merge two ranked lists, documents found by both retrievers first.

    Documents are matched by ``Document.key`` (url plus content prefix).
    Within the "found by both" and "found by one" groups candidates are
    ordered by accumulated score, then by first appearance.
    """
    merged: dict[tuple[str, str], _Candidate] = {}

    for doc in semantic:
        merged[doc.key] = _Candidate(doc, SEMANTIC_BASE_SCORE)

    for doc in lexical:
        existing = merged.get(doc.key)
        if existing is not None:
            existing.score += LEXICAL_AGREEMENT_BONUS
            existing.in_both = True
        else:
            merged[doc.key] = _Candidate(doc, LEXICAL_ONLY_SCORE)

    ranked = sorted(merged.values(), key=lambda c: (not c.in_both, -c.score))
    return [candidate.document for candidate in ranked[:top_k]]


class HybridSearcher:
    """Semantic + BM25 search over the same DocumentStore."""

    def __init__(
        self,
        semantic_searcher: SemanticSearcher,
        lexical_searcher: LexicalSearcher,
        candidate_multiplier: int = 2,
    ):
        self.semantic_searcher = semantic_searcher
        self.lexical_searcher = lexical_searcher
        self.candidate_multiplier = candidate_multiplier

    async def search(self, query: str, top_k: int = 5) -> list[Document]:
        """Fused ranking of both retrievers.

        An empty result is a normal outcome when neither retriever matches.
        """
        candidates = top_k * self.candidate_multiplier
        semantic = await self.semantic_searcher.search(query, candidates)
        lexical = self.lexical_searcher.search(query, candidates)
        logger.debug(f"[RAG] Hybrid candidates: {len(semantic)} semantic, {len(lexical)} lexical")
        return fuse_results(semantic, lexical, top_k)
