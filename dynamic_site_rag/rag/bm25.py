"""Field-weighted BM25 ranking over crawled documents."""

import logging
import math
import re
from typing import Sequence

from rank_bm25 import BM25Okapi

from .documents import Document, DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_FIELD_WEIGHTS = {"title": 2.0, "content": 1.0}

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Lowercase, replace punctuation with spaces and keep tokens longer than two characters."""
    return [token for token in _NON_WORD_RE.sub(" ", text.lower()).split() if len(token) > 2]


class _FieldBM25(BM25Okapi):
    """BM25Okapi with the non-negative Lucene IDF.

    The classic Okapi IDF is zero or negative for terms present in half the
    corpus or more, which would hide matches in very small crawls.
    """

    def _calc_idf(self, nd):
        for word, freq in nd.items():
            self.idf[word] = math.log(1 + (self.corpus_size - freq + 0.5) / (freq + 0.5))


class BM25Ranker:
    """Score documents against a query with one BM25 model per weighted field."""

    def __init__(
        self,
        documents: Sequence[Document],
        field_weights: dict[str, float] | None = None,
        k1: float = 1.5,
        b: float = 0.75,
    ):
        self.documents = list(documents)
        self.field_weights = dict(field_weights or DEFAULT_FIELD_WEIGHTS)
        self.models: dict[str, _FieldBM25] = {}

        if not self.documents:
            return

        for field_name in self.field_weights:
            corpus = [tokenize(getattr(doc, field_name, "") or "") for doc in self.documents]
            if not any(corpus):
                # Nothing to match in this field; avgdl would be zero
                logger.debug(f"[BM25] Field '{field_name}' is empty for every document, skipping")
                continue
            self.models[field_name] = _FieldBM25(corpus, k1=k1, b=b)

    def scores(self, query: str) -> list[float]:
        """Weighted BM25 score of every document, in input order."""
        totals = [0.0] * len(self.documents)
        query_tokens = tokenize(query)
        if not query_tokens:
            return totals

        for field_name, model in self.models.items():
            weight = self.field_weights[field_name]
            for idx, score in enumerate(model.get_scores(query_tokens)):
                totals[idx] += float(score) * weight

        return totals

    def search(self, query: str, top_k: int = 5) -> list[Document]:
        """Return up to ``top_k`` documents with a positive score, best first.

        Ties keep the original document order.
        """
        scores = self.scores(query)
        ranked = sorted(range(len(self.documents)), key=lambda idx: scores[idx], reverse=True)
        return [self.documents[idx] for idx in ranked if scores[idx] > 0][:top_k]


class LexicalSearcher:
    """BM25 search over a DocumentStore, rebuilding the ranker when the store changes."""

    def __init__(
        self,
        store: DocumentStore,
        field_weights: dict[str, float] | None = None,
        k1: float = 1.5,
        b: float = 0.75,
    ):
        self.store = store
        self.field_weights = field_weights
        self.k1 = k1
        self.b = b
        self._ranker: BM25Ranker | None = None

    def ranker(self) -> BM25Ranker:
        documents = list(self.store.documents)
        if self._ranker is None or self._ranker.documents != documents:
            logger.debug(f"[BM25] Building ranker over {len(documents)} documents")
            self._ranker = BM25Ranker(documents, self.field_weights, k1=self.k1, b=self.b)
        return self._ranker

    def search(self, query: str, top_k: int = 5) -> list[Document]:
        return self.ranker().search(query, top_k)
