"""Document and vector storage with knowledge-base persistence.

Documents and their embeddings live in two parallel sequences: position ``i``
of the vector sequence is the embedding of document ``i``. Every mutation goes
through ``DocumentStore`` so the two sequences can never drift apart.
"""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Sequence

logger = logging.getLogger(__name__)

# Number of leading content characters used to identify a chunk across result sets
DOCUMENT_KEY_PREFIX_CHARS = 50


@dataclass(frozen=True)
class Document:
    """One chunk of crawled content."""

    url: str
    title: str
    content: str
    chunk_index: int | None = None
    source: str = "initial"

    @property
    def key(self) -> tuple[str, str]:
        """Approximate identity used when merging result sets."""
        return (self.url, self.content[:DOCUMENT_KEY_PREFIX_CHARS])

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "title": self.title, "content": self.content, "source": self.source}
        if self.chunk_index is not None:
            data["chunkIndex"] = self.chunk_index
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        return cls(
            url=data["url"],
            title=data.get("title") or data["url"],
            content=data.get("content", ""),
            chunk_index=data.get("chunkIndex"),
            source=data.get("source", "initial"),
        )


@dataclass(frozen=True)
class VectorEntry:
    """Embedding of the document at the same position in the store."""

    url: str
    embedding: tuple[float, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "embedding": list(self.embedding)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VectorEntry":
        return cls(url=data["url"], embedding=tuple(float(x) for x in data["embedding"]))


class DocumentStore:
    """Append-only store keeping documents and vector entries positionally aligned."""

    def __init__(self):
        self._lock = threading.Lock()
        self._documents: list[Document] = []
        self._vectors: list[VectorEntry] = []

    def append(self, document: Document, embedding: Sequence[float]) -> int:
        """Append a document together with its embedding.

        Returns:
            Position of the new entry
        """
        entry = VectorEntry(url=document.url, embedding=tuple(float(x) for x in embedding))
        with self._lock:
            self._documents.append(document)
            self._vectors.append(entry)
            return len(self._documents) - 1

    def get(self, index: int) -> tuple[Document, VectorEntry]:
        with self._lock:
            return self._documents[index], self._vectors[index]

    def size(self) -> int:
        with self._lock:
            return len(self._documents)

    def __len__(self) -> int:
        return self.size()

    @property
    def documents(self) -> tuple[Document, ...]:
        with self._lock:
            return tuple(self._documents)

    @property
    def vectors(self) -> tuple[VectorEntry, ...]:
        with self._lock:
            return tuple(self._vectors)

    def replace(self, documents: Iterable[Document], vectors: Iterable[VectorEntry]):
        """Swap the whole contents in one step.

        Raises:
            ValueError: If the two sequences have different lengths
        """
        documents = list(documents)
        vectors = list(vectors)
        if len(documents) != len(vectors):
            raise ValueError(
                f"Documents and vector entries must align, got {len(documents)} documents "
                f"and {len(vectors)} vector entries"
            )
        with self._lock:
            self._documents = documents
            self._vectors = vectors

    def clear(self):
        with self._lock:
            self._documents = []
            self._vectors = []


def export_knowledge_base(store: DocumentStore, file_path: str | Path):
    """Write documents and vectors to a JSON knowledge-base file."""
    file_path = Path(file_path)
    # Snapshot under one lock acquisition each; append-only so lengths match
    documents = store.documents
    vectors = store.vectors[: len(documents)]
    data = {
        "documents": [doc.to_dict() for doc in documents],
        "vectorStore": [entry.to_dict() for entry in vectors],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info(f"[KB] Exported {len(documents)} documents to {file_path}")


def import_knowledge_base(store: DocumentStore, file_path: str | Path) -> bool:
    """Load a knowledge-base file, replacing the store only on full success.

    Returns:
        True if the store was replaced, False if the file could not be used
    """
    file_path = Path(file_path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        documents = [Document.from_dict(item) for item in data.get("documents") or []]
        vectors = [VectorEntry.from_dict(item) for item in data.get("vectorStore") or []]
        store.replace(documents, vectors)
    except Exception as e:
        logger.error(f"[KB] Failed to import knowledge base from {file_path}: {e}")
        return False

    logger.info(f"[KB] Imported {len(documents)} documents from {file_path}")
    return True
