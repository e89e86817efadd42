"""Ingestion of pages crawled and converted to markdown by an external tool.

The external crawler writes a JSON array of ``{url, content, title, success}``
records. Pages without usable content are skipped, never fatal.
"""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from tqdm import tqdm

from .chunker import TokenChunker
from .documents import Document, DocumentStore
from .embeddings import EmbeddingClient

logger = logging.getLogger(__name__)

EXTERNAL_SOURCE = "external"


@dataclass
class ExternalCrawlRecord:
    """One page as reported by the external crawler."""

    url: str
    content: str = ""
    title: str | None = None
    success: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExternalCrawlRecord":
        return cls(
            url=data["url"],
            content=data.get("content") or "",
            title=data.get("title") or None,
            success=bool(data.get("success", False)),
        )

    @property
    def usable(self) -> bool:
        return self.success and bool(self.content.strip())


def load_crawl_records(file_path: str | Path) -> list[ExternalCrawlRecord]:
    """Read the external crawler's JSON output.

    Raises:
        ValueError: If the file does not contain a JSON array
    """
    data = json.loads(Path(file_path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of crawl records in {file_path}")
    return [ExternalCrawlRecord.from_dict(item) for item in data]


async def ingest_crawl_records(
    records: Iterable[ExternalCrawlRecord],
    store: DocumentStore,
    embedding_client: EmbeddingClient,
    chunker: TokenChunker,
    max_tokens: int,
    show_progress: bool = True,
) -> int:
    """Chunk, embed and store every usable record.

    Returns:
        Number of chunks added to the store
    """
    records = list(records)
    added = 0
    skipped = 0

    for record in tqdm(records, desc="Ingesting pages", unit="page", disable=not show_progress, file=sys.stderr):
        if not record.usable:
            skipped += 1
            logger.debug(f"[RAG] No usable content for {record.url}, skipping")
            continue

        title = record.title or record.url
        for index, chunk in enumerate(chunker.chunk(record.content, max_tokens)):
            embedding = await embedding_client.embed(chunk)
            if embedding is None:
                logger.warning(f"[RAG] Skipping chunk {index} of {record.url}: no embedding")
                continue

            store.append(
                Document(url=record.url, title=title, content=chunk, chunk_index=index, source=EXTERNAL_SOURCE),
                embedding,
            )
            added += 1

    logger.info(f"[RAG] Ingested {added} chunks from {len(records) - skipped} pages ({skipped} skipped)")
    return added
