"""Embedding client adapter.

Any LangChain ``Embeddings`` implementation can back the client. Failures and
timeouts are reported as "no vector available" rather than raised.
"""

import asyncio
import logging
import time

from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Turn text into a fixed-length vector with a bounded wait."""

    def __init__(self, embeddings: Embeddings, timeout: float | None = 30.0):
        """Initialize the client.

        Args:
            embeddings: LangChain embeddings implementation
            timeout: Seconds to wait for a single embedding call (None = no limit)
        """
        self.embeddings = embeddings
        self.timeout = timeout

    async def embed(self, text: str) -> list[float] | None:
        """Embed ``text``.

        Returns:
            The embedding vector, or None if the service failed or timed out
        """
        try:
            vector = await asyncio.wait_for(self.embeddings.aembed_query(text), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[EMBED] Embedding call timed out after {self.timeout}s ({len(text)} chars)")
            return None
        except Exception as e:
            logger.warning(f"[EMBED] Embedding call failed: {e}")
            return None

        if not vector:
            logger.warning("[EMBED] Embedding service returned an empty vector")
            return None

        return [float(x) for x in vector]


def create_default_embeddings(model_name: str = "all-MiniLM-L6-v2") -> Embeddings:
    """Load a HuggingFace sentence-transformer on the best available device."""
    import torch
    from langchain_huggingface import HuggingFaceEmbeddings

    logger.info(f"[EMBED] Loading embedding model: {model_name}...")
    start = time.time()
    # Auto-detect best device (MPS for Apple Silicon, CUDA for NVIDIA, else CPU)
    if torch.backends.mps.is_available():
        device = "mps"
    elif torch.cuda.is_available():
        device = "cuda"
    else:
        device = "cpu"
    logger.info(f"[EMBED] Using device: {device}")

    embeddings = HuggingFaceEmbeddings(
        model_name=model_name,
        model_kwargs={"device": device},
        encode_kwargs={"normalize_embeddings": True},
    )
    logger.info(f"[EMBED] ✓ Embedding model loaded in {time.time() - start:.1f}s")
    return embeddings
