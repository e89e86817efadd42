"""Token-bounded text chunking along paragraph and word boundaries."""

import logging
from functools import lru_cache

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"
PARAGRAPH_SEPARATOR = "\n\n"


@lru_cache(maxsize=None)
def _get_encoding(encoding_name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(encoding_name)


class TokenChunker:
    """Split text into segments whose token count stays within a budget.

    Paragraphs (separated by blank lines) are packed greedily. A paragraph that
    does not fit on its own is packed word by word instead. A single word that
    alone exceeds the budget is emitted as its own segment.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name

    @property
    def encoding(self) -> tiktoken.Encoding:
        # Loaded on first use; tiktoken may need to fetch the BPE file
        return _get_encoding(self.encoding_name)

    def count_tokens(self, text: str) -> int:
        return len(self.encoding.encode(text, disallowed_special=()))

    def chunk(self, text: str, max_tokens: int = 1000) -> list[str]:
        """Split ``text`` into segments of at most ``max_tokens`` tokens.

        Args:
            text: Text to split
            max_tokens: Token budget per segment

        Returns:
            Ordered list of non-empty segments

        Raises:
            ValueError: If max_tokens is less than 1
        """
        if max_tokens < 1:
            raise ValueError(f"max_tokens must be at least 1, got {max_tokens}")

        if not text.strip():
            return []

        if self.count_tokens(text) <= max_tokens:
            return [text]

        chunks: list[str] = []
        current: list[str] = []

        for paragraph in text.split(PARAGRAPH_SEPARATOR):
            if not paragraph.strip():
                continue

            if self.count_tokens(PARAGRAPH_SEPARATOR.join(current + [paragraph])) <= max_tokens:
                current.append(paragraph)
                continue

            if current:
                chunks.append(PARAGRAPH_SEPARATOR.join(current))
                current = []

            if self.count_tokens(paragraph) <= max_tokens:
                current = [paragraph]
            else:
                chunks.extend(self._split_words(paragraph, max_tokens))

        if current:
            chunks.append(PARAGRAPH_SEPARATOR.join(current))

        return chunks

    def _split_words(self, paragraph: str, max_tokens: int) -> list[str]:
        """Greedy word packing for a paragraph that exceeds the budget."""
        pieces: list[str] = []
        current: list[str] = []

        for word in paragraph.split():
            if self.count_tokens(" ".join(current + [word])) <= max_tokens:
                current.append(word)
                continue

            if current:
                pieces.append(" ".join(current))
            # An over-long word becomes its own segment
            current = [word]

        if current:
            pieces.append(" ".join(current))

        return pieces


def chunk_text(text: str, max_tokens: int = 1000, encoding_name: str = DEFAULT_ENCODING) -> list[str]:
    """Convenience wrapper around ``TokenChunker.chunk``."""
    return TokenChunker(encoding_name).chunk(text, max_tokens)
