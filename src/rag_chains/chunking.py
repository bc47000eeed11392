from __future__ import annotations

import logging
import re
from typing import Callable

import tiktoken

from .chain import Chain
from .errors import InvalidArgumentError
from .schema import Document

logger = logging.getLogger(__name__)

# A unit ends at sentence punctuation, a paragraph break or the end of the
# text, and keeps its trailing whitespace so chunks concatenate back exactly.
_UNIT_RE = re.compile(r".+?(?:[.!?]+(?=\s|\Z)|\n[ \t]*\n|\Z)\s*", re.DOTALL)


def split_units(text: str) -> list[str]:
    """Split text into sentence/paragraph units covering every character."""
    return _UNIT_RE.findall(text)


class TextSplitter:
    """Greedy sentence-boundary splitter driven by a token-counting callable.

    Units are accumulated until adding the next one would exceed
    ``max_tokens``. A single unit larger than the budget becomes its own
    oversized chunk.
    """

    def __init__(self, count_tokens: Callable[[str], int], max_tokens: int):
        if max_tokens <= 0:
            raise InvalidArgumentError(f"max_tokens must be positive, got {max_tokens}")
        self.count_tokens = count_tokens
        self.max_tokens = max_tokens

    def split(self, document: Document) -> list[Document]:
        """Split one document into chunks that inherit its metadata.

        Args:
            document: Document to split.

        Returns:
            The unchanged document in a one-element list when it fits the
            budget, otherwise the chunk documents in content order.
        """
        if self.count_tokens(document.content) <= self.max_tokens:
            return [document]

        chunks: list[str] = []
        current = ""
        current_tokens = 0
        for unit in split_units(document.content):
            unit_tokens = self.count_tokens(unit)
            if current and current_tokens + unit_tokens > self.max_tokens:
                chunks.append(current)
                current = ""
                current_tokens = 0
            current += unit
            current_tokens += unit_tokens
        if current:
            chunks.append(current)

        return [document.with_content(chunk) for chunk in chunks]


class TiktokenTextSplitter(TextSplitter):
    """Text splitter counting tokens with a tiktoken encoding."""

    def __init__(self, max_tokens: int, encoding_name: str = "cl100k_base"):
        self.encoding = tiktoken.get_encoding(encoding_name)
        super().__init__(lambda text: len(self.encoding.encode(text)), max_tokens)


class SplitDocumentsChain(Chain[list[Document], list[Document]]):
    """Apply a text splitter to every document, keeping document order."""

    def __init__(self, splitter: TextSplitter):
        self.splitter = splitter

    def run(self, input: list[Document]) -> list[Document]:
        chunks: list[Document] = []
        for document in input:
            chunks.extend(self.splitter.split(document))
        logger.debug("split %d documents into %d chunks", len(input), len(chunks))
        return chunks
