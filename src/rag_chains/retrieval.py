from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING

import numpy as np
from rank_bm25 import BM25Okapi

from .chain import Chain
from .errors import InvalidArgumentError
from .schema import Document

if TYPE_CHECKING:
    from .index import IndexHandle

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")


def tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


class LuceneBM25(BM25Okapi):
    """BM25Okapi scoring with Lucene's IDF, which stays positive for common terms.

    BM25Okapi floors negative IDFs at a fraction of the average IDF, which is
    itself negative for small corpora, so a term shared by most documents
    would rank the shortest match last.
    """

    def _calc_idf(self, nd):
        for word, freq in nd.items():
            self.idf[word] = math.log(1 + (self.corpus_size - freq + 0.5) / (freq + 0.5))
        self.average_idf = sum(self.idf.values()) / len(self.idf) if self.idf else 0.0


def build_bm25(documents: list[Document]) -> LuceneBM25 | None:
    """Create a BM25 index over document contents.

    Args:
        documents: Documents used as the keyword-retrieval corpus.

    Returns:
        The index, or None when the corpus holds no tokens at all (BM25Okapi
        cannot be built over an empty corpus).
    """
    tokenized = [tokenize(document.content) for document in documents]
    if not any(tokenized):
        return None
    return LuceneBM25(tokenized)


def bm25_search(
    index: LuceneBM25 | None, query: str, documents: list[Document], top_k: int
) -> list[tuple[Document, float]]:
    """Run BM25 keyword retrieval and return top-ranked documents with scores.

    Only documents sharing at least one term with the query are returned.
    Equal scores keep index insertion order.

    Args:
        index: Pre-built BM25 index aligned with ``documents``.
        query: User query string.
        documents: Indexed documents in insertion order.
        top_k: Maximum number of results to return.

    Returns:
        ``(document, score)`` pairs sorted by descending BM25 score.
    """
    if top_k <= 0:
        raise InvalidArgumentError(f"top_k must be positive, got {top_k}")
    query_tokens = tokenize(query)
    if index is None or not query_tokens:
        return []

    scores = np.asarray(index.get_scores(query_tokens), dtype=np.float64)
    ranked = np.argsort(-scores, kind="stable")

    results: list[tuple[Document, float]] = []
    for idx in ranked:
        term_freqs = index.doc_freqs[idx]
        if not any(token in term_freqs for token in query_tokens):
            continue
        results.append((documents[idx], float(scores[idx])))
        if len(results) == top_k:
            break
    return results


class RetrievalChain(Chain[str, list[Document]]):
    """Retrieve the top documents for a question from a borrowed index handle.

    The handle is not owned: closing this chain leaves it open, so the same
    handle can back several compositions until its owner closes it. Each
    returned document is a copy carrying the query under ``question``.
    """

    def __init__(self, index: IndexHandle, max_results: int = 4):
        if max_results <= 0:
            raise InvalidArgumentError(f"max_results must be positive, got {max_results}")
        self.index = index
        self.max_results = max_results

    def run(self, input: str) -> list[Document]:
        hits = self.index.search(input, self.max_results)
        logger.debug("retrieved %d documents for %r", len(hits), input)
        return [document.with_metadata(question=input) for document in hits]
