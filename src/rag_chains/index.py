"""Search index handle and the chain that writes documents into it.

An index lives in a directory holding one JSON-lines file of stored
documents. Writes are one-shot bulk commits: the new file is written next to
the old one and swapped in with a rename, so a failed write leaves the
previous index (or no index at all) behind.

An ``IndexHandle`` is owned by whoever opened it and must be closed exactly
once. Any number of threads may search an open handle concurrently; writing
while readers are active is not supported.
"""
from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path

from .chain import Chain
from .errors import IndexAccessError
from .io_utils import DOCUMENTS_FILE, load_documents, save_documents_atomic
from .retrieval import bm25_search, build_bm25
from .schema import Document

logger = logging.getLogger(__name__)


class IndexHandle:
    """Open, read-only view of an indexed document collection."""

    def __init__(self, documents: list[Document], path: Path | None = None):
        self.path = path
        self._documents = list(documents)
        self._bm25 = build_bm25(self._documents)
        self._closed = False
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: str | Path) -> IndexHandle:
        """Open the index stored at ``path`` for searching."""
        location = Path(path)
        documents_file = location / DOCUMENTS_FILE
        if not documents_file.is_file():
            raise IndexAccessError(f"no index found at {location}")
        try:
            documents = load_documents(documents_file)
        except (OSError, ValueError, TypeError) as exc:
            raise IndexAccessError(f"could not open index at {location}: {exc}", cause=exc) from exc
        return cls(documents, path=location)

    @classmethod
    def from_documents(cls, documents: list[Document]) -> IndexHandle:
        """Build an in-memory index that is never persisted."""
        return cls(documents)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        self._ensure_open()
        return len(self._documents)

    def search(self, query: str, k: int) -> list[Document]:
        """Return at most ``k`` documents ranked by descending BM25 relevance."""
        return [document for document, _ in self.search_with_scores(query, k)]

    def search_with_scores(self, query: str, k: int) -> list[tuple[Document, float]]:
        self._ensure_open()
        return bm25_search(self._bm25, query, self._documents, top_k=k)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._documents = []
            self._bm25 = None
        logger.debug("closed index %s", self.path or "<memory>")

    def _ensure_open(self) -> None:
        if self._closed:
            raise IndexAccessError("index handle is closed")

    def __enter__(self) -> IndexHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"IndexHandle(path={self.path!r}, {state})"


def write_index(documents: list[Document], path: str | Path) -> None:
    """Create the index at ``path`` or append ``documents`` to an existing one."""
    location = Path(path)
    created = not location.exists()
    try:
        location.mkdir(parents=True, exist_ok=True)
        documents_file = location / DOCUMENTS_FILE
        existing = load_documents(documents_file) if documents_file.is_file() else []
        save_documents_atomic(existing + list(documents), documents_file)
    except (OSError, ValueError, TypeError) as exc:
        if created:
            shutil.rmtree(location, ignore_errors=True)
        raise IndexAccessError(f"could not write index at {location}: {exc}", cause=exc) from exc
    logger.debug("committed %d documents to %s", len(documents), location)


class WriteDocumentsToIndexChain(Chain[list[Document], IndexHandle]):
    """Write documents to an on-disk index and return an open handle to it.

    The caller owns the returned handle and is responsible for closing it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def run(self, input: list[Document]) -> IndexHandle:
        write_index(input, self.path)
        return IndexHandle.open(self.path)
