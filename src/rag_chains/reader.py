"""PDF readers producing one Document per source file."""
from __future__ import annotations

import logging
from pathlib import Path

import fitz

from .chain import Chain
from .errors import ChainExecutionError
from .schema import Document

logger = logging.getLogger(__name__)


def _extract_text(pdf: fitz.Document) -> str:
    return "\n".join(page.get_text() or "" for page in pdf)


class ReadDocumentsFromPdfChain(Chain[Path, list[Document]]):
    """Read every ``*.pdf`` file in a directory, tagged with its file name as source."""

    def run(self, input: str | Path) -> list[Document]:
        directory = Path(input)
        if not directory.is_dir():
            raise ChainExecutionError(f"not a directory: {directory}", stage=self.name)

        documents: list[Document] = []
        for path in sorted(directory.glob("*.pdf")):
            try:
                with fitz.open(str(path)) as pdf:
                    content = _extract_text(pdf)
            except Exception as exc:
                raise ChainExecutionError(f"could not read {path}: {exc}", stage=self.name, cause=exc) from exc
            documents.append(Document(content=content, metadata={"source": path.name}))

        logger.debug("read %d pdf documents from %s", len(documents), directory)
        return documents


class ReadDocumentsFromPdfBytesChain(Chain[tuple[str, bytes], Document]):
    """Read a single in-memory PDF given as ``(source, data)``."""

    def run(self, input: tuple[str, bytes]) -> Document:
        source, data = input
        try:
            with fitz.open(stream=data, filetype="pdf") as pdf:
                content = _extract_text(pdf)
        except Exception as exc:
            raise ChainExecutionError(f"could not read {source}: {exc}", stage=self.name, cause=exc) from exc
        return Document(content=content, metadata={"source": source})
