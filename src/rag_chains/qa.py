from __future__ import annotations

import re
from typing import Callable, Mapping

from .chain import Chain
from .errors import ChainError, ChainExecutionError
from .schema import AnswerWithSources, Document

ContentTransformer = Chain[Mapping[str, str], str] | Callable[[Mapping[str, str]], str]

# "Source:" or "Sources:", any case, optionally on its own line.
_SOURCES_HEADER_RE = re.compile(r"\s*\bsources?:", re.IGNORECASE)


def document_variables(document: Document) -> dict[str, str]:
    """Template variables for one document: its metadata plus ``content``."""
    return {**document.metadata, "content": document.content}


class ModifyDocumentsContentChain(Chain[list[Document], list[Document]]):
    """Replace each document's content with the transformer's output.

    The transformer receives the document's template variables (metadata plus
    ``content``). Order and count are preserved; the first failure fails the
    whole stage.
    """

    def __init__(self, transformer: ContentTransformer):
        self.transformer = transformer

    def run(self, input: list[Document]) -> list[Document]:
        transform = self.transformer.run if isinstance(self.transformer, Chain) else self.transformer
        modified: list[Document] = []
        for position, document in enumerate(input):
            try:
                content = transform(document_variables(document))
            except ChainError:
                raise
            except Exception as exc:
                raise ChainExecutionError(
                    f"transforming document {position} ({document.source}) failed: {exc}",
                    stage=self.name,
                    cause=exc,
                ) from exc
            modified.append(document.with_content(content))
        return modified

    def close(self) -> None:
        if isinstance(self.transformer, Chain):
            self.transformer.close()


def build_context(documents: list[Document]) -> str:
    return "\n\n".join(
        f"Content: {document.content}\nSource: {document.source or 'unknown'}" for document in documents
    )


class CombineDocumentsChain(Chain[list[Document], str]):
    """Merge documents into one prompt-ready block labelled with their sources.

    When the documents carry the retrieval ``question`` it heads the block.
    An empty input yields an empty string.
    """

    def run(self, input: list[Document]) -> str:
        if not input:
            return ""
        context = build_context(input)
        question = input[0].metadata.get("question")
        if question is None:
            return context
        return f"QUESTION: {question}\n=========\n{context}\n========="


def extract_answer_with_sources(text: str) -> AnswerWithSources:
    """Split a trailing ``Sources: a, b`` annotation from LLM output.

    Args:
        text: Free-text LLM answer.

    Returns:
        The trimmed answer before the first header and the comma-separated
        sources after it, or the whole trimmed text with no sources.
    """
    match = _SOURCES_HEADER_RE.search(text)
    if match is None:
        return AnswerWithSources(answer=text.strip(), sources=[])

    answer = text[: match.start()].strip()
    sources = [item.strip() for item in text[match.end() :].split(",")]
    return AnswerWithSources(answer=answer, sources=[source for source in sources if source])


class MapAnswerWithSourcesChain(Chain[str, AnswerWithSources]):
    """Map the raw LLM answer to an AnswerWithSources."""

    def run(self, input: str) -> AnswerWithSources:
        return extract_answer_with_sources(input)
