from __future__ import annotations

from pathlib import Path

from .chain import Chain
from .chunking import SplitDocumentsChain, TextSplitter, TiktokenTextSplitter
from .index import IndexHandle, WriteDocumentsToIndexChain
from .llm import ChatCompletionsParameters, OpenAiChatCompletionsChain
from .prompts import QA_COMBINE, QA_SUMMARIZE
from .qa import CombineDocumentsChain, MapAnswerWithSourcesChain, ModifyDocumentsContentChain
from .reader import ReadDocumentsFromPdfChain
from .retrieval import RetrievalChain
from .schema import AnswerWithSources
from .settings import OpenAISettings


def build_index_chain(
    index_dir: str | Path, max_tokens: int = 1000, splitter: TextSplitter | None = None
) -> Chain[Path, IndexHandle]:
    """Compose the ingestion chain: read PDFs, split them, write the index.

    Args:
        index_dir: Directory the index is written to.
        max_tokens: Token budget per chunk for the default tiktoken splitter.
        splitter: Custom splitter replacing the default one.

    Returns:
        Chain taking a PDF directory and returning an open index handle that
        the caller must close.
    """
    return (
        ReadDocumentsFromPdfChain()
        .chain(SplitDocumentsChain(splitter or TiktokenTextSplitter(max_tokens)))
        .chain(WriteDocumentsToIndexChain(index_dir))
    )


def build_qa_chain(
    index: IndexHandle,
    settings: OpenAISettings | None = None,
    max_results: int = 4,
    temperature: float = 0.0,
) -> Chain[str, AnswerWithSources]:
    """Compose the retrieval QA chain over an open index.

    The chain retrieves documents, summarizes each one against the question,
    combines the summaries with their sources and asks the model for a final
    answer, which is split into answer text and sources.

    Args:
        index: Open index handle, borrowed by the chain.
        settings: OpenAI model and credential settings.
        max_results: Number of documents retrieved per question.
        temperature: Sampling temperature for both LLM calls.

    Returns:
        Chain mapping a question to an AnswerWithSources.
    """
    settings = settings or OpenAISettings()
    parameters = ChatCompletionsParameters(model=settings.chat_model, temperature=temperature)

    def llm(template: str) -> OpenAiChatCompletionsChain:
        return OpenAiChatCompletionsChain(
            template, parameters, api_key=settings.api_key, base_url=settings.base_url
        )

    return (
        RetrievalChain(index, max_results=max_results)
        .chain(ModifyDocumentsContentChain(llm(QA_SUMMARIZE)))
        .chain(CombineDocumentsChain())
        .chain(llm(QA_COMBINE))
        .chain(MapAnswerWithSourcesChain())
    )
