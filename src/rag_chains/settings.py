from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(slots=True)
class OpenAISettings:
    """Runtime model configuration for chat and completion calls."""

    chat_model: str = "gpt-3.5-turbo"
    completions_model: str = "gpt-3.5-turbo-instruct"
    api_key: str | None = None
    base_url: str | None = None


@dataclass(slots=True)
class Paths:
    """Locations of the PDF input directory and the search index."""

    pdf_dir: str = "data/pdf"
    index_dir: str = "artifacts/index"


def load_settings() -> tuple[OpenAISettings, Paths]:
    """Load environment-backed settings and return typed config objects.

    Returns:
        Tuple containing OpenAI model settings and path settings.
    """
    load_dotenv()
    return (
        OpenAISettings(
            chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo"),
            completions_model=os.getenv("OPENAI_COMPLETIONS_MODEL", "gpt-3.5-turbo-instruct"),
            api_key=os.getenv("OPENAI_API_KEY"),
            base_url=os.getenv("OPENAI_BASE_URL"),
        ),
        Paths(
            pdf_dir=os.getenv("RAG_CHAINS_PDF_DIR", "data/pdf"),
            index_dir=os.getenv("RAG_CHAINS_INDEX_DIR", "artifacts/index"),
        ),
    )
