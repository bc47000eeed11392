"""Shared pytest fixtures for rag_chains unit tests."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rag_chains.index import IndexHandle
from rag_chains.schema import Document


@pytest.fixture()
def sample_document() -> Document:
    return Document(
        content="John Doe was born in Springfield. He works as a carpenter.",
        metadata={"source": "john-doe.pdf"},
    )


@pytest.fixture()
def sample_documents() -> list[Document]:
    return [
        Document(
            content="John Doe was born in Springfield and works as a carpenter.",
            metadata={"source": "john-doe-bio.pdf"},
        ),
        Document(
            content="The annual garden festival features roses and tulips.",
            metadata={"source": "garden.pdf"},
        ),
        Document(
            content="Lost laptops must be reported to security within one hour.",
            metadata={"source": "security.pdf"},
        ),
    ]


@pytest.fixture()
def memory_index(sample_documents):
    handle = IndexHandle.from_documents(sample_documents)
    yield handle
    handle.close()


def make_chat_response(*texts: str) -> MagicMock:
    """Fake chat completions response with one choice per text."""
    choices = []
    for text in texts:
        choice = MagicMock()
        choice.message.content = text
        choices.append(choice)
    response = MagicMock()
    response.choices = choices
    return response
