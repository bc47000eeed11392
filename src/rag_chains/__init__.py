"""Composable chains for retrieval-augmented question answering."""

from .chain import Chain, ComposedChain, FunctionChain
from .errors import (
    ChainError,
    ChainExecutionError,
    IndexAccessError,
    InvalidArgumentError,
    MalformedResponseError,
    RemoteServiceError,
)
from .index import IndexHandle
from .schema import AnswerWithSources, Document

__all__ = [
    "AnswerWithSources",
    "Chain",
    "ChainError",
    "ChainExecutionError",
    "ComposedChain",
    "Document",
    "FunctionChain",
    "IndexAccessError",
    "IndexHandle",
    "InvalidArgumentError",
    "MalformedResponseError",
    "RemoteServiceError",
]
