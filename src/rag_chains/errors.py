"""Error taxonomy shared by every chain stage."""
from __future__ import annotations


class ChainError(Exception):
    """Base class for all errors raised by rag_chains."""


class InvalidArgumentError(ChainError, ValueError):
    """Raised for bad arguments such as a non-positive result limit."""


class ChainExecutionError(ChainError):
    """Raised when a chain stage fails while running.

    Attributes:
        stage: Name of the failing stage, filled in by the composing chain
            when the stage itself did not set it.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, stage: str | None = None, cause: BaseException | None = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class RemoteServiceError(ChainExecutionError):
    """Raised on LLM transport failures or non-success responses."""


class MalformedResponseError(ChainExecutionError):
    """Raised when an LLM response lacks the expected fields."""


class IndexAccessError(ChainExecutionError):
    """Raised when opening, writing, searching or closing an index fails."""
