from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class Document:
    """Text content plus free-form string metadata such as its source."""

    content: str
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only copy so stages never share a mutable mapping.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def source(self) -> str | None:
        return self.metadata.get("source")

    def with_content(self, content: str) -> Document:
        """Return a new document with replaced content and the same metadata."""
        return replace(self, content=content)

    def with_metadata(self, **extra: str) -> Document:
        """Return a new document whose metadata is extended by ``extra``."""
        return Document(content=self.content, metadata={**self.metadata, **extra})

    def to_record(self) -> dict:
        return {"content": self.content, "metadata": dict(self.metadata)}


@dataclass(frozen=True, slots=True)
class AnswerWithSources:
    """Structured LLM answer split from its trailing source list."""

    answer: str
    sources: list[str] = field(default_factory=list)
