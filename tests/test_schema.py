"""Tests for schema.py — Document and AnswerWithSources."""
from __future__ import annotations

import dataclasses

import pytest

from rag_chains.schema import AnswerWithSources, Document


class TestDocument:
    def test_fields_stored(self, sample_document):
        assert sample_document.content.startswith("John Doe")
        assert sample_document.metadata["source"] == "john-doe.pdf"

    def test_default_metadata_is_empty(self):
        assert dict(Document(content="text").metadata) == {}

    def test_source_property(self, sample_document):
        assert sample_document.source == "john-doe.pdf"
        assert Document(content="x").source is None

    def test_is_immutable(self, sample_document):
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_document.content = "changed"

    def test_metadata_is_read_only(self, sample_document):
        with pytest.raises(TypeError):
            sample_document.metadata["source"] = "other.pdf"

    def test_metadata_copied_from_caller(self):
        metadata = {"source": "a.pdf"}
        document = Document(content="x", metadata=metadata)
        metadata["source"] = "b.pdf"
        assert document.source == "a.pdf"

    def test_with_content_keeps_metadata(self, sample_document):
        changed = sample_document.with_content("summary")
        assert changed.content == "summary"
        assert changed.metadata == sample_document.metadata
        assert sample_document.content.startswith("John Doe")

    def test_with_metadata_extends_copy(self, sample_document):
        extended = sample_document.with_metadata(question="who?")
        assert extended.metadata["question"] == "who?"
        assert "question" not in sample_document.metadata

    def test_to_record(self):
        record = Document(content="c", metadata={"source": "s"}).to_record()
        assert record == {"content": "c", "metadata": {"source": "s"}}

    def test_equality(self):
        assert Document("c", {"source": "s"}) == Document("c", {"source": "s"})


class TestAnswerWithSources:
    def test_default_sources_empty(self):
        assert AnswerWithSources(answer="a").sources == []

    def test_fields(self):
        result = AnswerWithSources(answer="a", sources=["s1", "s1"])
        assert result.answer == "a"
        assert result.sources == ["s1", "s1"]
