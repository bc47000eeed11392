"""Tests for io_utils.py — JSON-lines document storage."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from rag_chains.io_utils import load_documents, save_documents_atomic
from rag_chains.schema import Document


class TestSaveDocumentsAtomic:
    def test_round_trip(self, tmp_path, sample_documents):
        path = tmp_path / "docs.jsonl"
        save_documents_atomic(sample_documents, path)
        assert load_documents(path) == sample_documents

    def test_one_line_per_document(self, tmp_path, sample_documents):
        path = tmp_path / "docs.jsonl"
        save_documents_atomic(sample_documents, path)
        assert len(path.read_text(encoding="utf-8").splitlines()) == len(sample_documents)

    def test_replaces_existing_file(self, tmp_path):
        path = tmp_path / "docs.jsonl"
        save_documents_atomic([Document("old")], path)
        save_documents_atomic([Document("new")], path)
        assert [d.content for d in load_documents(path)] == ["new"]

    def test_failure_keeps_original_and_no_temp_files(self, tmp_path):
        path = tmp_path / "docs.jsonl"
        save_documents_atomic([Document("old")], path)
        with patch("rag_chains.io_utils.os.replace", side_effect=OSError("rename failed")):
            with pytest.raises(OSError):
                save_documents_atomic([Document("new")], path)
        assert [d.content for d in load_documents(path)] == ["old"]
        assert [p.name for p in tmp_path.iterdir()] == ["docs.jsonl"]

    def test_unicode_preserved(self, tmp_path):
        path = tmp_path / "docs.jsonl"
        save_documents_atomic([Document("Grüße", {"source": "ü.pdf"})], path)
        assert load_documents(path)[0].source == "ü.pdf"


class TestLoadDocuments:
    def test_blank_lines_skipped(self, tmp_path):
        path = tmp_path / "docs.jsonl"
        path.write_text('{"content": "a", "metadata": {}}\n\n', encoding="utf-8")
        assert load_documents(path) == [Document("a")]
