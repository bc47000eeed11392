"""Tests for reader.py — PDF readers.

PDFs are generated on the fly with PyMuPDF so no fixture files are needed.
"""
from __future__ import annotations

import fitz
import pytest

from rag_chains.errors import ChainExecutionError
from rag_chains.reader import ReadDocumentsFromPdfBytesChain, ReadDocumentsFromPdfChain
from rag_chains.schema import Document


def _pdf_bytes(*pages: str) -> bytes:
    pdf = fitz.open()
    for text in pages:
        page = pdf.new_page()
        page.insert_text((72, 72), text)
    data = pdf.tobytes()
    pdf.close()
    return data


@pytest.fixture()
def pdf_dir(tmp_path):
    (tmp_path / "john-doe.pdf").write_bytes(_pdf_bytes("John Doe is a carpenter."))
    (tmp_path / "garden.pdf").write_bytes(_pdf_bytes("Roses bloom in June.", "Tulips bloom in April."))
    (tmp_path / "notes.txt").write_text("not a pdf", encoding="utf-8")
    return tmp_path


class TestReadDocumentsFromPdfChain:
    def test_one_document_per_pdf(self, pdf_dir):
        documents = ReadDocumentsFromPdfChain().run(pdf_dir)
        assert all(isinstance(d, Document) for d in documents)
        assert [d.source for d in documents] == ["garden.pdf", "john-doe.pdf"]

    def test_text_extracted_from_all_pages(self, pdf_dir):
        documents = ReadDocumentsFromPdfChain().run(pdf_dir)
        garden = documents[0].content
        assert "Roses bloom in June." in garden
        assert "Tulips bloom in April." in garden

    def test_accepts_string_path(self, pdf_dir):
        assert len(ReadDocumentsFromPdfChain().run(str(pdf_dir))) == 2

    def test_empty_directory(self, tmp_path):
        assert ReadDocumentsFromPdfChain().run(tmp_path) == []

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(ChainExecutionError):
            ReadDocumentsFromPdfChain().run(tmp_path / "missing")

    def test_unreadable_pdf_raises(self, tmp_path):
        (tmp_path / "broken.pdf").write_bytes(b"this is not a pdf")
        with pytest.raises(ChainExecutionError, match="broken.pdf"):
            ReadDocumentsFromPdfChain().run(tmp_path)


class TestReadDocumentsFromPdfBytesChain:
    def test_reads_in_memory_pdf(self):
        document = ReadDocumentsFromPdfBytesChain().run(("upload.pdf", _pdf_bytes("Hello PDF.")))
        assert document.source == "upload.pdf"
        assert "Hello PDF." in document.content

    def test_invalid_bytes_raise(self):
        with pytest.raises(ChainExecutionError):
            ReadDocumentsFromPdfBytesChain().run(("bad.pdf", b"garbage"))
