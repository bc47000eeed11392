from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from .schema import Document

DOCUMENTS_FILE = "documents.jsonl"


def _load_jsonl(path: str | Path) -> list[dict]:
    records: list[dict] = []
    with Path(path).open("r", encoding="utf-8") as file_handle:
        for line in file_handle:
            if line.strip():
                records.append(json.loads(line))
    return records


def load_documents(path: str | Path) -> list[Document]:
    return [Document(**record) for record in _load_jsonl(path)]


def save_documents_atomic(documents: list[Document], path: str | Path) -> None:
    """Write documents as JSON lines, replacing ``path`` in a single rename.

    The target is either fully rewritten or left untouched.
    """
    destination = Path(path)
    file_descriptor, temp_name = tempfile.mkstemp(dir=destination.parent, prefix=".tmp-", suffix=".jsonl")
    try:
        with os.fdopen(file_descriptor, "w", encoding="utf-8") as file_handle:
            for document in documents:
                file_handle.write(json.dumps(document.to_record()) + "\n")
            file_handle.flush()
            os.fsync(file_handle.fileno())
        os.replace(temp_name, destination)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
