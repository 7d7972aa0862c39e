"""Shared fixtures for Librarian tests."""

from pathlib import Path

import httpx
import pytest

from librarian.domain.library.librarian import Librarian
from librarian.domain.structuring.session_engine import KnowledgeStructuringEngine
from librarian.domain.structuring.session_store import SessionStore
from librarian.domain.structuring.source_document import SourceDocumentFetcher
from librarian.infrastructure.storage.file_store import FileStore

SOURCE_URL = "https://example.com/doc.md"

SOURCE_DOCUMENT = """# Guide

Welcome to the guide.

## Install

Run the installer.

## Usage

Call the tool.

## Reference

Everything else."""


def serve_text(text: str, status_code: int = 200) -> httpx.MockTransport:
    """Mock transport answering every request with the given body."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=text)

    return httpx.MockTransport(handler)


@pytest.fixture
def source_lines():
    """Bare lines of the sample source document."""
    return SOURCE_DOCUMENT.split("\n")


@pytest.fixture
def docs_root(tmp_path) -> Path:
    """Empty documents root."""
    root = tmp_path / "docs"
    root.mkdir()
    return root


@pytest.fixture
def file_store(docs_root):
    return FileStore(docs_root)


@pytest.fixture
def librarian(docs_root):
    return Librarian(docs_root)


@pytest.fixture
def session_store():
    return SessionStore(ttl_seconds=3600)


@pytest.fixture
def fetcher():
    """Fetcher serving the sample source document."""
    return SourceDocumentFetcher(transport=serve_text(SOURCE_DOCUMENT))


@pytest.fixture
def engine(file_store, session_store, fetcher, librarian):
    return KnowledgeStructuringEngine(
        file_store,
        store=session_store,
        fetcher=fetcher,
        document_index=librarian,
    )


@pytest.fixture
def library_root(docs_root) -> Path:
    """Documents root with a small tagged tree."""

    files = {
        "index.md": "---\ntags: [\"docs\"]\n---\n\nRoot index.",
        "parent/index.md": "---\ntags: [\"parent\"]\n---\n\nParent index.",
        "parent/child1.md": "---\ntags: [\"child\"]\n---\n\nFirst child about Widgets.",
        "parent/child2.md": "---\ntags: [\"child\", \"extra\"]\n---\n\nSecond child.",
        "parent/sub/index.md": "---\ntags: [\"sub\"]\n---\n\nSub index.",
        "parent/sub/grandchild.md": "No frontmatter, mentions widgets (v2).",
        "node_modules/ignored.md": "---\ntags: [\"ignored\"]\n---\n\nIgnored.",
    }
    for relative, text in files.items():
        path = docs_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    return docs_root
