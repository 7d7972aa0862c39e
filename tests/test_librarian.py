"""Tests for the Librarian facade and its text formatting."""

import pytest

from librarian.domain.library.formatting import (
    format_document, format_document_list, format_document_list_with_contents, format_tag_list,
)
from librarian.domain.library.librarian import DocumentNotFound, Librarian


class TestLibrarian:
    """Tests for Librarian."""

    @pytest.mark.asyncio
    async def test_list_documents_strips_contents(self, library_root):
        """Listings omit contents unless asked."""
        librarian = Librarian(library_root)

        documents = await librarian.list_documents("/parent", depth=1)

        assert len(documents) == 4
        assert all(doc.contents is None for doc in documents)

    @pytest.mark.asyncio
    async def test_index_is_cached_until_reload(self, library_root):
        """New files appear only after reload_documents."""
        librarian = Librarian(library_root)
        await librarian.list_documents()

        (library_root / "new.md").write_text("---\ntags: [\"new\"]\n---\n\nNew.")
        assert await librarian.get_index() is await librarian.get_index()
        with pytest.raises(DocumentNotFound):
            await librarian.get_document("new.md")

        await librarian.reload_documents()

        document = await librarian.get_document("/new.md")
        assert document.tags == ["docs", "new"]

    @pytest.mark.asyncio
    async def test_missing_document(self, library_root):
        """Unknown filepaths raise DocumentNotFound."""
        librarian = Librarian(library_root)

        with pytest.raises(DocumentNotFound) as exc_info:
            await librarian.get_document("/nope.md")

        assert str(exc_info.value) == "Document not found: /nope.md"

    @pytest.mark.asyncio
    async def test_search_and_tags(self, library_root):
        """Search and tag counts go through the cached index."""
        librarian = Librarian(library_root)

        found = await librarian.search_documents("child", directory="/parent", depth=1)
        tags = await librarian.list_tags("/parent/sub", include_filepaths=True)

        assert [doc.filepath for doc in found] == ["parent/child1.md", "parent/child2.md"]
        assert tags[0].filepaths is not None


class TestFormatting:
    """Tests for library text formatting."""

    @pytest.mark.asyncio
    async def test_document_list(self, library_root):
        """Each document is listed with its tags."""
        documents = await Librarian(library_root).list_documents("/parent", depth=0)

        assert format_document_list(documents) == "- parent/index.md\n  - tags: docs, parent"

    @pytest.mark.asyncio
    async def test_document_with_contents(self, library_root):
        """Contents are fenced under the filepath."""
        document = await Librarian(library_root).get_document("parent/child2.md")

        assert format_document(document) == "**parent/child2.md**\n======\n\nSecond child.\n======"
        assert format_document_list_with_contents([document]) == format_document(document)

    def test_empty_results(self):
        """Empty results say so."""
        assert format_document_list([]) == "No documents found."
        assert format_document_list_with_contents([]) == "No documents found."
        assert format_tag_list([]) == "No tags found."

    @pytest.mark.asyncio
    async def test_tag_list_with_files(self, library_root):
        """Tag lists show counts and optional files."""
        tags = await Librarian(library_root).list_tags("/parent", include_filepaths=True)

        text = format_tag_list(tags)

        assert text.startswith("- docs (5)\n  - files:\n    - parent/child1.md")
        assert "- extra (1)\n  - files:\n    - parent/child2.md" in text
