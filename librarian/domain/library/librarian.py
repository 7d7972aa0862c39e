from typing import List, Optional, Literal
from pathlib import Path
import asyncio
import structlog

from .document_store import (
    Document, DocumentIndex, TagCount,
    load_all_documents, filter_documents, search_documents,
    get_document, get_tags_in_directory,
)

logger = structlog.get_logger(__name__)


class DocumentNotFound(Exception):
    """Raised when a requested document is not in the library"""

    def __init__(self, filepath: str):
        super().__init__(f"Document not found: {filepath}")
        self.filepath = filepath


class Librarian:
    """Cached, tag-aware view of the documents root"""

    def __init__(self, docs_root: Path):
        self.docs_root = Path(docs_root)
        self._index: Optional[DocumentIndex] = None
        self._lock = asyncio.Lock()

    async def get_index(self) -> DocumentIndex:
        """Load the document index on first use"""

        async with self._lock:
            if self._index is None:
                self._index = await asyncio.to_thread(load_all_documents, self.docs_root)
            return self._index

    async def reload_documents(self):
        """Drop the cached index so the next call sees current files"""

        async with self._lock:
            self._index = None
        logger.info("Document index invalidated", docs_root=str(self.docs_root))

    async def list_documents(
        self,
        directory: str = "/",
        tags: Optional[List[str]] = None,
        include_contents: bool = False,
        depth: int = -1
    ) -> List[Document]:
        """List documents filtered by directory, tags and depth"""

        index = await self.get_index()
        documents = filter_documents(index, directory, tags, depth)
        if include_contents:
            return documents
        return [doc.without_contents() for doc in documents]

    async def search_documents(
        self,
        query: str,
        directory: str = "/",
        tags: Optional[List[str]] = None,
        include_contents: bool = False,
        mode: Literal["string", "regex"] = "string",
        case_sensitive: bool = False,
        depth: int = -1
    ) -> List[Document]:
        """Search document contents by string or regex"""

        index = await self.get_index()
        return search_documents(index, query, directory, tags, include_contents, mode, case_sensitive, depth)

    async def get_document(self, filepath: str) -> Document:
        """Get one document with its contents"""

        index = await self.get_index()
        document = get_document(index, filepath)
        if document is None:
            raise DocumentNotFound(filepath)
        return document

    async def list_tags(
        self,
        directory: str = "/",
        include_filepaths: bool = False,
        depth: int = -1
    ) -> List[TagCount]:
        """Count tags used under a directory"""

        index = await self.get_index()
        return get_tags_in_directory(index, directory, include_filepaths, depth)
