"""
Indexing of the markdown documents under the documents root.

Every ``*.md`` file becomes a Document whose tags are its own frontmatter
tags plus the tags of each ancestor directory's ``index.md`` (the root
``index.md`` included). Filepaths are root-relative without a leading slash.
"""

from typing import Dict, List, Optional, Literal
from pydantic import BaseModel, Field
from pathlib import Path
import re
import structlog
import yaml

from .frontmatter import parse_frontmatter

logger = structlog.get_logger(__name__)

IGNORED_DIRECTORIES = {"node_modules"}


class Document(BaseModel):
    """A markdown document with its effective tags"""
    filepath: str
    tags: List[str] = Field(default_factory=list)
    contents: Optional[str] = None

    def without_contents(self) -> "Document":
        return self.model_copy(update={"contents": None})


class TagCount(BaseModel):
    """How many documents in a directory carry a tag"""
    tag: str
    count: int
    filepaths: Optional[List[str]] = None


class DocumentIndex(BaseModel):
    """Loaded documents plus lookup tables"""
    documents: List[Document] = Field(default_factory=list)
    document_map: Dict[str, Document] = Field(default_factory=dict)
    tag_map: Dict[str, List[Document]] = Field(default_factory=dict)
    all_tags: List[str] = Field(default_factory=list)


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _read_markdown_file(docs_root: Path, filepath: str) -> Document:
    """Read a markdown file and parse its frontmatter"""

    text = (docs_root / filepath).read_text(encoding="utf-8")
    data, content = parse_frontmatter(text)
    tags = data.get("tags")

    return Document(
        filepath=filepath,
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        contents=content,
    )


def _inherited_tags(filepath: str, raw_documents: Dict[str, Document]) -> List[str]:
    """Tags of index.md files from the root down to the file's directory"""

    tags: List[str] = []

    root_index = raw_documents.get("index.md")
    if root_index:
        tags.extend(root_index.tags)

    parts = [part for part in filepath.split("/") if part]
    current = ""
    for part in parts[:-1]:
        current = f"{current}/{part}" if current else part
        index_doc = raw_documents.get(f"{current}/index.md")
        if index_doc:
            tags.extend(index_doc.tags)

    return _unique(tags)


def _discover_markdown_files(docs_root: Path) -> List[str]:
    files = []
    for path in sorted(docs_root.rglob("*.md")):
        relative = path.relative_to(docs_root)
        if IGNORED_DIRECTORIES.intersection(relative.parts) or not path.is_file():
            continue
        files.append(relative.as_posix())
    return files


def load_all_documents(docs_root: Path) -> DocumentIndex:
    """Load every markdown document under the root"""

    docs_root = Path(docs_root)
    raw_documents: Dict[str, Document] = {}

    for filepath in _discover_markdown_files(docs_root):
        try:
            raw_documents[filepath] = _read_markdown_file(docs_root, filepath)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.error("Error processing file", filepath=filepath, error=str(e))

    index = DocumentIndex()
    for raw in raw_documents.values():
        document = raw.model_copy(update={
            "tags": _unique(_inherited_tags(raw.filepath, raw_documents) + raw.tags)
        })
        index.documents.append(document)
        index.document_map[document.filepath] = document

        for tag in document.tags:
            index.tag_map.setdefault(tag, []).append(document)

    index.all_tags = list(index.tag_map.keys())

    logger.info("Documents loaded", docs_root=str(docs_root), documents=len(index.documents))
    return index


def _normalize_directory(directory: str) -> str:
    return directory.strip().strip("/")


def document_level(remainder: str) -> int:
    """Depth of a directory-relative filepath.

    A directory's own index.md is level 0, files directly inside it are
    level 1, and so on. An index.md counts at the level of its directory.
    """

    segments = remainder.split("/")
    if segments[-1] == "index.md":
        return len(segments) - 1
    return len(segments)


def _within_depth(filepath: str, directory: str, depth: int) -> bool:
    if directory:
        if not filepath.startswith(f"{directory}/"):
            return False
        remainder = filepath[len(directory) + 1:]
    else:
        remainder = filepath

    if depth < 0:
        return True
    return document_level(remainder) <= depth


def filter_documents(
    index: DocumentIndex,
    directory: str = "/",
    tags: Optional[List[str]] = None,
    depth: int = -1
) -> List[Document]:
    """Documents under a directory, optionally carrying any of the tags"""

    normalized = _normalize_directory(directory)
    documents = [doc for doc in index.documents if _within_depth(doc.filepath, normalized, depth)]

    if not tags:
        return documents

    return [doc for doc in documents if any(tag in doc.tags for tag in tags)]


def _search_pattern(query: str, mode: str, case_sensitive: bool) -> re.Pattern:
    flags = 0 if case_sensitive else re.IGNORECASE

    if mode == "regex":
        try:
            return re.compile(query, flags)
        except re.error:
            # Not a valid pattern, search for it literally
            pass

    return re.compile(re.escape(query), flags)


def search_documents(
    index: DocumentIndex,
    query: str,
    directory: str = "/",
    tags: Optional[List[str]] = None,
    include_contents: bool = False,
    mode: Literal["string", "regex"] = "string",
    case_sensitive: bool = False,
    depth: int = -1
) -> List[Document]:
    """Documents whose contents match a string or regex query"""

    pattern = _search_pattern(query, mode, case_sensitive)
    results = [
        doc for doc in filter_documents(index, directory, tags, depth)
        if doc.contents and pattern.search(doc.contents)
    ]

    if not include_contents:
        return [doc.without_contents() for doc in results]
    return results


def get_document(index: DocumentIndex, filepath: str) -> Optional[Document]:
    """Look a document up by filepath (leading slash optional)"""
    return index.document_map.get(filepath.strip().lstrip("/"))


def get_tags_in_directory(
    index: DocumentIndex,
    directory: str = "/",
    include_filepaths: bool = False,
    depth: int = -1
) -> List[TagCount]:
    """Tag counts for documents under a directory, most used first"""

    counts: Dict[str, int] = {}
    filepaths: Dict[str, List[str]] = {}

    for doc in filter_documents(index, directory, None, depth):
        for tag in doc.tags:
            counts[tag] = counts.get(tag, 0) + 1
            if include_filepaths:
                filepaths.setdefault(tag, []).append(doc.filepath)

    result = [
        TagCount(tag=tag, count=count, filepaths=filepaths.get(tag, []) if include_filepaths else None)
        for tag, count in counts.items()
    ]
    # Stable sort keeps first-seen order among equal counts
    return sorted(result, key=lambda item: item.count, reverse=True)
