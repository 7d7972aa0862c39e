"""Plain-text formatting of library results for the calling agent"""

from typing import Sequence

from .document_store import Document, TagCount


def format_document_list(documents: Sequence[Document]) -> str:
    if not documents:
        return "No documents found."

    return "\n".join(
        f"- {doc.filepath}\n  - tags: {', '.join(doc.tags)}"
        for doc in documents
    )


def format_document(document: Document) -> str:
    return f"**{document.filepath}**\n======\n{document.contents or ''}\n======"


def format_document_list_with_contents(documents: Sequence[Document]) -> str:
    if not documents:
        return "No documents found."

    return "\n\n".join(format_document(doc) for doc in documents)


def format_tag_list(tags: Sequence[TagCount]) -> str:
    if not tags:
        return "No tags found."

    entries = []
    for tag_info in tags:
        entry = f"- {tag_info.tag} ({tag_info.count})"
        if tag_info.filepaths:
            files = "\n".join(f"    - {filepath}" for filepath in tag_info.filepaths)
            entry += f"\n  - files:\n{files}"
        entries.append(entry)

    return "\n".join(entries)
