"""Tool definitions wiring the structuring engine and the library to the registry"""

from librarian.domain.library.formatting import (
    format_document, format_document_list, format_document_list_with_contents, format_tag_list,
)
from librarian.domain.library.librarian import Librarian
from librarian.domain.models.session_state import SectionWrite
from librarian.domain.structuring.response_formatter import (
    START_PENDING_TOOL, START_TOOL, SHOW_SOURCE_TOOL, WRITE_SECTIONS_TOOL, END_TOOL, LIST_DOCUMENTS_TOOL,
)
from librarian.domain.structuring.session_engine import KnowledgeStructuringEngine
from librarian.domain.tool.tool_registry import ToolRegistry, ToolConfig
from .schema.tools import (
    StartPendingSessionInput, StartSessionInput, ShowSourceDocumentInput, WriteSectionsInput,
    EndSessionInput, ListDocumentsInput, SearchDocumentsInput, GetDocumentInput, ListTagsInput,
)

SEARCH_DOCUMENTS_TOOL = "searchDocuments"
GET_DOCUMENT_TOOL = "getDocument"
LIST_TAGS_TOOL = "listTags"


def build_tool_registry(engine: KnowledgeStructuringEngine, librarian: Librarian) -> ToolRegistry:
    """Register every structuring and library tool"""

    registry = ToolRegistry()

    async def start_pending_session(args: StartPendingSessionInput) -> str:
        return await engine.start_pending_session(args.document_name, args.document_source)

    async def start_session(args: StartSessionInput) -> str:
        return await engine.start_session(args.session_token, args.section_filepaths)

    async def show_source_document(args: ShowSourceDocumentInput) -> str:
        return await engine.show_source_document(args.session_token, args.source_document_range)

    async def write_sections(args: WriteSectionsInput) -> str:
        sections = [
            SectionWrite(
                filepath=section.filepath,
                tags=section.tags,
                content_specifiers=section.content_specifiers,
            )
            for section in args.sections
        ]
        return await engine.write_sections(args.session_token, sections)

    async def end_session(args: EndSessionInput) -> str:
        return await engine.end_session(args.session_token)

    async def list_documents(args: ListDocumentsInput) -> str:
        documents = await librarian.list_documents(
            args.directory, args.tags, args.include_contents, args.depth
        )
        if args.include_contents:
            return format_document_list_with_contents(documents)
        return format_document_list(documents)

    async def search_documents(args: SearchDocumentsInput) -> str:
        documents = await librarian.search_documents(
            args.query, args.directory, args.tags, args.include_contents,
            args.mode, args.case_sensitive, args.depth
        )
        if args.include_contents:
            return format_document_list_with_contents(documents)
        return format_document_list(documents)

    async def get_document(args: GetDocumentInput) -> str:
        return format_document(await librarian.get_document(args.filepath))

    async def list_tags(args: ListTagsInput) -> str:
        tags = await librarian.list_tags(args.directory, args.include_filepaths, args.depth)
        return format_tag_list(tags)

    tools = [
        ToolConfig(
            id=START_PENDING_TOOL,
            name="Start knowledge structuring",
            description=(
                "Fetch a markdown or text document from a URL and start structuring it into "
                "a tree of tagged markdown files under `documentName`."
            ),
            category="structuring",
            input_model=StartPendingSessionInput,
            handler=start_pending_session,
        ),
        ToolConfig(
            id=START_TOOL,
            name="Start structuring session",
            description="Commit the planned section filepaths for a pending structuring session.",
            category="structuring",
            input_model=StartSessionInput,
            handler=start_session,
        ),
        ToolConfig(
            id=SHOW_SOURCE_TOOL,
            name="Show source document",
            description="Show the line-numbered source document, or a range of it such as `L120-L240`.",
            category="structuring",
            input_model=ShowSourceDocumentInput,
            handler=show_source_document,
        ),
        ToolConfig(
            id=WRITE_SECTIONS_TOOL,
            name="Write sections",
            description="Compose planned section files from source line ranges and literal text, and write them.",
            category="structuring",
            input_model=WriteSectionsInput,
            handler=write_sections,
        ),
        ToolConfig(
            id=END_TOOL,
            name="End structuring session",
            description="Finish a structuring session once every planned file is written.",
            category="structuring",
            input_model=EndSessionInput,
            handler=end_session,
        ),
        ToolConfig(
            id=LIST_DOCUMENTS_TOOL,
            name="List documents",
            description="List documents in the library, filtered by directory, tags and depth.",
            category="library",
            input_model=ListDocumentsInput,
            handler=list_documents,
        ),
        ToolConfig(
            id=SEARCH_DOCUMENTS_TOOL,
            name="Search documents",
            description="Search document contents by plain string or regular expression.",
            category="library",
            input_model=SearchDocumentsInput,
            handler=search_documents,
        ),
        ToolConfig(
            id=GET_DOCUMENT_TOOL,
            name="Get document",
            description="Read one document with its contents.",
            category="library",
            input_model=GetDocumentInput,
            handler=get_document,
        ),
        ToolConfig(
            id=LIST_TAGS_TOOL,
            name="List tags",
            description="Count the tags used by documents under a directory.",
            category="library",
            input_model=ListTagsInput,
            handler=list_tags,
        ),
    ]

    for tool in tools:
        registry.register_tool(tool)

    return registry
