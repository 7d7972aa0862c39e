from typing import Dict, List, Any, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from librarian.domain.structuring.response_formatter import MAX_SECTIONS_PER_CALL


class ToolInput(BaseModel):
    """Base for tool arguments; accepts camelCase keys from agents"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class StartPendingSessionInput(ToolInput):
    document_name: str = Field(description="Name of the destination directory under the documents root")
    document_source: str = Field(description="HTTP(S) URL of the source document")


class StartSessionInput(ToolInput):
    session_token: str = Field(description="Token returned by the structuring request")
    section_filepaths: List[str] = Field(description="Planned markdown filepaths, e.g. /guide/intro.md")


class ShowSourceDocumentInput(ToolInput):
    session_token: str = Field(description="Session token")
    source_document_range: Optional[str] = Field(
        default=None,
        description="Line range such as L120-L240; omit to start at the top"
    )


class SectionInput(ToolInput):
    filepath: str = Field(description="A filepath from the session plan")
    tags: List[str] = Field(default_factory=list, description="Tags written to the frontmatter")
    content_specifiers: List[str] = Field(
        description="`@N` or `@N-M` copies source lines; anything else is a literal line"
    )


class WriteSectionsInput(ToolInput):
    session_token: str = Field(description="Session token")
    sections: List[SectionInput] = Field(
        min_length=1, max_length=MAX_SECTIONS_PER_CALL, description="Sections to write"
    )


class EndSessionInput(ToolInput):
    session_token: str = Field(description="Session token")


class ListDocumentsInput(ToolInput):
    directory: str = Field(default="/", description="Directory to list")
    tags: Optional[List[str]] = Field(default=None, description="Only documents carrying any of these tags")
    include_contents: bool = Field(default=False, description="Include document contents")
    depth: int = Field(default=-1, ge=-1, description="Levels below the directory, -1 for unlimited")


class SearchDocumentsInput(ToolInput):
    query: str = Field(min_length=1, description="Text or regular expression to search for")
    directory: str = Field(default="/", description="Directory to search")
    tags: Optional[List[str]] = Field(default=None, description="Only documents carrying any of these tags")
    include_contents: bool = Field(default=False, description="Include document contents")
    mode: Literal["string", "regex"] = Field(default="string", description="Match mode")
    case_sensitive: bool = Field(default=False, description="Case sensitive matching")
    depth: int = Field(default=-1, ge=-1, description="Levels below the directory, -1 for unlimited")


class GetDocumentInput(ToolInput):
    filepath: str = Field(description="Document filepath, e.g. /guide/intro.md")


class ListTagsInput(ToolInput):
    directory: str = Field(default="/", description="Directory to count tags in")
    include_filepaths: bool = Field(default=False, description="List the files carrying each tag")
    depth: int = Field(default=-1, ge=-1, description="Levels below the directory, -1 for unlimited")


class ToolCallRequest(BaseModel):
    """Body of a tool call"""
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallResponse(BaseModel):
    """Text result of a tool call; failures are flagged, not raised"""
    model_config = ConfigDict(populate_by_name=True)

    content: List[ToolContent]
    is_error: bool = Field(default=False, alias="isError")


class ToolDescriptor(BaseModel):
    id: str
    name: str
    description: str
    category: str
    input_schema: Dict[str, Any] = Field(alias="inputSchema")

    model_config = ConfigDict(populate_by_name=True)
