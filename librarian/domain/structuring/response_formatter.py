"""
Agent-facing text layout for knowledge structuring sessions.

Everything here is a pure rendering of data handed over by the session
engine. This module also owns the source display policy: range parsing,
window clamping and the MAX_LINES truncation.
"""

from typing import List, Optional, Sequence, Tuple
from pydantic import BaseModel
import re

from librarian.domain.models.session_state import SessionStatus
from .errors import StructuringError
from .paths import normalize_path, strip_prefix

MAX_LINES = 4000
MAX_SECTIONS_PER_CALL = 25

START_PENDING_TOOL = "knowledgeStructuring.startPendingSession"
START_TOOL = "knowledgeStructuringSession.start"
SHOW_SOURCE_TOOL = "knowledgeStructuringSession.showSourceDocument"
WRITE_SECTIONS_TOOL = "knowledgeStructuringSession.writeSections"
END_TOOL = "knowledgeStructuringSession.end"
LIST_DOCUMENTS_TOOL = "listDocuments"

# `L12`, `L12-L40`, `L12-` (to the end); non-digits before numbers are tolerated
LINE_RANGE = re.compile(r"^\D*(\d+)(?:\s*-\s*\D*(\d*))?")


class SourceWindow(BaseModel):
    """A clamped slice of the display-form source lines"""
    start: int
    end: int
    total: int
    lines: List[str]

    @property
    def is_whole(self) -> bool:
        return self.start == 0 and self.end >= self.total

    @property
    def next_range(self) -> Optional[str]:
        if self.end >= self.total:
            return None
        return f"L{self.end + 1}-L{min(self.end + MAX_LINES, self.total)}"


def parse_line_range(source_range: str) -> Optional[Tuple[int, Optional[int]]]:
    """Parse a range into a 0-based start and exclusive end (None = to the end)"""

    match = LINE_RANGE.match(source_range.strip())
    if not match:
        return None

    start = int(match.group(1)) - 1
    if match.group(2) is None:
        return start, start + 1
    if match.group(2) == "":
        return start, None
    return start, int(match.group(2))


def select_source_window(
    lines: Sequence[str],
    source_range: Optional[str] = None,
    max_lines: int = MAX_LINES
) -> SourceWindow:
    """Clamp a requested range to the document and the display limit"""

    total = len(lines)
    parsed = parse_line_range(source_range) if source_range else None

    if parsed is None:
        start, end = 0, max_lines
    else:
        start, requested_end = parsed
        end = total if requested_end is None else requested_end

    start = min(max(start, 0), max(total - 1, 0))
    end = max(end, start + 1)
    end = min(end, total, start + max_lines)

    return SourceWindow(start=start, end=end, total=total, lines=list(lines[start:end]))


def format_file_list(filepaths: Sequence[str]) -> str:
    return "\n".join(f"- {filepath}" for filepath in filepaths)


def format_session_status(
    session_token: str,
    remaining_files: Sequence[str],
    completed_files: Sequence[str]
) -> str:
    """Session token plus remaining and completed files, empty lists omitted"""

    blocks = [f"**Session Token:** `{session_token}`"]
    if remaining_files:
        blocks.append(f"**Remaining Files:**\n\n{format_file_list(remaining_files)}")
    if completed_files:
        blocks.append(f"**Completed Files:**\n\n{format_file_list(completed_files)}")
    return "\n\n".join(blocks)


def format_status(status: SessionStatus) -> str:
    return format_session_status(
        status.session_token,
        status.remaining_filepaths,
        status.completed_filepaths,
    )


def format_source_window(window: SourceWindow) -> str:
    """Render a source window with its bounds when it is not the whole document"""

    if window.is_whole:
        header = "**Source Document:**"
    else:
        header = f"**Source Document (lines {window.start + 1}-{window.end} of {window.total}):**"

    body = "\n".join(window.lines)
    text = f"{header}\n\n======\n{body}\n======"

    if window.next_range:
        text += (
            f"\n\nThe document continues. Call `{SHOW_SOURCE_TOOL}` with "
            f"`sourceDocumentRange: \"{window.next_range}\"` to read further."
        )
    return text


def format_pending_session_prompt(session_token: str, document_name: str, window: SourceWindow) -> str:
    """Instructional prompt returned when a structuring request is accepted"""

    return f"""You are an outstanding editor, well-versed in computer science and IT, and you are good at analyzing, classifying, and structuring documents.
Our ultimate goal is to break down a large document into sections, tag and organize them into a hierarchy of markdown files in a file tree.

To get started, let's understand the outline of the document.
Please focus on analyzing the structure of the document.

1. Read the document below (Source Document) thoroughly and understand its structure. Every line is prefixed with its line number. If the document is truncated, call `{SHOW_SOURCE_TOOL}` with the session token and a range such as `L{MAX_LINES + 1}-L{MAX_LINES * 2}` to read the rest.
2. Identify the sections and subsections of the document and consider the filepath in lower-kebab-case for each (e.g. `/{document_name}/getting-started.md`).
3. Call `{START_TOOL}` with the following session token and the filepaths you considered.

**Session Token:** `{session_token}`

{format_source_window(window)}"""


def format_session_start_response(session_token: str, remaining_files: Sequence[str]) -> str:
    """Response for an accepted file plan"""

    return f"""Accepted. Call `{WRITE_SECTIONS_TOOL}` to write the structured files.

Each section is composed from `contentSpecifiers`, resolved in order and joined with newlines:

- `@12` copies line 12 of the source document.
- `@12-40` copies lines 12 through 40.
- Any other string is inserted as a literal line. Prefix it with `=` if it starts with `@`.

Write up to {MAX_SECTIONS_PER_CALL} sections per call. Call `{SHOW_SOURCE_TOOL}` with a range like `L120-L240` to look at the source document again.

{format_session_status(session_token, remaining_files, [])}"""


def format_source_document_response(session_token: str, window: SourceWindow) -> str:
    return f"**Session Token:** `{session_token}`\n\n{format_source_window(window)}"


def format_write_sections_response(
    session_token: str,
    written_files: Sequence[str],
    remaining_files: Sequence[str],
    completed_files: Sequence[str]
) -> str:
    """Response after a batch of sections was written"""

    if remaining_files:
        headline = f"OK. Continue calling `{WRITE_SECTIONS_TOOL}` to write remaining files."
    else:
        headline = f"OK. Call `{END_TOOL}` to finish the session."

    blocks = [headline]
    if written_files:
        blocks.append(f"**Written Files:**\n\n{format_file_list(written_files)}")
    blocks.append(format_session_status(session_token, remaining_files, completed_files))
    return "\n\n".join(blocks)


def format_end_session_response(
    completed_files: Sequence[str],
    session_token: str,
    common_path_prefix: str,
    document_name: str
) -> str:
    """Summary of a finished session"""

    destination = normalize_path(document_name)
    response = (
        f"OK. The session `{session_token}` is finished. The following files are written:\n\n"
        f"{format_file_list(completed_files)}\n\n"
        f"You can now use these files for your work. Call `{LIST_DOCUMENTS_TOOL}` with "
        f"`directory: \"{destination}/\"` to see the list of documents."
    )

    if destination != common_path_prefix:
        planned = common_path_prefix or "/"
        example = ""
        if completed_files:
            first = completed_files[0]
            example = f" For example, `{first}` is stored as `{destination}{strip_prefix(first, common_path_prefix)}`."
        response += (
            f"\n\nNote: the files are stored under `{destination}/`, not under `{planned}`. "
            f"The shared prefix `{planned}` of your filepaths was replaced by `{destination}`.{example}"
        )

    return response


def format_error_response(error: StructuringError) -> str:
    """Error text with the session status attached when available"""

    text = f"Error. {error.message}"
    if error.status is not None:
        text += f"\n\n{format_status(error.status)}"
    return text
