"""
Knowledge structuring session engine.

Drives one source document from a structuring request to a tree of tagged
section files:

    (none) --start_pending_session--> PENDING --start_session--> ACTIVE
    ACTIVE --write_sections--> ACTIVE --end_session--> (terminated)

Every operation on an existing token runs under that token's lock in the
session store. Errors are raised as StructuringError subclasses and are
rendered for the agent by the tool executor.
"""

from typing import Any, List, Optional, Sequence, Tuple
import uuid
import structlog

from librarian.domain.library.frontmatter import serialize_section
from librarian.domain.models.session_state import PendingSession, Session, SessionPhase, SectionWrite
from librarian.infrastructure.observability.logging import librarian_logger, metrics
from librarian.infrastructure.storage.file_store import FileStore
from .content_composer import compose_content
from .errors import (
    DocumentAlreadyExists, DuplicateFilepath, DuplicateRangeRequest, EmptyPlan,
    FilepathAlreadyCompleted, InvalidDocumentName, InvalidFilepaths, NoPendingSession,
    SectionWriteFailed, SessionAlreadyActive, SessionIncomplete, SessionNotFound,
    SessionNotStarted, TooManySections, UnknownFilepath,
)
from .paths import common_path_prefix, has_dot_segment, is_valid_section_filepath, normalize_path, strip_prefix
from .response_formatter import (
    MAX_SECTIONS_PER_CALL,
    format_end_session_response,
    format_pending_session_prompt,
    format_session_start_response,
    format_source_document_response,
    format_write_sections_response,
    select_source_window,
)
from .session_store import SessionStore
from .source_document import SourceDocumentFetcher, source_document_to_lines, split_source_lines

logger = structlog.get_logger(__name__)


class KnowledgeStructuringEngine:
    """Runs knowledge structuring sessions from request to completion"""

    def __init__(
        self,
        file_store: FileStore,
        store: Optional[SessionStore] = None,
        fetcher: Optional[SourceDocumentFetcher] = None,
        document_index: Optional[Any] = None
    ):
        self.file_store = file_store
        self.store = store or SessionStore()
        self.fetcher = fetcher or SourceDocumentFetcher()
        # Anything with an async reload_documents(); refreshed after writes
        self.document_index = document_index

    async def start_pending_session(self, document_name: str, document_source: str) -> str:
        """Fetch the source document and open a pending session for it"""

        document_name = document_name.strip().strip("/")
        if not document_name or has_dot_segment(document_name):
            raise InvalidDocumentName(document_name)

        if await self.file_store.has_content(document_name):
            raise DocumentAlreadyExists(document_name)

        source_document = await self.fetcher.fetch(document_source)

        session_token = str(uuid.uuid4())
        pending = PendingSession(
            session_token=session_token,
            document_name=document_name,
            document_source=document_source,
            source_document=source_document,
            source_document_lines=source_document_to_lines(source_document),
            source_document_lines_without_line_numbers=split_source_lines(source_document),
        )
        await self.store.put_pending(pending)

        metrics.increment_counter("sessions.pending")
        librarian_logger.log_session_transition(
            session_token, "none", pending.phase.value,
            {"document_name": document_name, "lines": pending.total_lines}
        )

        window = select_source_window(pending.source_document_lines)
        return format_pending_session_prompt(session_token, document_name, window)

    async def start_session(self, session_token: str, section_filepaths: Sequence[str]) -> str:
        """Commit a file plan and turn the pending session into an active one"""

        async with self.store.locked(session_token):
            active = await self.store.get_active(session_token)
            if active is not None:
                raise SessionAlreadyActive(active.get_status())

            pending = await self.store.get_pending(session_token)
            if pending is None:
                raise NoPendingSession()

            filepaths = self._validate_plan(section_filepaths)
            session = Session.promote(pending, filepaths, common_path_prefix(filepaths))
            await self.store.promote(session)

        metrics.increment_counter("sessions.started")
        await self._update_active_gauge()
        librarian_logger.log_session_transition(
            session_token, pending.phase.value, session.phase.value, session.get_state_summary()
        )

        return format_session_start_response(session_token, session.remaining_filepaths)

    async def show_source_document(self, session_token: str, source_range: Optional[str] = None) -> str:
        """Show a window of the source document for a pending or active session"""

        async with self.store.locked(session_token):
            record = await self.store.get_any(session_token)
            if record is None:
                raise SessionNotFound()

            if source_range and source_range == record.last_requested_range:
                raise DuplicateRangeRequest(source_range)

            record.last_requested_range = source_range or ""
            window = select_source_window(record.source_document_lines, source_range)

        logger.debug(
            "Source window shown",
            session_token=session_token,
            start=window.start + 1,
            end=window.end,
            total=window.total
        )
        return format_source_document_response(session_token, window)

    async def write_sections(self, session_token: str, sections: Sequence[SectionWrite]) -> str:
        """Compose and persist a batch of planned sections.

        The batch is validated as a whole before anything is written. The
        writes themselves are sequential and not atomic: if one fails, the
        files before it stay written and only the failed one goes back to
        the remaining set.
        """

        async with self.store.locked(session_token):
            session = await self._require_active(session_token)

            if len(sections) > MAX_SECTIONS_PER_CALL:
                raise TooManySections(len(sections), MAX_SECTIONS_PER_CALL, session.get_status())

            targets = self._validate_batch(session, sections)

            written: List[str] = []
            try:
                for filepath, section in targets:
                    await self._write_section(session, filepath, section)
                    written.append(filepath)
            finally:
                session.recompute_remaining()
                if written:
                    metrics.increment_counter("sections.written", len(written))
                    librarian_logger.log_session_event(
                        "sections_written", session_token,
                        {"files": written, "remaining": len(session.remaining_filepaths)}
                    )
                    await self._refresh_index()

            return format_write_sections_response(
                session_token,
                written,
                session.remaining_filepaths,
                session.completed_filepaths,
            )

    async def end_session(self, session_token: str) -> str:
        """Finish a session once every planned file has been written"""

        async with self.store.locked(session_token):
            session = await self._require_active(session_token)

            if session.remaining_filepaths:
                raise SessionIncomplete(session.remaining_filepaths, session.get_status())

            await self.store.delete_active(session_token)

        metrics.increment_counter("sessions.ended")
        await self._update_active_gauge()
        librarian_logger.log_session_transition(
            session_token, session.phase.value, SessionPhase.ENDED.value, session.get_state_summary()
        )
        await self._refresh_index()

        return format_end_session_response(
            session.completed_filepaths,
            session_token,
            session.common_path_prefix,
            session.document_name,
        )

    async def _require_active(self, session_token: str) -> Session:
        session = await self.store.get_active(session_token)
        if session is not None:
            return session
        if await self.store.get_pending(session_token) is not None:
            raise SessionNotStarted()
        raise SessionNotFound()

    @staticmethod
    def _validate_plan(section_filepaths: Sequence[str]) -> List[str]:
        """Reject the whole plan if any filepath is invalid; returns normalized paths"""

        if not section_filepaths:
            raise EmptyPlan()

        invalid = [
            filepath for filepath in section_filepaths
            if not is_valid_section_filepath(filepath.strip())
        ]
        if invalid:
            raise InvalidFilepaths(invalid)

        return list(dict.fromkeys(normalize_path(filepath) for filepath in section_filepaths))

    @staticmethod
    def _validate_batch(session: Session, sections: Sequence[SectionWrite]) -> List[Tuple[str, SectionWrite]]:
        """Check every entry before any write; the first failure aborts the batch"""

        targets: List[Tuple[str, SectionWrite]] = []
        seen = set()

        for section in sections:
            filepath = normalize_path(section.filepath)
            if filepath not in session.section_filepaths:
                raise UnknownFilepath(section.filepath, session.get_status())
            if filepath in session.completed_filepaths:
                raise FilepathAlreadyCompleted(section.filepath, session.get_status())
            if filepath in seen:
                raise DuplicateFilepath(section.filepath, session.get_status())

            seen.add(filepath)
            targets.append((filepath, section))

        return targets

    async def _write_section(self, session: Session, filepath: str, section: SectionWrite):
        content = compose_content(
            section.content_specifiers,
            session.source_document_lines_without_line_numbers,
        )
        text = serialize_section(section.tags, session.document_source, content)

        session.mark_completed(filepath)

        relative_path = f"{session.document_name}{strip_prefix(filepath, session.common_path_prefix)}"
        try:
            await self.file_store.write_text(relative_path, text)
        except Exception as e:
            session.mark_remaining(filepath)
            logger.error("Section write failed", filepath=filepath, error=str(e), error_type=type(e).__name__)
            raise SectionWriteFailed(filepath, str(e), session.get_status()) from e
        except BaseException:
            # Cancelled mid-write; the file may be partial
            session.mark_remaining(filepath)
            raise

    async def _refresh_index(self):
        if self.document_index is not None:
            await self.document_index.reload_documents()

    async def _update_active_gauge(self):
        stats = await self.store.get_stats()
        metrics.set_gauge("sessions.active", stats["active_sessions"])
