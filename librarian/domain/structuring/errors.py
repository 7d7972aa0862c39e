"""
Errors raised by the knowledge structuring session engine.

Every error carries a human-readable message for the calling agent. State
and plan errors raised against an existing session also carry a status
snapshot so the agent can see where it stands.
"""

from typing import List, Optional

from librarian.domain.models.session_state import SessionStatus


class StructuringError(Exception):
    """Base error for knowledge structuring sessions"""

    def __init__(self, message: str, status: Optional[SessionStatus] = None):
        super().__init__(message)
        self.message = message
        self.status = status


# Plan errors

class PlanError(StructuringError):
    """The agent's plan or write batch was rejected as a whole"""


class InvalidFilepaths(PlanError):
    def __init__(self, filepaths: List[str], status: Optional[SessionStatus] = None):
        self.filepaths = list(filepaths)
        listing = "\n".join(f"- {filepath}" for filepath in self.filepaths)
        super().__init__(
            f"The following filepaths are invalid:\n{listing}\n\n"
            "All files must end with .md and cannot contain paths that start or end with a dot.",
            status,
        )


class EmptyPlan(PlanError):
    def __init__(self):
        super().__init__("No filepaths were given. Propose at least one .md filepath.")


class InvalidDocumentName(PlanError):
    def __init__(self, document_name: str):
        self.document_name = document_name
        super().__init__(
            f"The document name `{document_name}` is invalid. "
            "It must not be empty or contain segments that start or end with a dot."
        )


class DocumentAlreadyExists(PlanError):
    def __init__(self, document_name: str):
        self.document_name = document_name
        super().__init__(
            f"The document `{document_name}` already exists. Choose a different document name."
        )


class UnknownFilepath(PlanError):
    def __init__(self, filepath: str, status: Optional[SessionStatus] = None):
        self.filepath = filepath
        super().__init__(f"The filepath `{filepath}` is not part of the session.", status)


class FilepathAlreadyCompleted(PlanError):
    def __init__(self, filepath: str, status: Optional[SessionStatus] = None):
        self.filepath = filepath
        super().__init__(f"The filepath `{filepath}` has already been completed.", status)


class DuplicateFilepath(PlanError):
    def __init__(self, filepath: str, status: Optional[SessionStatus] = None):
        self.filepath = filepath
        super().__init__(f"The filepath `{filepath}` appears more than once in this batch.", status)


class TooManySections(PlanError):
    def __init__(self, count: int, limit: int, status: Optional[SessionStatus] = None):
        self.count = count
        self.limit = limit
        super().__init__(f"{count} sections were given, but at most {limit} can be written per call.", status)


# State errors

class SessionStateError(StructuringError):
    """The session is not in a state that permits the operation"""


class SessionAlreadyActive(SessionStateError):
    def __init__(self, status: Optional[SessionStatus] = None):
        super().__init__("Session already started.", status)


class NoPendingSession(SessionStateError):
    def __init__(self):
        super().__init__("No pending session found with this token.")


class SessionNotFound(SessionStateError):
    def __init__(self):
        super().__init__("Session does not exist or has already been finished.")


class SessionNotStarted(SessionStateError):
    def __init__(self):
        super().__init__(
            "Session has not been started yet. Call `knowledgeStructuringSession.start` with your filepaths first."
        )


class SessionIncomplete(SessionStateError):
    def __init__(self, remaining_filepaths: List[str], status: Optional[SessionStatus] = None):
        self.remaining_filepaths = list(remaining_filepaths)
        super().__init__(
            "The session cannot be ended because there are still sections to be completed.",
            status,
        )


class SectionWriteFailed(SessionStateError):
    def __init__(self, filepath: str, reason: str, status: Optional[SessionStatus] = None):
        self.filepath = filepath
        self.reason = reason
        super().__init__(
            f"Failed to write `{filepath}`: {reason}. Files written before it were kept; retry the remaining files.",
            status,
        )


# Acquisition errors

class SourceUnavailable(StructuringError):
    """The source document could not be acquired"""


class UnsupportedSourceFormat(SourceUnavailable):
    def __init__(self, source: str):
        self.source = source
        super().__init__("Unsupported source format. Only HTTP(S) URLs are supported.")


class FetchFailure(SourceUnavailable):
    def __init__(self, status_text: str):
        self.status_text = status_text
        super().__init__(f"Failed to fetch source document: {status_text}")


class EmptySourceDocument(SourceUnavailable):
    def __init__(self):
        super().__init__("Source document is empty.")


# Inspection

class DuplicateRangeRequest(StructuringError):
    def __init__(self, source_range: str):
        self.source_range = source_range
        super().__init__(
            f"The range `{source_range}` was just shown. Request a different range or continue writing sections."
        )
