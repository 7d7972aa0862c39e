from typing import Dict, Any, List
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionPhase(str, Enum):
    """Knowledge structuring session lifecycle phase"""
    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"


class PendingSession(BaseModel):
    """Session state before the agent commits to a file plan"""
    session_token: str = Field(description="Token the session is stored under")
    document_name: str = Field(description="Destination subtree under the documents root")
    document_source: str = Field(description="Locator the source document was fetched from")
    source_document: str = Field(description="Trimmed raw source text")
    source_document_lines: List[str] = Field(default_factory=list, description="Line-numbered display form")
    source_document_lines_without_line_numbers: List[str] = Field(default_factory=list, description="Bare lines used for composition")
    last_requested_range: str = Field(default="", description="Last source range shown for this token")
    timestamp: datetime = Field(default_factory=utcnow)
    last_activity: datetime = Field(default_factory=utcnow)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase.PENDING

    @property
    def total_lines(self) -> int:
        return len(self.source_document_lines_without_line_numbers)

    def touch(self):
        """Update last activity timestamp"""
        self.last_activity = utcnow()


class SessionStatus(BaseModel):
    """Snapshot of session progress attached to responses and errors"""
    session_token: str
    remaining_filepaths: List[str] = Field(default_factory=list)
    completed_filepaths: List[str] = Field(default_factory=list)


class Session(PendingSession):
    """Active session with a committed file plan"""
    common_path_prefix: str = Field(default="", description="Shared leading directory of every planned filepath")
    section_filepaths: List[str] = Field(default_factory=list, description="Normalized planned filepaths")
    remaining_filepaths: List[str] = Field(default_factory=list)
    completed_filepaths: List[str] = Field(default_factory=list)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase.ACTIVE

    @classmethod
    def promote(cls, pending: PendingSession, section_filepaths: List[str], common_path_prefix: str) -> "Session":
        """Build an active session from a pending one"""
        return cls(
            **pending.model_dump(),
            common_path_prefix=common_path_prefix,
            section_filepaths=list(section_filepaths),
            remaining_filepaths=list(section_filepaths),
            completed_filepaths=[],
        )

    def mark_completed(self, filepath: str):
        """Move a planned filepath into the completed set"""
        if filepath not in self.completed_filepaths:
            self.completed_filepaths.append(filepath)
        self.recompute_remaining()

    def mark_remaining(self, filepath: str):
        """Return a filepath to the remaining set"""
        if filepath in self.completed_filepaths:
            self.completed_filepaths.remove(filepath)
        self.recompute_remaining()

    def recompute_remaining(self):
        completed = set(self.completed_filepaths)
        self.remaining_filepaths = [fp for fp in self.section_filepaths if fp not in completed]

    def get_status(self) -> SessionStatus:
        """Get a status snapshot of the session"""
        return SessionStatus(
            session_token=self.session_token,
            remaining_filepaths=list(self.remaining_filepaths),
            completed_filepaths=list(self.completed_filepaths),
        )

    def get_state_summary(self) -> Dict[str, Any]:
        """Get a summary of the current state for logging"""
        return {
            "document_name": self.document_name,
            "planned": len(self.section_filepaths),
            "remaining": len(self.remaining_filepaths),
            "completed": len(self.completed_filepaths),
            "last_activity": self.last_activity.isoformat()
        }


class SectionWrite(BaseModel):
    """One planned file to materialize from content specifiers"""
    filepath: str
    tags: List[str] = Field(default_factory=list)
    content_specifiers: List[str] = Field(default_factory=list)
