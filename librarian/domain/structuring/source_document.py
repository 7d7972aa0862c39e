"""
Source document acquisition and line indexing.
"""

from typing import List, Optional
import httpx
import structlog

from .errors import EmptySourceDocument, FetchFailure, UnsupportedSourceFormat

logger = structlog.get_logger(__name__)

USER_AGENT = "Librarian/1.0.0"
ACCEPT = "text/markdown, text/plain"
SUPPORTED_SCHEMES = ("http://", "https://")


class SourceDocumentFetcher:
    """Fetches raw source documents over HTTP(S)"""

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, source: str) -> str:
        """Fetch a source document and return its trimmed text"""

        if not source.startswith(SUPPORTED_SCHEMES):
            raise UnsupportedSourceFormat(source)

        headers = {
            "User-Agent": USER_AGENT,
            "Accept": ACCEPT,
            "Cache-Control": "no-cache",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(source, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Source fetch failed", source=source, error=str(e))
            raise FetchFailure(str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.warning("Source fetch rejected", source=source, status_code=response.status_code)
            raise FetchFailure(response.reason_phrase or str(response.status_code))

        text = response.text.replace("\r\n", "\n").strip()
        if not text:
            raise EmptySourceDocument()

        logger.info("Source document fetched", source=source, characters=len(text))
        return text


def split_source_lines(source_document: str) -> List[str]:
    """Composition form: bare lines without numbering"""
    return source_document.split("\n")


def source_document_to_lines(source_document: str) -> List[str]:
    """Display form: each line prefixed with a right-justified 1-based number"""

    lines = split_source_lines(source_document)
    width = len(str(len(lines)))
    return [f"{str(index + 1).rjust(width)} | {line}" for index, line in enumerate(lines)]
