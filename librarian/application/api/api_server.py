from typing import Dict, Any, Optional
from contextlib import asynccontextmanager
import asyncio
import structlog
import httpx
from fastapi import FastAPI, Request

from librarian import __version__
from librarian.domain.library.librarian import Librarian
from librarian.domain.structuring.session_engine import KnowledgeStructuringEngine
from librarian.domain.structuring.session_store import SessionStore
from librarian.domain.structuring.source_document import SourceDocumentFetcher
from librarian.domain.tool.tool_executor import ToolExecutor
from librarian.infrastructure.config.settings import LibrarianSettings
from librarian.infrastructure.observability.logging import metrics
from librarian.infrastructure.storage.file_store import FileStore
from .route import tools as tools_route
from .tools import build_tool_registry

logger = structlog.get_logger(__name__)


def create_app(
    settings: LibrarianSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """Create the FastAPI application serving the librarian tools"""

    file_store = FileStore(settings.docs_root)
    librarian = Librarian(settings.docs_root)
    session_store = SessionStore(ttl_seconds=settings.session_ttl_seconds)
    fetcher = SourceDocumentFetcher(timeout=settings.fetch_timeout_seconds, transport=transport)
    engine = KnowledgeStructuringEngine(
        file_store,
        store=session_store,
        fetcher=fetcher,
        document_index=librarian
    )
    registry = build_tool_registry(engine, librarian)
    executor = ToolExecutor(registry, timeout_seconds=settings.tool_timeout_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        eviction_task = None
        if settings.session_ttl_seconds > 0:
            eviction_task = asyncio.create_task(
                session_store.evict_periodically(settings.eviction_interval_seconds)
            )
        logger.info(
            "Librarian started",
            docs_root=str(settings.docs_root),
            tools=len(registry.tools),
            session_ttl_seconds=settings.session_ttl_seconds
        )

        yield

        if eviction_task is not None:
            eviction_task.cancel()
            try:
                await eviction_task
            except asyncio.CancelledError:
                pass
        await session_store.clear()
        logger.info("Librarian stopped")

    app = FastAPI(
        title="Librarian",
        description="Knowledge structuring sessions and a tagged markdown document library",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.file_store = file_store
    app.state.librarian = librarian
    app.state.session_store = session_store
    app.state.engine = engine
    app.state.tool_registry = registry
    app.state.tool_executor = executor

    app.include_router(tools_route.router)

    @app.get("/health")
    async def health(request: Request) -> Dict[str, Any]:
        """Service status with session store stats and metrics"""

        return {
            "status": "healthy",
            "version": __version__,
            "sessions": await request.app.state.session_store.get_stats(),
            "storage": request.app.state.file_store.get_stats(),
            "metrics": metrics.get_metrics_summary(),
        }

    return app
