from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
import asyncio
import time
import structlog

from librarian.domain.library.librarian import DocumentNotFound
from librarian.domain.structuring.errors import StructuringError
from librarian.domain.structuring.response_formatter import format_error_response
from librarian.infrastructure.observability.logging import librarian_logger, metrics
from .tool_registry import ToolRegistry, ToolConfig
from .tool_validator import ToolParameterValidator

logger = structlog.get_logger(__name__)


class UnknownTool(Exception):
    """Raised when a call names a tool that is not registered"""

    def __init__(self, tool_id: str):
        super().__init__(f"Unknown tool: {tool_id}")
        self.tool_id = tool_id


class ToolResult(BaseModel):
    """Text returned to the agent; failures carry is_error instead of raising"""
    text: str
    is_error: bool = False
    duration_ms: Optional[float] = Field(default=None, exclude=True)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


class ToolExecutor:
    """Validates arguments, runs the tool handler and renders any failure as text"""

    def __init__(self, registry: ToolRegistry, timeout_seconds: float = 120.0):
        self.registry = registry
        self.timeout_seconds = timeout_seconds
        self.validator = ToolParameterValidator()

    async def execute_tool(self, tool_id: str, parameters: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Execute a registered tool; raises UnknownTool only for unregistered ids"""

        tool = self.registry.get_tool(tool_id)
        if tool is None:
            raise UnknownTool(tool_id)

        parameters = parameters if parameters is not None else {}
        start_time = time.time()

        session_token = parameters.get("sessionToken") if isinstance(parameters, dict) else None
        with structlog.contextvars.bound_contextvars(tool_id=tool_id, session_token=session_token):
            result = await self._run(tool, parameters)

            duration_ms = (time.time() - start_time) * 1000
            result.duration_ms = duration_ms

            metrics.record_latency(f"tool.{tool_id}", duration_ms)
            if result.is_error:
                metrics.increment_counter(f"tool.{tool_id}.errors")

            librarian_logger.log_tool_execution(
                tool_name=tool_id,
                input_data=parameters if isinstance(parameters, dict) else {},
                duration_ms=duration_ms,
                success=not result.is_error,
                error=result.text if result.is_error else None
            )

        return result

    async def _run(self, tool: ToolConfig, parameters: Dict[str, Any]) -> ToolResult:
        validation = self.validator.validate_tool_call(tool.input_model, parameters)
        if not validation.is_valid:
            return ToolResult(
                text=f"Invalid arguments for {tool.id}: " + "; ".join(validation.errors),
                is_error=True
            )

        try:
            text = await asyncio.wait_for(tool.handler(validation.value), timeout=self.timeout_seconds)
            return ToolResult(text=text)

        except StructuringError as e:
            logger.info("Tool call rejected", tool_id=tool.id, error_type=type(e).__name__, error=e.message)
            return ToolResult(text=format_error_response(e), is_error=True)

        except DocumentNotFound as e:
            return ToolResult(text=f"Error. {e}", is_error=True)

        except asyncio.TimeoutError:
            logger.warning("Tool execution timeout", tool_id=tool.id, timeout_seconds=self.timeout_seconds)
            return ToolResult(
                text=f"Failed to {tool.id}: timed out after {self.timeout_seconds:g} seconds",
                is_error=True
            )

        except Exception as e:
            logger.error("Tool execution failed", tool_id=tool.id, error=str(e), exc_info=True)
            return ToolResult(text=f"Failed to {tool.id}: {e}", is_error=True)
