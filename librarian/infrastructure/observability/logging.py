import structlog
import logging
import sys
from typing import Dict, List, Any, Optional
from datetime import datetime, timezone
import os


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "librarian"
) -> None:
    """Setup structured logging configuration"""

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=os.getenv("ENVIRONMENT", "development"),
        version=os.getenv("SERVICE_VERSION", "unknown")
    )


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add service context to all log entries"""

    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()

    # Session token is bound while a tool call runs
    session_token = structlog.contextvars.get_contextvars().get("session_token")
    if session_token and "session_token" not in event_dict:
        event_dict["session_token"] = session_token

    return event_dict


class LibrarianLogger:
    """Specialized logger for structuring sessions and tool calls"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_session_event(
        self,
        event_type: str,
        session_token: str,
        data: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        """Log session-specific events"""

        self.logger.info(
            "session_event",
            event_type=event_type,
            session_token=session_token,
            data=data or {},
            **kwargs
        )

    def log_tool_execution(
        self,
        tool_name: str,
        input_data: Dict[str, Any],
        duration_ms: Optional[float] = None,
        success: bool = True,
        error: Optional[str] = None
    ):
        """Log tool execution events"""

        self.logger.info(
            "tool_execution",
            tool_name=tool_name,
            input_keys=sorted(input_data.keys()),
            duration_ms=duration_ms,
            success=success,
            error=error
        )

    def log_session_transition(
        self,
        session_token: str,
        from_state: str,
        to_state: str,
        state_summary: Optional[Dict[str, Any]] = None
    ):
        """Log session state machine transitions"""

        self.logger.info(
            "session_transition",
            session_token=session_token,
            from_state=from_state,
            to_state=to_state,
            state_summary=state_summary or {}
        )


# Global logger instance
librarian_logger = LibrarianLogger("librarian")


class MetricsCollector:
    """In-process counters, gauges and latencies reported by /health"""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.gauges: Dict[str, float] = {}
        self.latencies: Dict[str, List[float]] = {}

    def record_latency(self, operation: str, duration_ms: float):
        self.latencies.setdefault(operation, []).append(duration_ms)
        librarian_logger.logger.debug("Latency recorded", operation=operation, duration_ms=duration_ms)

    def increment_counter(self, name: str, value: int = 1):
        self.counters[name] = self.counters.get(name, 0) + value

    def set_gauge(self, name: str, value: float):
        self.gauges[name] = value

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Flat view: counters and gauges by name, latencies under latency.<operation>"""

        summary: Dict[str, Any] = {**self.counters, **self.gauges}
        for operation, samples in self.latencies.items():
            summary[f"latency.{operation}"] = {
                "count": len(samples),
                "avg": sum(samples) / len(samples),
                "min": min(samples),
                "max": max(samples),
            }
        return summary


metrics = MetricsCollector()
