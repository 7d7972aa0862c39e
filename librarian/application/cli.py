from typing import List, Optional
import argparse
import sys
import structlog
import uvicorn

from librarian.application.api.api_server import create_app
from librarian.infrastructure.config.settings import ConfigurationError, check_docs_root_exists, get_settings
from librarian.infrastructure.observability.logging import setup_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="librarian",
        description="Serve knowledge structuring sessions and the tagged markdown library"
    )
    parser.add_argument("--docs-root", help="Root directory for documentation files (default: ./docs)")
    parser.add_argument("--host", help="Address to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Port to listen on (default: 8000)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-format", choices=["json", "console"], help="Log renderer")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings(
        docs_root=args.docs_root,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_format=args.log_format,
    )
    setup_logging(settings.log_level, settings.log_format)

    try:
        check_docs_root_exists(settings)
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 1

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
