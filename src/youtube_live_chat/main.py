"""
Main application entry point for the YouTube Live Chat client.

This module configures logging and runs the standalone host application.
"""

import asyncio
import logging

import structlog

from .config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging."""
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level), format="%(message)s"
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.log_format == "json"
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Main entry point."""
    from .standalone import main as standalone_main

    setup_logging()
    asyncio.run(standalone_main())


if __name__ == "__main__":
    main()
