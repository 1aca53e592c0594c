"""Structured logging setup shared by every entry point."""

import logging
import sys

import structlog


def setup_logging(
    service_name: str | None = None,
    level: str = "INFO",
    json: bool = False,
) -> None:
    """Configure structlog on top of the standard library logger.

    Args:
        service_name: Added to every event as ``service`` when given.
        level: Standard library level name.
        json: Render JSON lines instead of the human-readable console format.
    """
    logging.root.handlers.clear()

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if service_name:

        def add_service(
            logger: object, method_name: str, event_dict: structlog.types.EventDict
        ) -> structlog.types.EventDict:
            event_dict["service"] = service_name
            return event_dict

        processors.insert(0, add_service)

    if json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
