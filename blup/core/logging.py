import logging
import sys

import structlog


def setup_logging(level: str = "WARNING") -> None:
    """Route structlog and stdlib logging to stderr through one console renderer.

    An unknown ``level`` name falls back to WARNING.
    """
    level_name = level.strip().upper()
    known_level = level_name in logging.getLevelNamesMapping()
    common_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *common_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=common_processors,
        processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level_name if known_level else logging.WARNING)

    # websockets and httpx log every frame/request at DEBUG
    for logger_name in ("websockets", "httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(max(root_logger.level, logging.INFO))

    if not known_level:
        structlog.get_logger(__name__).warning("Unknown log level, using WARNING", level=level)
