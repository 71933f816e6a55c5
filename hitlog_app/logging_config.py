"""
structlog configuration.

Every module gets its logger with ``structlog.get_logger(__name__)`` and logs
event names with keyword context, e.g.::

    log.info("hit_logged", ip=ip, host=host)
"""

import logging

import structlog


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog for the whole process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        fmt: "console" for human readable lines, "json" for one JSON object per line
    """
    min_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
