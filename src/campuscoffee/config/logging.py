"""structlog configuration for campuscoffee.

Everything goes to stderr so stdout stays reserved for command results:
- Human (default): console renderer, colored when stderr is a TTY
- JSON (--log-json): one JSON object per line

Stdlib loggers (SQLAlchemy, Alembic) are routed through the same
formatter via ``foreign_pre_chain``.
"""

from __future__ import annotations

import logging
import sys

import structlog

APP_LOGGER = "campuscoffee"


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    sql_echo: bool = False,
) -> None:
    """Configure structlog processors and route all records to stderr.

    Args:
        verbose: DEBUG for the ``campuscoffee`` logger. When False, WARNING+.
        log_json: Use the JSON renderer instead of the console renderer.
        sql_echo: Emit SQLAlchemy statement logs at INFO.
    """
    app_level = logging.DEBUG if verbose else logging.WARNING

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(app_level)
    logging.getLogger("alembic").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)
