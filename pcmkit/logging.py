"""Structured logging for pcmkit.

structlog over stdlib logging. Records go to stderr so that commands
writing audio or reports to stdout stay clean. Two renderers:
- console: human-readable (default)
- json: one JSON object per line
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

_LOG_FORMAT_ENV = "PCMKIT_LOG_FORMAT"
_LOG_LEVEL_ENV = "PCMKIT_LOG_LEVEL"

_configured = False


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    log_format: str | None = None,
    level: str | None = None,
    *,
    force: bool = False,
) -> None:
    """Configure structured logging for the library and the CLI.

    Idempotent unless *force* is set (the CLI forces a reconfigure when
    ``--log-level`` is passed after the first logger was created).

    Args:
        log_format: "json" or "console". Default via PCMKIT_LOG_FORMAT env or "console".
        level: Log level name. Default via PCMKIT_LOG_LEVEL env or "WARNING".
        force: Reconfigure even if logging was already configured.
    """
    global _configured
    if _configured and not force:
        return

    resolved_format = log_format or os.environ.get(_LOG_FORMAT_ENV, "console")
    resolved_level = (level or os.environ.get(_LOG_LEVEL_ENV, "WARNING")).upper()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(resolved_format),
            ],
        )
    )

    package_logger = logging.getLogger("pcmkit")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, resolved_level, logging.WARNING))
    package_logger.propagate = False

    _configured = True


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Return a logger bound to a pcmkit component.

    Args:
        component: Dotted component name (e.g. "codec.pcm", "processing.pipeline").
    """
    configure_logging()
    return structlog.get_logger(f"pcmkit.{component}").bind(component=component)  # type: ignore[no-any-return]
