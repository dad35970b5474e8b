"""Structured logging setup.

Library code only calls ``structlog.get_logger()``; the CLI calls
``configure_logging`` once so that events go to stderr and never mix with
command output on stdout.
"""

import logging
import sys

import structlog


class _StderrHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stderr``."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def _processors(time_fmt: str) -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt=time_fmt),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(level: str = "WARNING", fmt: str = "text") -> None:
    """Route structlog events through a stderr handler.

    Args:
        level: Minimum level name (e.g. "INFO")
        fmt: ``"text"`` for console rendering, ``"json"`` for JSON lines
    """
    if fmt == "json":
        pre_chain = _processors(time_fmt="iso")
        renderer = structlog.processors.JSONRenderer()
    else:
        pre_chain = _processors(time_fmt="%H:%M:%S")
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=pre_chain,
    )
    handler = _StderrHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
