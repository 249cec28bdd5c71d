"""structlog setup for kgmem.

All log output goes to stderr. Stdout carries command results and, under
``kgmem serve``, the MCP stdio stream.

Library modules log through plain ``logging.getLogger(__name__)`` and stay
silent until :func:`configure_logging` installs the kgmem handler. That
handler renders every record through structlog (console or JSON) and
applies one level policy by namespace: ``kgmem.*`` records pass from
DEBUG with ``--verbose`` and from WARNING otherwise; records from any
other logger (mcp, uvicorn, httpx, ...) need WARNING.

Records emitted while :func:`kgmem.services.graph.run_operation` is
running carry the operation name as ``op`` via structlog contextvars.
"""

from __future__ import annotations

import logging
import sys

import structlog

_NAMESPACE = "kgmem"
_HANDLER_NAME = "kgmem-stderr"

_PRE_CHAIN: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
)


class NamespaceLevelFilter(logging.Filter):
    """Admit kgmem records from *level*, everything else from WARNING."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        own = record.name == _NAMESPACE or record.name.startswith(f"{_NAMESPACE}.")
        return record.levelno >= (self.level if own else logging.WARNING)


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install (or replace) the kgmem stderr handler on the root logger.

    Args:
        verbose: Let DEBUG records from ``kgmem`` loggers through.
        log_json: One JSON object per line instead of console rendering.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(NamespaceLevelFilter(level))
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_PRE_CHAIN),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
