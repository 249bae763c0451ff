"""Route dragctl's log records through structlog onto stderr.

stdout belongs to command output (tables, JSON, quiet lines), so every
log line goes to stderr. ``--log-json`` switches the renderer to JSON
lines; ``-v`` and ``-q`` move the threshold of the ``dragctl`` loggers.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Loggers that stay at WARNING even under -v.
NOISY_LOGGERS = ("pluggy",)


def log_level(*, verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install a single stderr handler and set dragctl's log level.

    Stdlib ``logging`` calls (the state machine, rule set and plugin
    manager use them) and structlog calls share the same processor chain,
    so both come out in the same format. Calling this again replaces the
    handler instead of stacking another one.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

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
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("dragctl").setLevel(log_level(verbose=verbose, quiet=quiet))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
