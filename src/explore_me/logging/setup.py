"""
Full configuration of the structured logging system.

Three independent pipelines:
1. File (JSON): if config.file is set. Captures everything (DEBUG+).
2. Human handler (stderr): HUMAN events only, i.e. what the tool did.
3. Technical console (stderr): WARNING by default, INFO with -v,
   DEBUG with -vv. Excludes HUMAN.

With --quiet only the file pipeline remains.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import LoggingConfig
from .human import HumanLogHandler
from .levels import HUMAN


def configure_logging(
    config: LoggingConfig,
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Configure the whole logging system.

    Args:
        config: Logging configuration (level, file, verbose)
        json_output: If True, disables the human and console handlers
        quiet: If True, disables the human and console handlers
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()

    # Root logger captures everything; handlers filter by level
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[],
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    show_human = not quiet and not json_output and config.level in ("debug", "info", "human")
    show_console = not quiet and not json_output

    # ── Pipeline 1: JSON file ─────────────────────────────────────────────
    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(file_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(file_handler)

    # ── Pipeline 2: Human handler ─────────────────────────────────────────
    if show_human:
        human_handler = HumanLogHandler(stream=sys.stderr)
        human_handler.setLevel(HUMAN)
        human_handler.addFilter(lambda record: record.levelno == HUMAN)
        logging.root.addHandler(human_handler)

    # ── Pipeline 3: Technical console ─────────────────────────────────────
    if show_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_console_level(config))
        console_handler.addFilter(lambda record: record.levelno != HUMAN)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(
                    colors=sys.stderr.isatty(),
                ),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(console_handler)

    # --quiet without a file: keep logging's last-resort handler silent
    if not logging.root.handlers:
        logging.root.addHandler(logging.NullHandler())

    # Every handler renders through ProcessorFormatter, so the event dict
    # travels to the handlers unrendered
    structlog.configure(
        processors=shared_processors + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _console_level(config: LoggingConfig) -> int:
    """Level for the console handler.

    The -v count wins when given; otherwise the configured level applies,
    with "human" mapped to WARNING because HUMAN events have their own
    handler.

    Args:
        config: Logging configuration

    Returns:
        Python logging level
    """
    if config.verbose:
        return _verbose_to_level(config.verbose)
    return {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "human": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
    }[config.level]


def _verbose_to_level(verbose: int) -> int:
    """Convert a -v count to a logging level.

    -v      → INFO
    -vv+    → DEBUG
    """
    levels = {
        0: logging.WARNING,
        1: logging.INFO,
    }
    return levels.get(verbose, logging.DEBUG)
