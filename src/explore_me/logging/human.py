"""
Human Log — formatter and helper for readable progress logs.

Produces short lines on stderr so the user can follow what the indexer
and the search engine are doing without technical noise.

Example output:
    ✓ Indexed ~/photos → ~/.explore-me
      1342 files, 12 extensions, 87 tags (210 ms)

    Index up to date (~/photos unchanged)

    Search: 20 results
"""

import logging
import sys

from .levels import HUMAN


class HumanFormatter:
    """Formatter for HUMAN-level events.

    Turns structured events into readable text. Each event type has its
    own format; unknown events produce no output.
    """

    def format_event(self, event: str, **kw) -> str | None:
        """Format an event as readable text.

        Args:
            event: Event name (e.g. "index.build.complete")
            **kw: Event parameters

        Returns:
            Formatted text, or None if the event has no defined format
        """
        match event:

            # ── INDEX ────────────────────────────────────────────────────
            case "index.build.skipped":
                src = kw.get("src", "?")
                return f"Index up to date ({src} unchanged)"

            case "index.build.complete":
                src = kw.get("src", "?")
                data = kw.get("data", "?")
                files = kw.get("files", "?")
                exts = kw.get("extensions", "?")
                tags = kw.get("tags", "?")
                ms = kw.get("duration_ms", "?")
                return (
                    f"✓ Indexed {src} → {data}\n"
                    f"  {files} files, {exts} extensions, {tags} tags ({ms} ms)"
                )

            # ── SEARCH ───────────────────────────────────────────────────
            case "search.complete":
                results = kw.get("results", "?")
                noun = "result" if results == 1 else "results"
                return f"Search: {results} {noun}"

            case _:
                return None


class HumanLogHandler(logging.Handler):
    """Logging handler that filters HUMAN events and formats them.

    Only processes records of level HUMAN (25). Writes to stderr so
    stdout stays clean for JSON output.
    """

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            # structlog's wrap_for_formatter leaves the event dict in record.msg
            if isinstance(record.msg, dict):
                kw = dict(record.msg)
                event = kw.pop("event", "")
            else:
                event = getattr(record, "event", None) or record.getMessage()
                kw = {}

            formatted = self.formatter_inst.format_event(event, **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


class HumanLog:
    """Typed helper to emit HUMAN-level logs from code.

    Usage:
        hlog = HumanLog(structlog.get_logger())
        hlog.build_skipped(src="photos")
        hlog.search_complete(results=3)
    """

    def __init__(self, logger) -> None:
        self._log = logger

    def build_skipped(self, src: str) -> None:
        self._log.log(HUMAN, "index.build.skipped", src=src)

    def build_complete(
        self,
        src: str,
        data: str,
        files: int,
        extensions: int,
        tags: int,
        duration_ms: float,
    ) -> None:
        self._log.log(
            HUMAN, "index.build.complete",
            src=src,
            data=data,
            files=files,
            extensions=extensions,
            tags=tags,
            duration_ms=duration_ms,
        )

    def search_complete(self, results: int) -> None:
        self._log.log(HUMAN, "search.complete", results=results)
