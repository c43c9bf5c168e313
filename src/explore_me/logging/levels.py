"""
HUMAN logging level -- readable progress for the person at the terminal.

Custom level between INFO (20) and WARNING (30). It does not indicate
severity: it marks the few high-level events (build started, build
skipped, N results found) a user wants to see without technical noise.

Hierarchy:
    debug  (10) -> per-entry details, skipped entries
    info   (20) -> system operations (config loaded, files written)
    human  (25) -> what the tool did: index built/skipped, search results
    warn   (30) -> non-fatal problems
    error  (40) -> errors
"""

import logging

import structlog

HUMAN = 25
logging.addLevelName(HUMAN, "HUMAN")


def _human_method(self, message, *args, **kwargs):
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)

logging.Logger.human = _human_method

# Register the level in structlog to avoid KeyError: 25
for _module in (getattr(structlog, "stdlib", None), getattr(structlog, "_log_levels", None)):
    _table = getattr(_module, "LEVEL_TO_NAME", None)
    if isinstance(_table, dict):
        _table[HUMAN] = "human"
