"""Scoped diagnostic sink shared by the components of one scan session."""

import logging
from typing import Any

from wcagscan.utils.debug import debug_print

from .models import LOG_LEVELS, LogEntry, utc_timestamp

_STDLIB_LEVELS = {
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "debug": logging.DEBUG,
}


class LogCapture:
    """Collect structured log entries for one orchestrator session.

    Components receive the capture by reference and write to it instead of a
    process-wide console. Every line is forwarded to the ``wcagscan.scan``
    logger; it is only recorded as a :class:`LogEntry` while the capture is
    installed, so two orchestrators never see each other's entries.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("wcagscan.scan")
        self._entries: list[LogEntry] = []
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        """Start recording entries."""
        self._installed = True

    def restore(self) -> None:
        """Stop recording entries; already captured entries are kept."""
        self._installed = False

    def log(self, level: str, message: str, **details: Any) -> None:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self._logger.log(_STDLIB_LEVELS[level], message)
        debug_print(level, message, **details)
        if self._installed:
            self._entries.append(
                LogEntry(
                    timestamp=utc_timestamp(),
                    level=level,
                    message=message,
                    details=details or None,
                )
            )

    def info(self, message: str, **details: Any) -> None:
        self.log("info", message, **details)

    def warn(self, message: str, **details: Any) -> None:
        self.log("warn", message, **details)

    def error(self, message: str, **details: Any) -> None:
        self.log("error", message, **details)

    def debug(self, message: str, **details: Any) -> None:
        self.log("debug", message, **details)

    def entries(self) -> list[LogEntry]:
        """Return a snapshot of captured entries in capture order."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
